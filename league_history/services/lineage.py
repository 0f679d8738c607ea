import asyncio
import logging
from typing import Any, Dict, List, Optional, Set

from ..client import SleeperClient
from ..exceptions import LeagueNotFoundError
from ..models.history import SeasonRecord
from ..models.sleeper import League

logger = logging.getLogger(__name__)


def _positive_int(value: Any) -> Optional[int]:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return None
    return number if number > 0 else None


def season_record_from_league(league: League) -> SeasonRecord:
    """Raises ValueError when the league's season is not a year."""
    settings = league.settings or {}
    return SeasonRecord(
        league_id=league.league_id,
        season=int(league.season),
        name=league.name,
        status=league.status,
        previous_league_id=league.previous_league_id or None,
        playoff_week_start=_positive_int(settings.get("playoff_week_start")),
        playoff_week_end=_positive_int(settings.get("playoff_week_end")),
        last_regular_season_week=_positive_int(settings.get("last_regular_season_week")),
    )


def in_year_range(season: int, start_year: Optional[int], end_year: Optional[int]) -> bool:
    if start_year is not None and season < start_year:
        return False
    if end_year is not None and season > end_year:
        return False
    return True


class LineageResolver:
    """
    Finds every season of a league by following previous_league_id links
    backwards from a starting league.

    Each league id is fetched at most once, so a chain that loops back on
    itself still terminates. A failed fetch anywhere but the start ends the
    walk and keeps the seasons found so far.
    """

    def __init__(self, client: SleeperClient, use_history_index: bool = False):
        self.client = client
        self.use_history_index = use_history_index

    async def _fetch_season(self, league_id: str) -> Optional[SeasonRecord]:
        league = await self.client.get_league(league_id)
        if league is None:
            return None
        try:
            return season_record_from_league(league)
        except ValueError:
            logger.warning(f"League {league_id} has a non-numeric season {league.season!r}")
            return None

    async def resolve(
        self,
        start_league_id: str,
        start_year: Optional[int] = None,
        end_year: Optional[int] = None,
    ) -> List[SeasonRecord]:
        start = await self._fetch_season(start_league_id)
        if start is None:
            raise LeagueNotFoundError(start_league_id)

        records: Dict[str, SeasonRecord] = {start.league_id: start}
        visited: Set[str] = {start_league_id, start.league_id}

        current = start
        while True:
            # Seasons only get older from here on
            if start_year is not None and current.season < start_year:
                break

            previous_id = current.previous_league_id
            if not previous_id:
                break
            if previous_id in visited:
                logger.warning(f"League {current.league_id} links back to already visited league {previous_id}")
                break
            visited.add(previous_id)

            previous = await self._fetch_season(previous_id)
            if previous is None:
                logger.warning(
                    f"Could not fetch league {previous_id} (previous season of {current.league_id}); "
                    f"history stops at {current.season}"
                )
                break

            visited.add(previous.league_id)
            records[previous.league_id] = previous
            current = previous

        if self.use_history_index:
            await self._merge_history_index(start_league_id, records, visited)

        seasons = sorted(records.values(), key=lambda s: (s.season, s.league_id))
        return [s for s in seasons if in_year_range(s.season, start_year, end_year)]

    async def _merge_history_index(self, start_league_id: str, records: Dict[str, SeasonRecord], visited: Set[str]):
        """The index only returns ids, so unseen ones still need a full fetch for their year."""
        candidate_ids = []
        for league_id in await self.client.get_league_history_ids(start_league_id):
            if league_id not in visited and league_id not in candidate_ids:
                candidate_ids.append(league_id)

        fetched = await asyncio.gather(*(self._fetch_season(league_id) for league_id in candidate_ids))
        for league_id, record in zip(candidate_ids, fetched):
            visited.add(league_id)
            if record is None:
                logger.warning(f"Skipping league {league_id} from history index: could not fetch it")
                continue
            records.setdefault(record.league_id, record)

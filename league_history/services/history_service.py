import asyncio
import logging
from typing import Dict, List, NamedTuple, Optional

import httpx

from ..client import SleeperClient
from ..config import Settings, get_settings
from ..exceptions import InvalidRequestError
from ..models.history import GameRecord, LeagueHistory, ManagerCareerStats, RosterSummary, SeasonRecord
from ..models.sleeper import Matchup
from .identity import IdentityResolver
from .lineage import LineageResolver
from .matchups import MatchupNormalizer
from .rosters import summarize_rosters
from .stats import StatisticsAggregator

logger = logging.getLogger(__name__)


class SeasonData(NamedTuple):
    rosters: List[RosterSummary]
    games: List[GameRecord]
    display_names: Dict[str, str]
    skipped: List[str]


def validate_request(league_id: Optional[str], start_year: Optional[int], end_year: Optional[int]):
    if not league_id or not str(league_id).strip():
        raise InvalidRequestError("A league id is required")
    for label, year in (("start_year", start_year), ("end_year", end_year)):
        if year is not None and (isinstance(year, bool) or not isinstance(year, int)):
            raise InvalidRequestError(f"{label} must be an integer year, got {year!r}")
    if start_year is not None and end_year is not None and start_year > end_year:
        raise InvalidRequestError(f"start_year {start_year} is after end_year {end_year}")


class HistoryService:
    """
    Resolves a league's full history: every season in the lineage, its
    rosters, and its head-to-head games, plus career stats per manager.

    Seasons and weeks are fetched concurrently (the client caps how many
    requests are in flight) and reassembled in season, then week, order.
    Only a missing starting league is fatal; any other missing slice is
    logged and recorded in LeagueHistory.skipped.
    """

    def __init__(self, client: SleeperClient, settings: Settings):
        self.client = client
        self.settings = settings
        self.lineage = LineageResolver(client, use_history_index=settings.use_history_index)
        self.identity = IdentityResolver(settings.team_aliases)
        self.normalizer = MatchupNormalizer(
            default_regular_season_weeks=settings.default_regular_season_weeks,
            playoff_probe_weeks=settings.playoff_probe_weeks,
        )
        self.aggregator = StatisticsAggregator()

    async def get_seasons(
        self, league_id: str, start_year: Optional[int] = None, end_year: Optional[int] = None
    ) -> List[SeasonRecord]:
        validate_request(league_id, start_year, end_year)
        return await self.lineage.resolve(league_id, start_year, end_year)

    async def build_history(
        self, league_id: str, start_year: Optional[int] = None, end_year: Optional[int] = None
    ) -> LeagueHistory:
        seasons = await self.get_seasons(league_id, start_year, end_year)
        logger.info(f"Resolved {len(seasons)} season(s) for league {league_id}: {[s.season for s in seasons]}")

        season_results = await asyncio.gather(*(self._load_season(season) for season in seasons))

        history = LeagueHistory(league_id=league_id, seasons=seasons)
        for season, data in zip(seasons, season_results):
            history.rosters.extend(data.rosters)
            history.games.extend(data.games)
            history.display_names[season.season] = data.display_names
            history.skipped.extend(data.skipped)

        if history.skipped:
            logger.warning(f"League {league_id} history is incomplete; skipped: {history.skipped}")
        return history

    async def get_full_history(
        self, league_id: str, start_year: Optional[int] = None, end_year: Optional[int] = None
    ) -> List[GameRecord]:
        history = await self.build_history(league_id, start_year, end_year)
        return history.games

    async def get_career_statistics(
        self, league_id: str, start_year: Optional[int] = None, end_year: Optional[int] = None
    ) -> Dict[str, ManagerCareerStats]:
        history = await self.build_history(league_id, start_year, end_year)
        # Folded once, after every season is in, so totals do not depend on fetch timing
        return self.aggregator.aggregate(history.rosters, history.games, history.display_names)

    async def _load_season(self, season: SeasonRecord) -> SeasonData:
        league_id = season.league_id
        skipped: List[str] = []

        users, rosters, winners_bracket = await asyncio.gather(
            self.client.get_league_users(league_id),
            self.client.get_league_rosters(league_id),
            self.client.get_winners_bracket(league_id),
        )
        if not users:
            skipped.append(f"{season.season} users ({league_id})")
        if not winners_bracket:
            # Placements then come only from roster settings
            skipped.append(f"{season.season} winners bracket ({league_id})")

        summaries = summarize_rosters(season.season, rosters, winners_bracket)
        display_names = self.identity.resolve(users, (r.owner_id for r in summaries if r.owner_id))

        if not summaries:
            # Without rosters no game can be attributed to a manager
            skipped.append(f"{season.season} rosters ({league_id})")
            return SeasonData(summaries, [], display_names, skipped)

        weekly_entries = await self._fetch_weeks(season, skipped)
        games = self.normalizer.normalize(season, summaries, weekly_entries, display_names)
        logger.debug(f"{season.season}: {len(summaries)} rosters, {len(games)} games")
        return SeasonData(summaries, games, display_names, skipped)

    async def _fetch_weeks(self, season: SeasonRecord, skipped: List[str]) -> Dict[int, List[Matchup]]:
        declared_playoffs = self.normalizer.declared_playoff_weeks(season)
        weeks = list(self.normalizer.regular_season_weeks(season))
        if declared_playoffs is not None:
            weeks.extend(declared_playoffs)

        results = await asyncio.gather(
            *(self.client.get_league_matchups(season.league_id, week) for week in weeks)
        )
        weekly_entries: Dict[int, List[Matchup]] = {}
        for week, entries in zip(weeks, results):
            if not entries:
                skipped.append(f"{season.season} week {week} matchups ({season.league_id})")
                continue
            weekly_entries[week] = entries

        if declared_playoffs is None:
            # No declared end week: an empty week means the playoffs are over (or never happened)
            for week in self.normalizer.probe_weeks(season):
                entries = await self.client.get_league_matchups(season.league_id, week)
                if not entries:
                    break
                weekly_entries[week] = entries

        return weekly_entries


async def get_full_history(
    league_id: Optional[str] = None,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> List[GameRecord]:
    """Every game in the league's history. league_id defaults to the configured league."""
    settings = settings or get_settings()
    league_id = league_id or settings.league_id
    validate_request(league_id, start_year, end_year)
    async with SleeperClient(settings, http_client=http_client) as client:
        return await HistoryService(client, settings).get_full_history(league_id, start_year, end_year)


async def get_career_statistics(
    league_id: Optional[str] = None,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    settings: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, ManagerCareerStats]:
    """Career totals keyed by user_id. league_id defaults to the configured league."""
    settings = settings or get_settings()
    league_id = league_id or settings.league_id
    validate_request(league_id, start_year, end_year)
    async with SleeperClient(settings, http_client=http_client) as client:
        return await HistoryService(client, settings).get_career_statistics(league_id, start_year, end_year)

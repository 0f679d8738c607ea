import logging
from typing import Dict, List, Mapping, Optional

from ..models.history import GameRecord, ManagerIdentity, RosterSummary, SeasonRecord
from ..models.sleeper import Matchup

logger = logging.getLogger(__name__)


def group_by_matchup_id(entries: List[Matchup]) -> Dict[int, List[Matchup]]:
    """Group one week's per-roster rows by matchup_id, ordered by id. Byes (null id) are left out."""
    groups: Dict[int, List[Matchup]] = {}
    for entry in entries:
        if entry.matchup_id is None:
            continue
        groups.setdefault(entry.matchup_id, []).append(entry)
    return dict(sorted(groups.items()))


class MatchupNormalizer:
    """
    Turns Sleeper's per-roster weekly rows into head-to-head games.

    Weeks after the last regular-season week are playoff weeks. When a league
    declares no playoff window the caller probes forward from
    playoff_start_week() until a week comes back empty.
    """

    def __init__(self, default_regular_season_weeks: int = 14, playoff_probe_weeks: int = 5):
        self.default_regular_season_weeks = default_regular_season_weeks
        self.playoff_probe_weeks = playoff_probe_weeks

    def last_regular_season_week(self, season: SeasonRecord) -> int:
        if season.playoff_week_start:
            return season.playoff_week_start - 1
        return season.last_regular_season_week or self.default_regular_season_weeks

    def regular_season_weeks(self, season: SeasonRecord) -> range:
        return range(1, self.last_regular_season_week(season) + 1)

    def playoff_start_week(self, season: SeasonRecord) -> int:
        return season.playoff_week_start or self.last_regular_season_week(season) + 1

    def declared_playoff_weeks(self, season: SeasonRecord) -> Optional[range]:
        """The playoff window, or None when it has to be found by probing."""
        if season.playoff_week_start and season.playoff_week_end:
            if season.playoff_week_end >= season.playoff_week_start:
                return range(season.playoff_week_start, season.playoff_week_end + 1)
        return None

    def probe_weeks(self, season: SeasonRecord) -> range:
        start = self.playoff_start_week(season)
        return range(start, start + self.playoff_probe_weeks)

    def is_playoff_week(self, season: SeasonRecord, week: int) -> bool:
        return week > self.last_regular_season_week(season)

    def normalize(
        self,
        season: SeasonRecord,
        rosters: List[RosterSummary],
        weekly_entries: Mapping[int, List[Matchup]],
        display_names: Mapping[str, str],
    ) -> List[GameRecord]:
        owner_by_roster = {r.roster_id: r.owner_id for r in rosters if r.owner_id}

        games: List[GameRecord] = []
        for week in sorted(weekly_entries):
            playoffs = self.is_playoff_week(season, week)
            for matchup_id, entries in group_by_matchup_id(weekly_entries[week]).items():
                if len(entries) != 2:
                    logger.debug(
                        f"Dropping matchup {matchup_id} in {season.season} week {week}: "
                        f"{len(entries)} roster(s) instead of 2"
                    )
                    continue

                team1_data, team2_data = entries
                team1_user_id = owner_by_roster.get(team1_data.roster_id)
                team2_user_id = owner_by_roster.get(team2_data.roster_id)
                if not team1_user_id or not team2_user_id:
                    logger.warning(
                        f"Skipping matchup {matchup_id} in league {season.league_id}, week {week}: "
                        f"no owner for roster {team1_data.roster_id} or {team2_data.roster_id}"
                    )
                    continue

                games.append(GameRecord(
                    season=season.season,
                    week=week,
                    matchup_id=matchup_id,
                    playoffs=playoffs,
                    team1_roster_id=team1_data.roster_id,
                    team2_roster_id=team2_data.roster_id,
                    team1=ManagerIdentity(
                        user_id=team1_user_id,
                        display_name=display_names.get(team1_user_id) or f"User {team1_user_id}",
                    ),
                    team2=ManagerIdentity(
                        user_id=team2_user_id,
                        display_name=display_names.get(team2_user_id) or f"User {team2_user_id}",
                    ),
                    team1_score=team1_data.points or 0.0,
                    team2_score=team2_data.points or 0.0,
                ))
        return games

from collections import defaultdict
from typing import Dict, List, Mapping, Optional

from ..models.history import GameRecord, ManagerCareerStats, ManagerSeasonStats, RosterSummary


def points_against(roster_id: int, games: List[GameRecord]) -> float:
    """Sum of opponents' scores over every game the roster played in a season."""
    total = 0.0
    for game in games:
        if game.team1_roster_id == roster_id:
            total += game.team2_score
        elif game.team2_roster_id == roster_id:
            total += game.team1_score
    return round(total, 2)


def played_in_playoffs(roster_id: int, games: List[GameRecord]) -> bool:
    return any(
        game.playoffs and roster_id in (game.team1_roster_id, game.team2_roster_id)
        for game in games
    )


class StatisticsAggregator:
    """
    Folds roster summaries and games into per-manager career totals.

    Wins, losses, ties and points-for come from the roster summaries, which
    include any scoring corrections made on Sleeper. Points-against is summed
    from the games instead. A season is a championship when the final rank is
    1; a playoff appearance when the roster has a playoff rank, or failing
    that, played any playoff-week game (consolation games included).
    """

    def season_stats(
        self,
        roster: RosterSummary,
        season_games: List[GameRecord],
        display_name: str,
    ) -> ManagerSeasonStats:
        if roster.playoff_rank is not None:
            made_playoffs = True
        else:
            made_playoffs = played_in_playoffs(roster.roster_id, season_games)

        return ManagerSeasonStats(
            season=roster.season,
            roster_id=roster.roster_id,
            display_name=display_name,
            wins=roster.wins,
            losses=roster.losses,
            ties=roster.ties,
            points_for=roster.points_for,
            points_against=points_against(roster.roster_id, season_games),
            champion=roster.final_rank == 1,
            made_playoffs=made_playoffs,
            final_rank=roster.final_rank,
        )

    def aggregate(
        self,
        rosters: List[RosterSummary],
        games: List[GameRecord],
        display_names: Optional[Mapping[int, Mapping[str, str]]] = None,
    ) -> Dict[str, ManagerCareerStats]:
        display_names = display_names or {}

        rosters_by_season: Dict[int, List[RosterSummary]] = defaultdict(list)
        for roster in rosters:
            rosters_by_season[roster.season].append(roster)

        games_by_season: Dict[int, List[GameRecord]] = defaultdict(list)
        names_from_games: Dict[int, Dict[str, str]] = defaultdict(dict)
        for game in games:
            games_by_season[game.season].append(game)
            for identity in (game.team1, game.team2):
                names_from_games[game.season][identity.user_id] = identity.display_name

        careers: Dict[str, ManagerCareerStats] = {}
        for season in sorted(rosters_by_season):
            season_games = games_by_season[season]
            season_names = display_names.get(season, {})

            # A manager with two rosters in one season still counts the season once
            played, champions, playoff_teams = set(), set(), set()

            for roster in sorted(rosters_by_season[season], key=lambda r: r.roster_id):
                user_id = roster.owner_id
                if not user_id:
                    continue

                name = (
                    season_names.get(user_id)
                    or names_from_games[season].get(user_id)
                    or f"User {user_id}"
                )
                stats = self.season_stats(roster, season_games, name)

                career = careers.get(user_id)
                if career is None:
                    career = careers[user_id] = ManagerCareerStats(user_id=user_id, display_name=name)
                career.display_name = name
                career.wins += stats.wins
                career.losses += stats.losses
                career.ties += stats.ties
                career.points_for = round(career.points_for + stats.points_for, 2)
                career.points_against = round(career.points_against + stats.points_against, 2)
                career.seasons.append(stats)

                played.add(user_id)
                if stats.champion:
                    champions.add(user_id)
                if stats.made_playoffs:
                    playoff_teams.add(user_id)

            for user_id in played:
                careers[user_id].seasons_played += 1
            for user_id in champions:
                careers[user_id].championships += 1
            for user_id in playoff_teams:
                careers[user_id].playoff_appearances += 1

        return careers

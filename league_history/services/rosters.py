from typing import Any, Dict, List, Mapping, Optional

from ..models.history import RosterSummary
from ..models.sleeper import BracketMatchup, Roster


def _int_setting(settings: Mapping[str, Any], key: str) -> int:
    try:
        return int(settings.get(key) or 0)
    except (TypeError, ValueError):
        return 0


def _points_setting(settings: Mapping[str, Any], key: str) -> float:
    # Sleeper splits points into whole and hundredths: fpts=1234, fpts_decimal=56 -> 1234.56
    return round(_int_setting(settings, key) + _int_setting(settings, f"{key}_decimal") / 100, 2)


def bracket_placements(bracket: List[BracketMatchup]) -> Dict[int, int]:
    """roster_id -> final place, from the bracket games that decide a place (p set)."""
    placements: Dict[int, int] = {}
    for game in bracket:
        if game.p is None or game.w is None or game.l is None:
            continue
        placements[game.w] = game.p
        placements[game.l] = game.p + 1
    return placements


def summarize_rosters(season: int, rosters: List[Roster], winners_bracket: List[BracketMatchup]) -> List[RosterSummary]:
    placements = bracket_placements(winners_bracket)

    summaries = []
    for roster in sorted(rosters, key=lambda r: r.roster_id):
        settings = roster.settings or {}
        final_rank: Optional[int] = _int_setting(settings, "final_rank") or placements.get(roster.roster_id)
        summaries.append(RosterSummary(
            season=season,
            roster_id=roster.roster_id,
            owner_id=roster.owner_id or None,
            wins=_int_setting(settings, "wins"),
            losses=_int_setting(settings, "losses"),
            ties=_int_setting(settings, "ties"),
            points_for=_points_setting(settings, "fpts"),
            points_against=_points_setting(settings, "fpts_against"),
            final_rank=final_rank,
            playoff_rank=_int_setting(settings, "playoff_rank") or placements.get(roster.roster_id),
        ))
    return summaries

"""
Shared fixtures: a fake Sleeper API served through httpx.MockTransport,
so no test touches the network.
"""

from collections import Counter
from typing import Any, Dict, List, Optional

import httpx
import pytest

from league_history.client import SleeperClient
from league_history.config import Settings


def score(roster_id: int, week: int) -> float:
    return 100.0 + 10 * roster_id + week


class FakeSleeper:
    """Routes keyed by API path (without the /v1 prefix)."""

    def __init__(self):
        self.routes: Dict[str, Any] = {}
        self.failing: Dict[str, int] = {}
        self.requests: Counter = Counter()

    def add(self, path: str, payload: Any):
        self.routes[path] = payload

    def fail(self, path: str, status_code: int = 500):
        self.failing[path] = status_code

    def count(self, path: str) -> int:
        return self.requests[path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/v1")
        self.requests[path] += 1
        if path in self.failing:
            return httpx.Response(self.failing[path])
        if path not in self.routes:
            return httpx.Response(404)
        payload = self.routes[path]
        if payload is None:
            return httpx.Response(200, content=b"null", headers={"content-type": "application/json"})
        return httpx.Response(200, json=payload)

    def add_league(
        self,
        league_id: str,
        season: int,
        previous_league_id: Optional[str] = None,
        settings: Optional[Dict[str, Any]] = None,
    ):
        self.add(f"/league/{league_id}", {
            "league_id": league_id,
            "name": "Tatnall Legacy League",
            "season": str(season),
            "status": "complete",
            "total_rosters": 4,
            "previous_league_id": previous_league_id,
            "settings": settings if settings is not None else {"playoff_week_start": 3, "playoff_week_end": 3},
        })

    def add_season(self, league_id: str, season: int, previous_league_id: Optional[str] = None):
        """
        A four-team season: weeks 1-2 regular season, week 3 the final
        (roster 1 beats roster 2), rosters 3 and 4 idle in week 3.
        """
        self.add_league(league_id, season, previous_league_id)
        self.add(f"/league/{league_id}/users", [
            {"user_id": "u1", "username": "smith99", "display_name": "smith99"},
            {"user_id": "u2", "display_name": "jonesy", "metadata": {"team_name": "Jones Gang"}},
            {"user_id": "u3", "display_name": "thirdwheel"},
            {"user_id": "u4", "display_name": None, "first_name": "Dana"},
        ])
        self.add(f"/league/{league_id}/rosters", [
            roster_payload(1, "u1", wins=1, losses=1),
            roster_payload(2, "u2", wins=2, losses=0),
            roster_payload(3, "u3", wins=1, losses=1),
            roster_payload(4, "u4", wins=0, losses=2),
        ])
        self.add(f"/league/{league_id}/matchups/1", matchup_rows(1, [(1, 2), (3, 4)]))
        self.add(f"/league/{league_id}/matchups/2", matchup_rows(2, [(1, 3), (2, 4)]))
        self.add(f"/league/{league_id}/matchups/3", matchup_rows(3, [(1, 2)], idle=[3, 4]))
        self.add(f"/league/{league_id}/winners_bracket", [
            {"r": 1, "m": 1, "t1": 1, "t2": 2, "w": 1, "l": 2, "p": 1},
        ])


def roster_payload(roster_id: int, owner_id: Optional[str], wins: int = 0, losses: int = 0, ties: int = 0):
    return {
        "roster_id": roster_id,
        "owner_id": owner_id,
        "settings": {
            "wins": wins,
            "losses": losses,
            "ties": ties,
            "fpts": 1000 + roster_id,
            "fpts_decimal": 50,
            "fpts_against": 900,
            "fpts_against_decimal": 0,
        },
    }


def matchup_rows(week: int, pairs, idle=()) -> List[Dict[str, Any]]:
    rows = []
    for matchup_id, (team1, team2) in enumerate(pairs, start=1):
        for roster_id in (team1, team2):
            rows.append({"matchup_id": matchup_id, "roster_id": roster_id, "points": score(roster_id, week)})
    for roster_id in idle:
        rows.append({"matchup_id": None, "roster_id": roster_id, "points": 0.0})
    return rows


@pytest.fixture
def fake_sleeper() -> FakeSleeper:
    return FakeSleeper()


@pytest.fixture
def league(fake_sleeper) -> FakeSleeper:
    """S3 (2023) -> S2 (2022) -> S1 (2021)."""
    fake_sleeper.add_season("S1", 2021)
    fake_sleeper.add_season("S2", 2022, previous_league_id="S1")
    fake_sleeper.add_season("S3", 2023, previous_league_id="S2")
    return fake_sleeper


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        database_url=str(tmp_path / "sleeper_cache.db"),
        default_regular_season_weeks=2,
        playoff_probe_weeks=3,
        team_aliases={"Smith": "u1"},
    )


@pytest.fixture
def make_client(settings, fake_sleeper):
    def _make(cache=None, **overrides) -> SleeperClient:
        client_settings = settings.model_copy(update=overrides)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(fake_sleeper.handler))
        return SleeperClient(client_settings, cache=cache, http_client=http_client)
    return _make

import pytest

from league_history.exceptions import LeagueNotFoundError
from league_history.services.lineage import LineageResolver, season_record_from_league
from league_history.models.sleeper import League


@pytest.mark.asyncio
async def test_resolves_full_chain_oldest_first(league, make_client):
    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S3")

    assert [s.season for s in seasons] == [2021, 2022, 2023]
    assert [s.league_id for s in seasons] == ["S1", "S2", "S3"]
    assert seasons[0].previous_league_id is None


@pytest.mark.asyncio
async def test_cyclic_previous_links_terminate(fake_sleeper, make_client):
    fake_sleeper.add_league("S1", 2021, previous_league_id="S3")
    fake_sleeper.add_league("S2", 2022, previous_league_id="S1")
    fake_sleeper.add_league("S3", 2023, previous_league_id="S2")

    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S3")

    assert [s.league_id for s in seasons] == ["S1", "S2", "S3"]
    assert fake_sleeper.count("/league/S3") == 1
    assert fake_sleeper.count("/league/S1") == 1


@pytest.mark.asyncio
async def test_self_referencing_league(fake_sleeper, make_client):
    fake_sleeper.add_league("S1", 2021, previous_league_id="S1")

    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S1")

    assert [s.league_id for s in seasons] == ["S1"]


@pytest.mark.asyncio
async def test_missing_previous_league_keeps_resolved_seasons(fake_sleeper, make_client):
    fake_sleeper.add_league("S2", 2022, previous_league_id="GONE")
    fake_sleeper.add_league("S3", 2023, previous_league_id="S2")

    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S3")

    assert [s.season for s in seasons] == [2022, 2023]
    assert fake_sleeper.count("/league/GONE") == 1


@pytest.mark.asyncio
async def test_server_error_mid_chain_truncates(league, make_client):
    league.fail("/league/S2")

    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S3")

    assert [s.league_id for s in seasons] == ["S3"]
    assert league.count("/league/S1") == 0


@pytest.mark.asyncio
async def test_missing_start_league_is_fatal(fake_sleeper, make_client):
    async with make_client() as client:
        with pytest.raises(LeagueNotFoundError, match="NOPE"):
            await LineageResolver(client).resolve("NOPE")


@pytest.mark.asyncio
async def test_null_start_league_is_fatal(fake_sleeper, make_client):
    fake_sleeper.add("/league/NULL", None)

    async with make_client() as client:
        with pytest.raises(LeagueNotFoundError) as exc_info:
            await LineageResolver(client).resolve("NULL")

    assert exc_info.value.league_id == "NULL"


@pytest.mark.asyncio
async def test_start_year_filters_and_stops_walking(league, make_client):
    league.add_league("S0", 2020)
    league.add_league("S1", 2021, previous_league_id="S0")

    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S3", start_year=2022)

    assert [s.season for s in seasons] == [2022, 2023]
    # 2021 is below the floor, so nothing before it is inspected
    assert league.count("/league/S1") == 1
    assert league.count("/league/S0") == 0


@pytest.mark.asyncio
async def test_end_year_filters(league, make_client):
    async with make_client() as client:
        seasons = await LineageResolver(client).resolve("S3", end_year=2022)

    assert [s.season for s in seasons] == [2021, 2022]


@pytest.mark.asyncio
async def test_history_index_fills_gaps_in_chain(fake_sleeper, make_client):
    fake_sleeper.add_league("S1", 2021)
    fake_sleeper.add_league("S2", 2022, previous_league_id="BROKEN")
    fake_sleeper.add_league("S3", 2023, previous_league_id="S2")
    fake_sleeper.add("/league/S3/history", [
        {"league_id": "S2"},
        {"league_id": "S1"},
        {"league_id": "MISSING"},
    ])

    async with make_client() as client:
        seasons = await LineageResolver(client, use_history_index=True).resolve("S3")

    assert [s.league_id for s in seasons] == ["S1", "S2", "S3"]
    assert fake_sleeper.count("/league/S2") == 1


@pytest.mark.asyncio
async def test_history_index_unavailable_falls_back_to_chain(league, make_client):
    async with make_client() as client:
        seasons = await LineageResolver(client, use_history_index=True).resolve("S3")

    assert [s.season for s in seasons] == [2021, 2022, 2023]


def test_season_record_reads_playoff_settings():
    league = League(
        league_id="L",
        season="2024",
        settings={"playoff_week_start": 15, "playoff_week_end": 0, "last_regular_season_week": "14"},
    )

    record = season_record_from_league(league)

    assert record.season == 2024
    assert record.playoff_week_start == 15
    assert record.playoff_week_end is None
    assert record.last_regular_season_week == 14

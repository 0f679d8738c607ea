from contextlib import asynccontextmanager
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from . import database
from .client import SleeperClient
from .config import Settings, get_settings
from .exceptions import InvalidRequestError, LeagueNotFoundError
from .models.history import GameRecord, ManagerCareerStats, SeasonRecord
from .services.history_service import HistoryService


@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.create_tables(get_settings().database_url)
    yield


app = FastAPI(lifespan=lifespan)

# Configure CORS for frontend integration
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=False,
    allow_methods=["GET"],
    allow_headers=["*"],
)


async def get_history_service(settings: Settings = Depends(get_settings)):
    async with SleeperClient(settings) as client:
        yield HistoryService(client, settings)


@app.get("/")
def read_root():
    return {"status": "ok"}


@app.get("/league/{league_id}/seasons", response_model=List[SeasonRecord])
async def get_league_seasons(
    league_id: str,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    service: HistoryService = Depends(get_history_service),
):
    """Every season in the league's lineage, oldest first."""
    try:
        return await service.get_seasons(league_id, start_year, end_year)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LeagueNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/league/{league_id}/history", response_model=List[GameRecord])
async def get_league_history(
    league_id: str,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    service: HistoryService = Depends(get_history_service),
):
    """All head-to-head games across the lineage, by season, then week."""
    try:
        return await service.get_full_history(league_id, start_year, end_year)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LeagueNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/league/{league_id}/managers", response_model=Dict[str, ManagerCareerStats])
async def get_league_managers(
    league_id: str,
    start_year: Optional[int] = None,
    end_year: Optional[int] = None,
    service: HistoryService = Depends(get_history_service),
):
    """Career totals keyed by Sleeper user_id."""
    try:
        return await service.get_career_statistics(league_id, start_year, end_year)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except LeagueNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

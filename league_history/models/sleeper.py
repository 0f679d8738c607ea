from typing import Dict, Any, Optional
from pydantic import BaseModel, ConfigDict


class User(BaseModel):
    model_config = ConfigDict(extra="ignore")

    user_id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    first_name: Optional[str] = None
    avatar: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class League(BaseModel):
    model_config = ConfigDict(extra="ignore")

    league_id: str
    name: Optional[str] = None
    season: str
    status: Optional[str] = None
    total_rosters: Optional[int] = None
    previous_league_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None


class Roster(BaseModel):
    model_config = ConfigDict(extra="ignore")

    roster_id: int
    league_id: Optional[str] = None
    owner_id: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class Matchup(BaseModel):
    model_config = ConfigDict(extra="ignore")

    matchup_id: Optional[int] = None  # null for a roster with no opponent that week
    roster_id: int
    points: Optional[float] = None


class BracketMatchup(BaseModel):
    """One game of a winners or losers bracket, using Sleeper's terse keys."""

    model_config = ConfigDict(extra="ignore")

    r: int  # round
    m: int  # match id
    t1: Optional[int] = None
    t2: Optional[int] = None
    w: Optional[int] = None  # winning roster_id
    l: Optional[int] = None  # losing roster_id
    p: Optional[int] = None  # place decided by this game, e.g. 1 for the final

from typing import List, Dict, Optional
from pydantic import BaseModel, ConfigDict, computed_field


class SeasonRecord(BaseModel):
    """One season instance of a league, as linked through previous_league_id."""

    model_config = ConfigDict(frozen=True)

    league_id: str
    season: int
    name: Optional[str] = None
    status: Optional[str] = None
    previous_league_id: Optional[str] = None
    playoff_week_start: Optional[int] = None
    playoff_week_end: Optional[int] = None
    last_regular_season_week: Optional[int] = None


class ManagerIdentity(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    display_name: str


class RosterSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    season: int
    roster_id: int  # unique within the season only
    owner_id: Optional[str] = None
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0  # as reported by Sleeper; display only
    final_rank: Optional[int] = None
    playoff_rank: Optional[int] = None


class GameRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    season: int
    week: int
    matchup_id: int
    playoffs: bool
    team1_roster_id: int
    team2_roster_id: int
    team1: ManagerIdentity
    team2: ManagerIdentity
    team1_score: float
    team2_score: float


class ManagerSeasonStats(BaseModel):
    season: int
    roster_id: int
    display_name: str
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    champion: bool = False
    made_playoffs: bool = False
    final_rank: Optional[int] = None


class ManagerCareerStats(BaseModel):
    user_id: str
    display_name: str
    wins: int = 0
    losses: int = 0
    ties: int = 0
    points_for: float = 0.0
    points_against: float = 0.0
    championships: int = 0
    playoff_appearances: int = 0
    seasons_played: int = 0
    seasons: List[ManagerSeasonStats] = []

    @computed_field
    @property
    def win_percentage(self) -> float:
        games = self.wins + self.losses + self.ties
        if games == 0:
            return 0.0
        return round((self.wins + 0.5 * self.ties) / games, 4)


class LeagueHistory(BaseModel):
    """Everything resolved for one lineage, in chronological order."""

    league_id: str
    seasons: List[SeasonRecord] = []
    rosters: List[RosterSummary] = []
    games: List[GameRecord] = []
    display_names: Dict[int, Dict[str, str]] = {}  # season -> user_id -> display name
    skipped: List[str] = []

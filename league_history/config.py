"""
Settings for the league history service.

Every value can be overridden with a LEAGUE_HISTORY_* environment variable
or a .env file. Core components take a Settings instance at construction;
only the HTTP layer reads the cached process-wide copy.
"""

from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LEAGUE_HISTORY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Sleeper API
    sleeper_api_url: str = "https://api.sleeper.app/v1"
    request_timeout: float = Field(default=30.0, gt=0)
    max_concurrent_requests: int = Field(default=5, ge=1, le=50)

    # Response cache
    database_url: str = "sleeper_cache.db"
    cache_ttl_seconds: int = Field(default=604800, ge=0)  # 7 days

    # League
    league_id: Optional[str] = None
    team_aliases: Dict[str, str] = Field(
        default_factory=dict,
        description="Display name -> Sleeper user_id. Several names may point at one user.",
    )
    default_regular_season_weeks: int = Field(default=14, ge=1)
    playoff_probe_weeks: int = Field(default=5, ge=0)
    use_history_index: bool = False

    # HTTP layer
    cors_allow_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]


@lru_cache()
def get_settings() -> Settings:
    return Settings()

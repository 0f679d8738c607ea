import asyncio
import logging
from typing import Any, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import Settings
from .database import ResponseCache
from .models.sleeper import BracketMatchup, League, Matchup, Roster, User

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _parse_list(model: Type[ModelT], data: Any, url: str) -> List[ModelT]:
    if not isinstance(data, list):
        return []
    items: List[ModelT] = []
    for item in data:
        try:
            items.append(model.model_validate(item))
        except ValidationError as e:
            logger.warning(f"Dropping malformed {model.__name__} from {url}: {e.error_count()} error(s)")
    return items


class SleeperClient:
    """
    Read-only, caching client for the Sleeper API.

    Every accessor returns None or an empty list when Sleeper is unreachable,
    answers with an error status, or has nothing for the requested id; callers
    decide whether that is fatal. Nothing is retried.

    Use as an async context manager so the cache table exists and the HTTP
    connection pool is closed afterwards:

        async with SleeperClient(settings) as client:
            league = await client.get_league(league_id)
    """

    def __init__(
        self,
        settings: Settings,
        cache: Optional[ResponseCache] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.settings = settings
        self.api_url = settings.sleeper_api_url.rstrip("/")
        self.cache = cache or ResponseCache(settings.database_url, settings.cache_ttl_seconds)
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._semaphore = asyncio.Semaphore(settings.max_concurrent_requests)

    async def __aenter__(self) -> "SleeperClient":
        await self.cache.initialize()
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(timeout=self.settings.request_timeout)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    @property
    def http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            raise RuntimeError("SleeperClient not started. Use 'async with'.")
        return self._http_client

    async def get(self, url: str) -> Optional[Any]:
        """
        A generic, caching GET request for the Sleeper API.
        """
        http_client = self.http_client

        # 1. Check cache; an unreadable cache is a miss
        try:
            cached_data = await self.cache.get(url)
        except Exception as e:
            logger.warning(f"Cache read failed for {url}: {e!r}")
            cached_data = None
        if cached_data is not None:
            return cached_data

        # 2. If not in cache or stale, fetch from API
        try:
            async with self._semaphore:
                response = await http_client.get(url)
            response.raise_for_status()
            fresh_data = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(f"Sleeper returned {e.response.status_code} for {url}")
            return None
        except httpx.RequestError as e:
            logger.warning(f"Request to {url} failed: {e!r}")
            return None
        except ValueError:
            logger.warning(f"Could not decode JSON from {url}")
            return None

        # Unknown ids come back as 200 with a null body
        if fresh_data is None:
            logger.warning(f"Sleeper returned no data for {url}")
            return None

        # 3. Store in cache
        try:
            await self.cache.set(url, fresh_data)
        except Exception as e:
            logger.warning(f"Cache write failed for {url}: {e!r}")
        return fresh_data

    async def get_league(self, league_id: str) -> Optional[League]:
        url = f"{self.api_url}/league/{league_id}"
        data = await self.get(url)
        if not isinstance(data, dict):
            return None
        try:
            return League.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Malformed league payload from {url}: {e.error_count()} error(s)")
            return None

    async def get_league_history_ids(self, league_id: str) -> List[str]:
        url = f"{self.api_url}/league/{league_id}/history"
        data = await self.get(url)
        if not isinstance(data, list):
            return []
        return [
            str(item["league_id"])
            for item in data
            if isinstance(item, dict) and item.get("league_id")
        ]

    async def get_league_users(self, league_id: str) -> List[User]:
        url = f"{self.api_url}/league/{league_id}/users"
        return _parse_list(User, await self.get(url), url)

    async def get_league_rosters(self, league_id: str) -> List[Roster]:
        url = f"{self.api_url}/league/{league_id}/rosters"
        return _parse_list(Roster, await self.get(url), url)

    async def get_league_matchups(self, league_id: str, week: int) -> List[Matchup]:
        url = f"{self.api_url}/league/{league_id}/matchups/{week}"
        return _parse_list(Matchup, await self.get(url), url)

    async def get_winners_bracket(self, league_id: str) -> List[BracketMatchup]:
        url = f"{self.api_url}/league/{league_id}/winners_bracket"
        return _parse_list(BracketMatchup, await self.get(url), url)

    async def get_losers_bracket(self, league_id: str) -> List[BracketMatchup]:
        url = f"{self.api_url}/league/{league_id}/losers_bracket"
        return _parse_list(BracketMatchup, await self.get(url), url)

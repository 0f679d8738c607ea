import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Optional

import aiosqlite

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


async def get_db_connection(database_url: str):
    db = await aiosqlite.connect(database_url)
    db.row_factory = aiosqlite.Row
    return db


async def create_tables(database_url: str):
    async with aiosqlite.connect(database_url) as db:
        await db.execute("""
            CREATE TABLE IF NOT EXISTS api_cache (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                url TEXT UNIQUE NOT NULL,
                data TEXT NOT NULL,
                timestamp DATETIME DEFAULT CURRENT_TIMESTAMP
            )
        """)
        await db.commit()


class ResponseCache:
    """
    URL-keyed cache of decoded JSON responses with a fixed time-to-live.

    The clock is injectable so expiry can be tested without sleeping.
    Writes are keyed upserts, so concurrent requests for different URLs
    never interfere with each other.
    """

    def __init__(
        self,
        database_url: str,
        ttl_seconds: int = 604800,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.database_url = database_url
        self.ttl = timedelta(seconds=ttl_seconds)
        self.clock = clock

    async def initialize(self):
        await create_tables(self.database_url)

    async def get(self, url: str) -> Optional[Any]:
        db = await get_db_connection(self.database_url)
        try:
            cursor = await db.execute("SELECT data, timestamp FROM api_cache WHERE url = ?", (url,))
            row = await cursor.fetchone()
        finally:
            await db.close()

        if not row:
            return None

        timestamp = datetime.fromisoformat(row["timestamp"])
        if timestamp.tzinfo is None:
            timestamp = timestamp.replace(tzinfo=timezone.utc)
        if self.clock() - timestamp >= self.ttl:
            return None

        logger.debug(f"Cache hit for {url}")
        return json.loads(row["data"])

    async def set(self, url: str, data: Any):
        db = await get_db_connection(self.database_url)
        try:
            await db.execute(
                "INSERT OR REPLACE INTO api_cache (url, data, timestamp) VALUES (?, ?, ?)",
                (url, json.dumps(data), self.clock().isoformat()),
            )
            await db.commit()
        finally:
            await db.close()

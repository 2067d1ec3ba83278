"""Recent search history backed by Redis"""

import json
import logging
from collections import deque
from typing import Deque, List, Optional

import redis.asyncio as aioredis
from pydantic import ValidationError

from cointrace.config import settings
from cointrace.models.api import HistoryEntry

logger = logging.getLogger(__name__)


class SearchHistory:
    """
    Newest-first list of searched addresses.

    Recording an address that is already present moves it to the front.
    The list is capped at ``max_entries``. Redis is used when available;
    otherwise entries live in process memory. Storage errors are logged
    and never propagate.
    """

    def __init__(self, max_entries: Optional[int] = None, key: Optional[str] = None):
        self.max_entries = max_entries or settings.history_max_entries
        self.key = key or settings.history_redis_key
        self.redis: Optional[aioredis.Redis] = None
        self._memory: Deque[HistoryEntry] = deque(maxlen=self.max_entries)

    async def init_redis(self) -> None:
        """Initialize Redis connection"""
        if not settings.redis_enabled:
            logger.info("Redis disabled. Search history kept in memory.")
            return
        try:
            self.redis = aioredis.from_url(
                f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db}",
                password=settings.redis_password if settings.redis_password else None,
                decode_responses=True,
            )
            await self.redis.ping()
            logger.info("Redis connection initialized for search history")
        except Exception as e:
            logger.warning(f"Redis connection failed: {e}. Keeping search history in memory.")
            self.redis = None

    async def close_redis(self) -> None:
        """Close Redis connection"""
        if self.redis:
            await self.redis.aclose()

    async def record(self, entry: HistoryEntry) -> None:
        self._record_memory(entry)
        if not self.redis:
            return
        try:
            existing = await self.redis.lrange(self.key, 0, -1)
            for raw in existing:
                if self._address_of(raw) == entry.address:
                    await self.redis.lrem(self.key, 0, raw)
            await self.redis.lpush(self.key, entry.model_dump_json())
            await self.redis.ltrim(self.key, 0, self.max_entries - 1)
        except Exception as e:
            logger.warning(f"History write failed: {e}")

    def _record_memory(self, entry: HistoryEntry) -> None:
        for existing in list(self._memory):
            if existing.address == entry.address:
                self._memory.remove(existing)
        self._memory.appendleft(entry)

    async def list(self) -> List[HistoryEntry]:
        if self.redis:
            try:
                raw_entries = await self.redis.lrange(self.key, 0, self.max_entries - 1)
                return [entry for entry in (self._parse(raw) for raw in raw_entries) if entry]
            except Exception as e:
                logger.warning(f"History read failed: {e}")
        return list(self._memory)

    async def clear(self) -> None:
        self._memory.clear()
        if not self.redis:
            return
        try:
            await self.redis.delete(self.key)
        except Exception as e:
            logger.warning(f"History clear failed: {e}")

    @staticmethod
    def _parse(raw: str) -> Optional[HistoryEntry]:
        try:
            return HistoryEntry.model_validate_json(raw)
        except ValidationError:
            logger.debug("Skipping malformed history entry: %s", raw)
            return None

    @staticmethod
    def _address_of(raw: str) -> Optional[str]:
        try:
            return json.loads(raw).get("address")
        except (ValueError, AttributeError):
            return None


# Global history instance
_history: Optional[SearchHistory] = None


async def get_search_history() -> SearchHistory:
    """Get or create global SearchHistory instance"""
    global _history
    if _history is None:
        _history = SearchHistory()
        await _history.init_redis()
    return _history

"""Tests for search history"""

import asyncio

from cointrace.models.api import HistoryEntry
from cointrace.services.history import SearchHistory


class FakeRedis:
    """In-memory stand-in for the redis list commands used by SearchHistory"""

    def __init__(self):
        self.lists = {}
        self.closed = False

    async def lrange(self, key, start, end):
        items = self.lists.get(key, [])
        end = len(items) if end == -1 else end + 1
        return list(items[start:end])

    async def lrem(self, key, count, value):
        items = self.lists.get(key, [])
        self.lists[key] = [item for item in items if item != value]

    async def lpush(self, key, value):
        self.lists.setdefault(key, []).insert(0, value)

    async def ltrim(self, key, start, end):
        self.lists[key] = self.lists.get(key, [])[start:end + 1]

    async def delete(self, key):
        self.lists.pop(key, None)

    async def aclose(self):
        self.closed = True


class BrokenRedis:
    """Every command fails as if the server went away"""

    def __getattr__(self, name):
        async def fail(*args, **kwargs):
            raise ConnectionError("redis unavailable")

        return fail


def entry(address, timestamp=1):
    return HistoryEntry(address=address, symbol="BTC", name="Bitcoin", timestamp=timestamp)


def run(history, *entries):
    async def go():
        for item in entries:
            await history.record(item)
        return await history.list()

    return asyncio.run(go())


class TestInMemoryHistory:
    """Test the process-local fallback"""

    def test_newest_first(self):
        result = run(SearchHistory(max_entries=50), entry("a"), entry("b"), entry("c"))
        assert [item.address for item in result] == ["c", "b", "a"]

    def test_duplicate_moves_to_front(self):
        result = run(SearchHistory(max_entries=50), entry("a", 1), entry("b", 2), entry("a", 3))
        assert [item.address for item in result] == ["a", "b"]
        assert result[0].timestamp == 3

    def test_capped(self):
        history = SearchHistory(max_entries=3)
        result = run(history, *(entry(str(i)) for i in range(5)))
        assert [item.address for item in result] == ["4", "3", "2"]

    def test_clear(self):
        history = SearchHistory(max_entries=50)

        async def go():
            await history.record(entry("a"))
            await history.clear()
            return await history.list()

        assert asyncio.run(go()) == []


class TestRedisHistory:
    """Test the Redis-backed list"""

    def test_redis_dedupe_and_cap(self):
        history = SearchHistory(max_entries=3, key="test:history")
        history.redis = FakeRedis()

        result = run(history, entry("a"), entry("b"), entry("c"), entry("a", 9), entry("d"))

        assert [item.address for item in result] == ["d", "a", "c"]
        assert len(history.redis.lists["test:history"]) == 3

    def test_malformed_entries_skipped(self):
        history = SearchHistory(max_entries=5, key="test:history")
        history.redis = FakeRedis()
        history.redis.lists["test:history"] = ["not json"]

        result = run(history, entry("a"))
        assert [item.address for item in result] == ["a"]

    def test_redis_failures_fall_back_to_memory(self):
        """Storage errors are logged and never reach the caller"""
        history = SearchHistory(max_entries=5)
        history.redis = BrokenRedis()

        result = run(history, entry("a"), entry("b"))
        assert [item.address for item in result] == ["b", "a"]

        asyncio.run(history.clear())

    def test_close_redis(self):
        history = SearchHistory(max_entries=5)
        fake = FakeRedis()
        history.redis = fake

        asyncio.run(history.close_redis())
        assert fake.closed

"""Tests for the upstream rate limiter"""

import asyncio

from cointrace.services.rate_limiter import RateLimiter


class FakeClock:
    """Manual clock; sleeping advances time"""

    def __init__(self):
        self.now = 100.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


class TestRateLimiter:
    """Test minimum spacing between requests"""

    def test_first_request_is_immediate(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        asyncio.run(limiter.acquire())

        assert clock.sleeps == []
        assert limiter.last_request_time == 100.0

    def test_back_to_back_requests_wait(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        async def run():
            await limiter.acquire()
            clock.now += 0.25
            await limiter.acquire()

        asyncio.run(run())

        assert clock.sleeps == [0.75]
        assert limiter.last_request_time == 101.0

    def test_no_wait_after_interval(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        async def run():
            await limiter.acquire()
            clock.now += 5
            await limiter.acquire()

        asyncio.run(run())
        assert clock.sleeps == []

    def test_concurrent_callers_are_serialised(self):
        clock = FakeClock()
        limiter = RateLimiter(0.5, clock=clock, sleep=clock.sleep)

        async def run():
            await asyncio.gather(*(limiter.acquire() for _ in range(3)))

        asyncio.run(run())
        assert clock.sleeps == [0.5, 0.5]

    def test_context_manager(self):
        clock = FakeClock()
        limiter = RateLimiter(1.0, clock=clock, sleep=clock.sleep)

        async def run():
            async with limiter:
                pass

        asyncio.run(run())
        assert limiter.last_request_time == 100.0

    def test_zero_interval_never_sleeps(self):
        clock = FakeClock()
        limiter = RateLimiter(0, clock=clock, sleep=clock.sleep)

        async def run():
            for _ in range(3):
                await limiter.acquire()

        asyncio.run(run())
        assert clock.sleeps == []

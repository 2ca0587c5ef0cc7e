import asyncio
import random

import pytest

from adapters.counter_stores import InMemoryCounterStore
from core.services.rate_limiter import UNKNOWN_CLIENT, RateLimiter, client_key_from_headers
from fakes import FakeClock


def test_allows_one_call_per_window():
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounterStore(), max_calls=1, window_seconds=60, clock=clock)

    async def scenario():
        results = [await limiter.allow("1.2.3.4")]
        clock.advance(30)
        results.append(await limiter.allow("1.2.3.4"))
        clock.advance(29.9)
        results.append(await limiter.allow("1.2.3.4"))
        clock.advance(0.1)
        results.append(await limiter.allow("1.2.3.4"))
        return results

    assert asyncio.run(scenario()) == [True, False, False, True]


def test_keys_are_independent():
    limiter = RateLimiter(InMemoryCounterStore(), clock=FakeClock())

    async def scenario():
        return [await limiter.allow("a"), await limiter.allow("b"), await limiter.allow("a")]

    assert asyncio.run(scenario()) == [True, True, False]


def test_denied_calls_do_not_extend_the_window():
    clock = FakeClock()
    limiter = RateLimiter(InMemoryCounterStore(), clock=clock)

    async def scenario():
        first = await limiter.allow("k")
        for _ in range(5):
            clock.advance(10)
            await limiter.allow("k")
        clock.advance(10)
        return first, await limiter.allow("k")

    assert asyncio.run(scenario()) == (True, True)


def test_never_more_than_one_admission_per_window_simulated():
    rng = random.Random(1234)
    clock = FakeClock(start=0.0)
    limiter = RateLimiter(InMemoryCounterStore(), max_calls=1, window_seconds=60, clock=clock)
    keys = ["10.0.0.1", "10.0.0.2", "10.0.0.3", UNKNOWN_CLIENT]
    admitted: dict[str, list[float]] = {k: [] for k in keys}

    async def scenario():
        for _ in range(2_000):
            clock.advance(rng.uniform(0, 7))
            key = rng.choice(keys)
            if await limiter.allow(key):
                admitted[key].append(clock.now)

    asyncio.run(scenario())

    for key, times in admitted.items():
        assert times, key
        for earlier, later in zip(times, times[1:]):
            assert later - earlier >= 60


def test_concurrent_hits_on_same_key_admit_only_one():
    limiter = RateLimiter(InMemoryCounterStore(), clock=FakeClock())

    async def scenario():
        return await asyncio.gather(*(limiter.allow("same") for _ in range(20)))

    assert sum(asyncio.run(scenario())) == 1


def test_rejects_nonsense_configuration():
    with pytest.raises(ValueError):
        RateLimiter(InMemoryCounterStore(), max_calls=0)
    with pytest.raises(ValueError):
        RateLimiter(InMemoryCounterStore(), window_seconds=0)


@pytest.mark.parametrize(
    "headers, expected",
    [
        ({"x-forwarded-for": "203.0.113.7, 10.0.0.1"}, "203.0.113.7"),
        ({"x-forwarded-for": "  198.51.100.2 "}, "198.51.100.2"),
        ({"x-real-ip": "192.0.2.9"}, "192.0.2.9"),
        ({"x-forwarded-for": " , "}, UNKNOWN_CLIENT),
        ({}, UNKNOWN_CLIENT),
    ],
)
def test_client_key_from_headers(headers, expected):
    assert client_key_from_headers(headers) == expected

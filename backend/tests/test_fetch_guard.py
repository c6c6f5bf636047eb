import asyncio

import pytest

from selection import FetchGuard, Role


def test_only_latest_generation_is_accepted():
    guard = FetchGuard()
    first = guard.begin(Role.PARTNER)
    second = guard.begin(Role.PARTNER)

    assert not guard.accept(Role.PARTNER, first)
    assert guard.accept(Role.PARTNER, second)


def test_roles_are_tracked_separately():
    guard = FetchGuard()
    partner = guard.begin(Role.PARTNER)
    goods = guard.begin("goods")

    assert guard.is_current("partner", partner)
    assert guard.is_current(Role.GOODS, goods)


def test_invalidate_makes_inflight_fetch_stale():
    guard = FetchGuard()
    generation = guard.begin(Role.GOODS)
    guard.invalidate(Role.GOODS)
    assert not guard.accept(Role.GOODS, generation)


async def _fetch(value, delay):
    await asyncio.sleep(delay)
    return value


def test_newer_fetch_wins_even_when_older_arrives_last():
    guard = FetchGuard()

    async def scenario():
        slow = asyncio.ensure_future(guard.run(Role.GOODS, _fetch(["stale"], 0.05)))
        await asyncio.sleep(0)
        fast = asyncio.ensure_future(guard.run(Role.GOODS, _fetch(["fresh"], 0.0)))
        return await slow, await fast

    slow_result, fast_result = asyncio.run(scenario())

    assert slow_result == (False, None)
    assert fast_result == (True, ["fresh"])


async def _failing_fetch(message, delay):
    await asyncio.sleep(delay)
    raise RuntimeError(message)


def test_stale_failure_does_not_reach_caller():
    guard = FetchGuard()

    async def scenario():
        slow = asyncio.ensure_future(guard.run(Role.PARTNER, _failing_fetch("backend down", 0.05)))
        await asyncio.sleep(0)
        fast = asyncio.ensure_future(guard.run(Role.PARTNER, _fetch(["fresh"], 0.0)))
        return await slow, await fast

    slow_result, fast_result = asyncio.run(scenario())

    assert slow_result == (False, None)
    assert fast_result == (True, ["fresh"])


def test_current_failure_is_raised():
    guard = FetchGuard()
    with pytest.raises(RuntimeError):
        asyncio.run(guard.run(Role.PARTNER, _failing_fetch("backend down", 0.0)))

"""Tests for the leading-edge keystroke coalescer."""

from __future__ import annotations

import asyncio

import pytest

from fimcomplete.core.coalescer import Coalescer, CoalescerState, should_suppress

WINDOW = 0.1


async def _burst(coalescer, count, gap=0.01):
    """Fire `count` events `gap` seconds apart and collect their decisions in order."""
    tasks = []
    for _ in range(count):
        tasks.append(asyncio.ensure_future(coalescer.should_suppress(WINDOW)))
        await asyncio.sleep(gap)
    return await asyncio.gather(*tasks)


@pytest.mark.asyncio
async def test_first_event_proceeds_immediately():
    """An idle coalescer lets the first event through without waiting."""
    coalescer = Coalescer(WINDOW)
    suppressed = await asyncio.wait_for(coalescer.should_suppress(), timeout=WINDOW / 2)
    assert suppressed is False
    assert coalescer.active is True


@pytest.mark.asyncio
async def test_window_releases_without_another_event():
    """After one lone event the window closes by itself; the next event is leading again."""
    coalescer = Coalescer(WINDOW)
    assert await coalescer.should_suppress() is False

    await asyncio.sleep(WINDOW * 1.5)
    assert coalescer.active is False

    assert await asyncio.wait_for(coalescer.should_suppress(), timeout=WINDOW / 2) is False


@pytest.mark.asyncio
async def test_burst_lets_only_leading_and_last_through():
    """Inside a burst, only the first (leading) and the last event proceed."""
    coalescer = Coalescer(WINDOW)
    results = await _burst(coalescer, 6)

    assert results[0] is False
    assert results[1:-1] == [True] * 4
    assert results[-1] is False


@pytest.mark.asyncio
async def test_follow_up_event_waits_out_the_window():
    """An event arriving while the window is open proceeds only after a full window."""
    coalescer = Coalescer(WINDOW)
    await coalescer.should_suppress()

    loop = asyncio.get_running_loop()
    start = loop.time()
    assert await coalescer.should_suppress() is False
    assert loop.time() - start >= WINDOW * 0.9


@pytest.mark.asyncio
async def test_window_released_after_burst_resolves():
    """Once the last waiter proceeds, the window closes after another quiet period."""
    coalescer = Coalescer(WINDOW)
    await _burst(coalescer, 3)
    assert coalescer.active is True

    await asyncio.sleep(WINDOW * 1.5)
    assert coalescer.active is False


@pytest.mark.asyncio
async def test_pending_expiry_is_cancelled_by_follow_up_event():
    coalescer = Coalescer(WINDOW)
    await coalescer.should_suppress()
    handle = coalescer.state.expiry
    assert handle is not None

    waiter = asyncio.ensure_future(coalescer.should_suppress())
    await asyncio.sleep(0)
    assert handle.cancelled()
    assert coalescer.state.expiry is None
    assert await waiter is False


@pytest.mark.asyncio
async def test_tokens_are_unique_per_event():
    state = CoalescerState()
    await should_suppress(state, WINDOW)
    first = state.most_recent_token

    waiter = asyncio.ensure_future(should_suppress(state, WINDOW))
    await asyncio.sleep(0)
    assert state.most_recent_token is not first
    await waiter


@pytest.mark.asyncio
async def test_interleaved_waiters_with_different_windows():
    """A short-window waiter that started later wins; the earlier long waiter is suppressed."""
    state = CoalescerState()
    await should_suppress(state, WINDOW)

    slow = asyncio.ensure_future(should_suppress(state, WINDOW * 3))
    await asyncio.sleep(0.01)
    fast = asyncio.ensure_future(should_suppress(state, WINDOW))

    assert await fast is False
    assert await slow is True


@pytest.mark.asyncio
async def test_only_one_waiter_sees_itself_latest():
    """Two waiters never both proceed, even when they wake in the same loop iteration."""
    state = CoalescerState()
    await should_suppress(state, WINDOW)

    first = asyncio.ensure_future(should_suppress(state, WINDOW))
    second = asyncio.ensure_future(should_suppress(state, WINDOW))
    results = await asyncio.gather(first, second)

    assert results == [True, False]


@pytest.mark.asyncio
async def test_waiters_and_coalescer_share_one_state_record():
    """Every event of a session decides against the same CoalescerState."""
    coalescer = Coalescer(WINDOW)
    state = coalescer.state

    results = await _burst(coalescer, 3)

    assert results == [False, True, False]
    assert coalescer.state is state
    assert not hasattr(coalescer, "reset")

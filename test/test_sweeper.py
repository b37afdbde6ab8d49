"""测试过期会话清理"""

import asyncio

import pytest

from support_relay.chat import ExpirySweeper


@pytest.mark.asyncio
async def test_sweep_evicts_idle_and_keeps_active(sweeper, store, transport, clock):
    stale = store.get_or_create("stale")
    clock.advance(minutes=9)
    active = store.get_or_create("active")
    store.append_message(active, "client", "still here")
    snapshot = active.model_copy(deep=True)
    clock.advance(minutes=2)

    evicted = await sweeper.sweep()

    assert evicted == [stale.id]
    assert stale.id not in store
    assert store.get(active.id) == snapshot
    assert transport.to("room:admins") == [("chat_deleted", {"chatId": stale.id})]
    assert transport.to(f"room:client_{stale.id}") == [("chat_deleted", {"chatId": stale.id})]


@pytest.mark.asyncio
async def test_sweep_threshold_is_exclusive(sweeper, store, clock):
    session = store.get_or_create("edge")
    clock.advance(minutes=10)

    assert await sweeper.sweep() == []
    assert session.id in store

    clock.advance(ms=1)
    assert await sweeper.sweep() == [session.id]


@pytest.mark.asyncio
async def test_activity_postpones_eviction(sweeper, store, clock):
    session = store.get_or_create("chatty")
    clock.advance(minutes=8)
    store.mark_seen(session)
    clock.advance(minutes=8)

    assert await sweeper.sweep() == []


@pytest.mark.asyncio
async def test_sweep_on_empty_store(sweeper, transport):
    assert await sweeper.sweep() == []
    assert transport.sent == []


@pytest.mark.asyncio
async def test_background_loop_sweeps_and_stops(store, transport, clock):
    sweeper = ExpirySweeper(store, transport, idle_timeout_minutes=1, interval_seconds=0.01)
    session = store.get_or_create("old")
    clock.advance(minutes=5)

    sweeper.start()
    assert sweeper.running
    for _ in range(100):
        if session.id not in store:
            break
        await asyncio.sleep(0.01)
    await sweeper.stop()

    assert session.id not in store
    assert not sweeper.running


@pytest.mark.asyncio
async def test_background_loop_survives_failing_sweep(store, transport):
    sweeper = ExpirySweeper(store, transport, interval_seconds=0.01)
    calls = []

    async def flaky_sweep():
        calls.append(1)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return []

    sweeper.sweep = flaky_sweep
    sweeper.start()
    for _ in range(100):
        if len(calls) >= 2:
            break
        await asyncio.sleep(0.01)
    await sweeper.stop()

    assert len(calls) >= 2

from __future__ import annotations

import asyncio

from rooms import events
from rooms.lifecycle import SessionLifecycle
from rooms.reaper import ExpiryReaper
from rooms.registry import SessionRegistry
from tests.conftest import RecordingTransport


async def test_sweep_removes_only_expired_rooms(lifecycle, registry, clock):
    reaper = ExpiryReaper(lifecycle, ttl=300, interval=60)
    stale = await lifecycle.create("a")
    clock.advance(250)
    fresh = await lifecycle.create("b")
    clock.advance(60)

    assert await reaper.sweep() == [stale]
    assert registry.lookup(stale) is None
    assert registry.lookup(fresh) is not None


async def test_sweep_ignores_membership_and_notifies_waiting_peer(lifecycle, registry, transport, clock):
    reaper = ExpiryReaper(lifecycle, ttl=300)
    code = await lifecycle.create("owner")
    await lifecycle.join("peer", code)
    transport.clear()
    clock.advance(301)

    assert await reaper.sweep() == [code]
    assert transport.names("peer") == [events.UPLOADER_DISCONNECTED]
    assert transport.inbox["owner"] == []
    assert transport.groups[code] == set()


async def test_sweep_then_owner_disconnect_removes_once(lifecycle, registry, transport, clock):
    reaper = ExpiryReaper(lifecycle, ttl=300)
    code = await lifecycle.create("owner")
    await lifecycle.join("peer", code)
    clock.advance(301)
    await reaper.sweep()
    transport.clear()

    assert await lifecycle.disconnect("owner") == []
    assert transport.inbox["peer"] == []


async def test_background_task_expires_rooms():
    transport = RecordingTransport()
    registry = SessionRegistry()
    lifecycle = SessionLifecycle(registry, transport)
    reaper = ExpiryReaper(lifecycle, ttl=0.01, interval=0.02)

    code = await lifecycle.create("owner")
    reaper.ensure_started()
    reaper.ensure_started()
    assert reaper.running
    try:
        for _ in range(50):
            await asyncio.sleep(0.02)
            if registry.lookup(code) is None:
                break
        assert registry.lookup(code) is None
    finally:
        await reaper.stop()
    assert not reaper.running


async def test_failed_sweep_does_not_stop_the_loop(lifecycle, monkeypatch):
    reaper = ExpiryReaper(lifecycle, ttl=300, interval=0.01)
    calls = []

    async def flaky_sweep(now=None):
        calls.append(now)
        if len(calls) == 1:
            raise RuntimeError("boom")
        return []

    monkeypatch.setattr(reaper, "sweep", flaky_sweep)
    reaper.ensure_started()
    try:
        for _ in range(50):
            await asyncio.sleep(0.01)
            if len(calls) >= 2:
                break
    finally:
        await reaper.stop()
    assert len(calls) >= 2

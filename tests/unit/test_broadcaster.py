from __future__ import annotations

import asyncio

import orjson
import pytest

from deckbridge.sync.broadcaster import Broadcaster
from deckbridge.protocol.envelope import encode
from deckbridge.handlers.registry import ConnectionRegistry
from deckbridge.handlers.connection import Connection


class _FakeSocket:
    def __init__(self) -> None:
        self.sent: list[str] = []
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.closed = asyncio.Event()

    async def send_text(self, text: str) -> None:
        self.sent.append(text)

    async def close(self, *, code: int = 1000, reason: str = "") -> None:
        self.close_code = code
        self.close_reason = reason
        self.closed.set()


@pytest.mark.asyncio
async def test_broadcast_skips_and_prunes_closed_connections() -> None:
    registry = ConnectionRegistry(max_connections=8)
    live = [Connection(_FakeSocket(), send_queue_max=8) for _ in range(3)]
    dead = Connection(_FakeSocket(), send_queue_max=8)
    dead.mark_closed()
    for conn in [*live, dead]:
        registry.admit(conn)

    delivered = Broadcaster(registry).broadcast(encode("loopStateUpdate", {"loopEnabled": True}))

    assert delivered == 3
    assert registry.connections() == tuple(live)
    assert all(conn.pending == 1 for conn in live)


@pytest.mark.asyncio
async def test_broadcast_serializes_once_and_preserves_order() -> None:
    registry = ConnectionRegistry(max_connections=2)
    ws = _FakeSocket()
    conn = Connection(ws, send_queue_max=8)
    registry.admit(conn)
    conn.start()
    broadcaster = Broadcaster(registry)

    for volume in (0.1, 0.2, 0.3):
        broadcaster.broadcast(encode("volumeStateUpdate", {"volume": volume}))
    await asyncio.wait_for(conn.drain(), timeout=1.0)

    assert [orjson.loads(text)["payload"]["volume"] for text in ws.sent] == [0.1, 0.2, 0.3]
    await conn.close()


@pytest.mark.asyncio
async def test_full_queue_drops_slow_client() -> None:
    registry = ConnectionRegistry(max_connections=2)
    slow_ws = _FakeSocket()
    slow = Connection(slow_ws, send_queue_max=1)
    fast = Connection(_FakeSocket(), send_queue_max=8)
    registry.admit(slow)
    registry.admit(fast)
    broadcaster = Broadcaster(registry)

    # Writers never started: the first frame fills the slow queue.
    assert broadcaster.broadcast(encode("positionUpdate", {"position": 1})) == 2
    assert broadcaster.broadcast(encode("positionUpdate", {"position": 2})) == 1

    await asyncio.wait_for(slow_ws.closed.wait(), timeout=1.0)
    assert slow_ws.close_code == 4003
    assert slow.closed
    assert registry.connections() == (fast,)
    assert fast.pending == 2

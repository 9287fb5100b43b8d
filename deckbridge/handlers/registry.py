"""Connection registry with admission control."""

from __future__ import annotations

import asyncio

from deckbridge.config.websocket import WS_CLOSE_CLEAN_CODE

from .connection import Connection


class ConnectionRegistry:
    """Live control-surface connections, in accept order.

    Mutated only from the state store's critical section, so it needs no lock
    of its own.
    """

    def __init__(self, *, max_connections: int) -> None:
        self._max = max(1, int(max_connections))
        self._active: dict[int, Connection] = {}

    @property
    def max_connections(self) -> int:
        return self._max

    def has_capacity(self) -> bool:
        return len(self._active) < self._max

    def admit(self, conn: Connection) -> bool:
        if conn.id in self._active:
            return True
        if not self.has_capacity():
            return False
        self._active[conn.id] = conn
        return True

    def discard(self, conn: Connection) -> bool:
        return self._active.pop(conn.id, None) is not None

    def connections(self) -> tuple[Connection, ...]:
        return tuple(self._active.values())

    def count(self) -> int:
        return len(self._active)

    async def close_all(self, *, code: int = WS_CLOSE_CLEAN_CODE, reason: str = "") -> int:
        conns = self.connections()
        self._active.clear()
        await asyncio.gather(*(c.close(code=code, reason=reason) for c in conns), return_exceptions=True)
        return len(conns)


__all__ = ["ConnectionRegistry"]

"""Authoritative mirror of host state and the single broadcast path."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from concurrent.futures import Future
from collections.abc import Mapping, Callable

from deckbridge.state.surface import ControlSurfaceState
from deckbridge.handlers.registry import ConnectionRegistry
from deckbridge.handlers.connection import Connection
from deckbridge.protocol.envelope import Envelope, encode, now_iso, now_ms
from deckbridge.config.protocol import ACTION_HOTKEY_STATE, HOTKEY_TAB_SWITCHED, ACTION_CONNECTION_STATE

from .dedup import NotificationDeduplicator
from .ingest import normalize_event
from .reducers import apply_event, connection_state_payload
from .broadcaster import Broadcaster

logger = logging.getLogger(__name__)


class StateStore:
    """Owns `ControlSurfaceState` and the connection registry.

    Every mutation (connection bookkeeping and ingested domain events alike)
    happens under one `asyncio.Lock`, and the resulting envelope is enqueued on
    every connection before the lock is released, so clients observe
    transitions in the order the host produced them.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        deduplicator: NotificationDeduplicator | None = None,
        now_fn: Callable[[], int] | None = None,
    ) -> None:
        self._registry = registry
        self._broadcaster = Broadcaster(registry)
        self._dedup = deduplicator or NotificationDeduplicator()
        self._now = now_fn or now_ms
        self._lock = asyncio.Lock()
        self._state = ControlSurfaceState()
        self._loop: asyncio.AbstractEventLoop | None = None
        self.server_port: int | None = None

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    @property
    def last_activity(self) -> int | None:
        return self._state.last_activity

    def bind_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def snapshot(self) -> dict[str, Any]:
        return self._state.to_payload()

    def touch(self) -> None:
        self._state.last_activity = self._now()

    def hotkey_tabs(self) -> dict[str, Any]:
        names = self._state.tab_names
        tabs = [{"number": n, "name": names[n]} for n in sorted(names)]
        return {"tabs": tabs, "activeTab": self._state.active_tab}

    def hotkey_tab_content(self, tab_number: int) -> dict[str, Any]:
        return {
            "tabNumber": tab_number,
            "tabName": self._state.tab_names.get(tab_number, f"Tab {tab_number}"),
            "hotkeys": dict(self._state.tab_hotkeys.get(tab_number, {})),
        }

    async def attach(self, conn: Connection) -> bool:
        """Admit `conn` and greet it with the full state. False when at capacity."""
        async with self._lock:
            if not self._registry.admit(conn):
                return False
            conn.start()
            self.touch()
            greeting = connection_state_payload(self._state, server_port=self.server_port)
            greeting["connected"] = True
            greeting["connectionCount"] = self._registry.count()
            greeting["connectionTime"] = now_iso()
            conn.offer_envelope(encode(ACTION_CONNECTION_STATE, greeting))
            self._sync_connections()
        logger.info("control surface connected id=%s total=%s", conn.id, self._state.connection_count)
        return True

    async def detach(self, conn: Connection) -> None:
        async with self._lock:
            removed = self._registry.discard(conn)
            self._sync_connections()
        if removed:
            logger.info("control surface disconnected id=%s total=%s", conn.id, self._state.connection_count)

    async def ingest(self, event: Envelope | Mapping[str, Any]) -> bool:
        """Apply one authoritative domain event and broadcast it.

        Returns False only when the event was a duplicate notification.
        """
        envelope = normalize_event(event)
        async with self._lock:
            if not self._should_emit(envelope):
                return False
            outbound = apply_event(self._state, envelope, server_port=self.server_port)
            delivered = self._broadcaster.broadcast(outbound)
            self._sync_connections()
        logger.debug("broadcast action=%s delivered=%s", outbound.action, delivered)
        return True

    def ingest_threadsafe(self, event: Envelope | Mapping[str, Any]) -> Future:
        """Schedule `ingest` on the server loop from another thread."""
        if self._loop is None:
            raise RuntimeError("state store is not bound to a running event loop")
        return asyncio.run_coroutine_threadsafe(self.ingest(event), self._loop)

    async def close_all(self, *, code: int, reason: str) -> int:
        async with self._lock:
            closed = await self._registry.close_all(code=code, reason=reason)
            self._sync_connections()
        return closed

    async def reset(self) -> None:
        async with self._lock:
            self._state = ControlSurfaceState()
            self._dedup.reset()

    def _should_emit(self, envelope: Envelope) -> bool:
        payload = envelope.payload
        if envelope.action != ACTION_HOTKEY_STATE or payload.get("changeAction") != HOTKEY_TAB_SWITCHED:
            return True
        return self._dedup.should_emit(payload.get("fromTab"), payload.get("toTab"))

    def _sync_connections(self) -> None:
        count = self._registry.count()
        self._state.connection_count = count
        self._state.connected = count > 0


__all__ = ["StateStore"]

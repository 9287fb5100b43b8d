"""Per-connection idle enforcement."""

from __future__ import annotations

import time
import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Callable

from deckbridge.config.websocket import (
    WS_CLOSE_IDLE_CODE,
    WS_CLOSE_IDLE_REASON,
    MIN_WS_WATCHDOG_TICK_S,
    DEFAULT_WS_IDLE_TIMEOUT_S,
    DEFAULT_WS_WATCHDOG_TICK_S,
)

logger = logging.getLogger(__name__)


class WebSocketLifecycle:
    """Closes a connection whose `last_activity` is older than `idle_timeout_s`.

    The message loop refreshes the connection on every inbound frame, and
    surfaces ping every 30 s, so the default only trips after several missed
    pings. An idle timeout of 0 disables the watchdog.
    """

    def __init__(
        self,
        connection: Any,
        *,
        idle_timeout_s: float | None = None,
        watchdog_tick_s: float | None = None,
        now_fn: Callable[[], float] | None = None,
    ) -> None:
        self._conn = connection
        self._idle_timeout_s = float(DEFAULT_WS_IDLE_TIMEOUT_S if idle_timeout_s is None else idle_timeout_s)
        tick = DEFAULT_WS_WATCHDOG_TICK_S if watchdog_tick_s is None else watchdog_tick_s
        self._watchdog_tick_s = max(MIN_WS_WATCHDOG_TICK_S, float(tick))
        self._now = now_fn or time.monotonic
        self._expired = asyncio.Event()
        self._task: asyncio.Task | None = None

    @property
    def watchdog_tick_s(self) -> float:
        return self._watchdog_tick_s

    def should_close(self) -> bool:
        return self._expired.is_set()

    def idle_for(self) -> float:
        return self._now() - self._conn.last_activity

    def start(self) -> asyncio.Task | None:
        if self._idle_timeout_s <= 0:
            return None
        if self._task is None:
            self._task = asyncio.create_task(self._watch())
        return self._task

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(Exception, asyncio.CancelledError):
            await task

    async def _watch(self) -> None:
        while not self._conn.closed:
            await asyncio.sleep(self._watchdog_tick_s)
            if self.idle_for() >= self._idle_timeout_s:
                await self._expire()
                return

    async def _expire(self) -> None:
        logger.info("control surface id=%s idle for %.0fs; closing", getattr(self._conn, "id", "?"), self.idle_for())
        self._expired.set()
        try:
            await self._conn.close(code=WS_CLOSE_IDLE_CODE, reason=WS_CLOSE_IDLE_REASON)
        except Exception:
            logger.debug("idle close failed", exc_info=True)


__all__ = ["WebSocketLifecycle"]

"""A single control-surface socket with an ordered, bounded outbound queue."""

from __future__ import annotations

import time
import asyncio
import logging
import itertools
import contextlib
from typing import Any
from collections.abc import Callable

from fastapi import WebSocketDisconnect

from deckbridge.config.websocket import WS_CLOSE_CLEAN_CODE
from deckbridge.protocol.envelope import Envelope, dumps

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class Connection:
    """Owns one duplex channel; only the registry hands these out.

    Outbound traffic (responses and broadcasts alike) goes through `offer`,
    which never waits: a writer task drains the queue in FIFO order so a slow
    peer only ever delays itself.
    """

    def __init__(
        self,
        ws: Any,
        *,
        send_queue_max: int,
        now_fn: Callable[[], float] | None = None,
    ) -> None:
        self.id = next(_ids)
        self._ws = ws
        self._now = now_fn or time.monotonic
        self._queue: asyncio.Queue[str] = asyncio.Queue(maxsize=max(1, int(send_queue_max)))
        self._closed = False
        self._writer: asyncio.Task | None = None
        self.last_activity = self._now()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def touch(self) -> None:
        self.last_activity = self._now()

    def offer(self, text: str) -> bool:
        """Queue a frame for delivery. False if closed or the queue is full."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(text)
        except asyncio.QueueFull:
            return False
        return True

    def offer_envelope(self, envelope: Envelope) -> bool:
        return self.offer(dumps(envelope))

    def start(self) -> asyncio.Task:
        if self._writer is None:
            self._writer = asyncio.create_task(self._write_loop())
        return self._writer

    async def drain(self) -> None:
        """Wait until everything queued so far has been handed to the socket (or discarded)."""
        await self._queue.join()

    def mark_closed(self) -> None:
        self._closed = True

    async def close(self, *, code: int = WS_CLOSE_CLEAN_CODE, reason: str = "") -> None:
        if self._closed and self._writer is None:
            return
        self._closed = True
        await self._stop_writer()
        with contextlib.suppress(Exception):
            await self._ws.close(code=code, reason=reason)

    async def _stop_writer(self) -> None:
        writer, self._writer = self._writer, None
        if writer is not None and writer is not asyncio.current_task():
            writer.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await writer
        self._discard_pending()

    def _discard_pending(self) -> None:
        while True:
            try:
                self._queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            self._queue.task_done()

    async def _write_loop(self) -> None:
        while True:
            text = await self._queue.get()
            try:
                await self._ws.send_text(text)
            except WebSocketDisconnect:
                self._closed = True
            except Exception:
                logger.debug("control surface send failed id=%s", self.id, exc_info=True)
                self._closed = True
            finally:
                self._queue.task_done()
            if self._closed:
                self._discard_pending()
                return


__all__ = ["Connection"]

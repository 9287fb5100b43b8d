"""Control-surface side connection manager with backoff and slow polling.

States: idle -> connecting -> connected. On an unexpected disconnect the
engine retries quickly with exponential backoff, then degrades to a slow
periodic retry that never gives up. A clean close (code 1000) ends the session
without retrying.
"""

from __future__ import annotations

import asyncio
import logging
import contextlib
from typing import Any
from collections.abc import Mapping, Callable, Awaitable

import orjson
import websockets

from deckbridge.errors import DecodeError, SurfaceConnectionError
from deckbridge.config.websocket import WS_CLOSE_CLEAN_CODE
from deckbridge.state.session import ReconnectMode, ReconnectSession
from deckbridge.protocol.envelope import Envelope, dumps, encode, decode, now_ms
from deckbridge.config.protocol import KEY_TYPE, TYPE_PING, KEY_ACTION, KEY_TIMESTAMP, SURFACE_SOURCE, ACTION_GET_STATE

from .backoff import BackoffPolicy

logger = logging.getLogger(__name__)

ConnectFn = Callable[[str], Awaitable[Any]]
SleepFn = Callable[[float], Awaitable[None]]

CLOSE_ABNORMAL = 1006
MANUAL_RECONNECT_REASON = "Manual reconnect"
CLIENT_STOPPED_REASON = "Client stopped"


async def _default_connect(url: str) -> Any:
    return await websockets.connect(url, ping_interval=None, ping_timeout=None)


def _close_code(exc: BaseException | None, ws: Any) -> int:
    rcvd = getattr(exc, "rcvd", None)
    if rcvd is not None:
        return int(rcvd.code)
    code = getattr(ws, "close_code", None)
    return int(code) if code is not None else CLOSE_ABNORMAL


class ReconnectionEngine:
    def __init__(
        self,
        url: str,
        *,
        policy: BackoffPolicy | None = None,
        on_message: Callable[[Envelope], None] | None = None,
        on_status: Callable[[str], None] | None = None,
        connect_fn: ConnectFn | None = None,
        sleep_fn: SleepFn | None = None,
        health_ping_interval_s: float = 30.0,
        connect_timeout_s: float = 5.0,
    ) -> None:
        self.url = url
        self.policy = policy or BackoffPolicy()
        self.session = ReconnectSession(base_delay_s=self.policy.base_s)
        self.on_message = on_message
        self._on_status = on_status
        self._connect = connect_fn or _default_connect
        self._sleep = sleep_fn or asyncio.sleep
        self._ping_interval_s = float(health_ping_interval_s)
        self._connect_timeout_s = float(connect_timeout_s)
        self._ws: Any = None
        self._retry_task: asyncio.Task | None = None
        self._reader_task: asyncio.Task | None = None
        self._ping_task: asyncio.Task | None = None
        self._stopped = False
        self.last_error: str | None = None

    @property
    def connected(self) -> bool:
        return self._ws is not None and self.session.mode is ReconnectMode.CONNECTED

    @property
    def retry_pending(self) -> bool:
        return self._retry_task is not None and not self._retry_task.done()

    def status_text(self) -> str:
        mode = self.session.mode
        if mode is ReconnectMode.CONNECTED:
            return "Connected"
        if mode is ReconnectMode.CONNECTING:
            return "Connecting..."
        if mode is ReconnectMode.FAST:
            return f"Retrying ({self.session.attempt_count}/{self.policy.max_attempts})..."
        if mode is ReconnectMode.SLOW:
            return "Retrying..."
        return "Disconnected"

    async def start(self) -> bool:
        self._stopped = False
        return await self._attempt()

    async def stop(self) -> None:
        """Clean shutdown: close with 1000 and make no further attempts."""
        self._stopped = True
        self._cancel_retry()
        await self._drop_socket(reason=CLIENT_STOPPED_REASON)
        self._set_mode(ReconnectMode.IDLE)

    async def force_reconnect(self) -> bool:
        """Drop the current link, reset backoff and try again right away."""
        logger.info("force reconnect requested")
        self._stopped = False
        self._cancel_retry()
        await self._drop_socket(reason=MANUAL_RECONNECT_REASON)
        self.session.reset(ReconnectMode.IDLE)
        return await self._attempt()

    def ensure_connected(self, action: str = "") -> bool:
        """True when the link is usable; otherwise start an immediate attempt and return False.

        A pending fast or slow retry timer is cancelled in favour of the
        immediate attempt. Backoff is reset only when nothing was pending.
        """
        if self.connected:
            return True
        if self.session.mode is ReconnectMode.CONNECTING:
            return False
        logger.info("button press (%s) while disconnected; attempting immediate reconnection", action or "?")
        if not self.retry_pending:
            self.session.reset(self.session.mode)
        self._stopped = False
        self._cancel_retry()
        self._retry_task = asyncio.create_task(self._attempt())
        return False

    async def send_action(self, action: str, payload: Mapping[str, Any] | None = None) -> bool:
        if not self.connected:
            return False
        try:
            await self._ws.send(dumps(encode(action, payload, source=SURFACE_SOURCE)))
        except Exception:
            logger.debug("send failed action=%s", action, exc_info=True)
            return False
        return True

    async def _attempt(self) -> bool:
        if self._stopped:
            return False
        if self.connected:
            return True
        self._set_mode(ReconnectMode.CONNECTING)
        try:
            ws = await asyncio.wait_for(self._connect(self.url), timeout=self._connect_timeout_s)
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            err = SurfaceConnectionError(reason=str(exc) or type(exc).__name__)
            self.last_error = err.reason
            logger.info("connect to %s failed: %s", self.url, err)
            self._schedule_retry()
            return False
        if self._stopped:
            with contextlib.suppress(Exception):
                await ws.close(code=WS_CLOSE_CLEAN_CODE, reason=CLIENT_STOPPED_REASON)
            return False
        await self._on_open(ws)
        return True

    async def _on_open(self, ws: Any) -> None:
        self._cancel_retry()
        self._ws = ws
        self.last_error = None
        self.session.reset(ReconnectMode.CONNECTED)
        self._notify_status()
        logger.info("connected to %s", self.url)
        self._reader_task = asyncio.create_task(self._read_loop(ws))
        if self._ping_interval_s > 0:
            self._ping_task = asyncio.create_task(self._ping_loop(ws))
        await self.send_action(ACTION_GET_STATE)

    async def _read_loop(self, ws: Any) -> None:
        exc: BaseException | None = None
        try:
            while True:
                raw = await ws.recv()
                self._handle_frame(raw)
        except asyncio.CancelledError:
            raise
        except websockets.exceptions.ConnectionClosed as closed:
            exc = closed
        except Exception as err:
            logger.debug("receive failed", exc_info=True)
            exc = err
        self._on_close(ws, _close_code(exc, ws))

    def _handle_frame(self, raw: str | bytes) -> None:
        try:
            msg = orjson.loads(raw)
        except orjson.JSONDecodeError:
            logger.debug("ignoring non-JSON frame")
            return
        if not isinstance(msg, dict) or KEY_ACTION not in msg:
            return
        try:
            envelope = decode(msg)
        except DecodeError as exc:
            logger.debug("ignoring malformed envelope: %s", exc)
            return
        if self.on_message is not None:
            self.on_message(envelope)

    def _on_close(self, ws: Any, code: int) -> None:
        if ws is not self._ws:
            return
        self._ws = None
        self._stop_ping()
        logger.info("connection closed code=%s", code)
        if self._stopped or code == WS_CLOSE_CLEAN_CODE:
            self._set_mode(ReconnectMode.IDLE)
            return
        self._schedule_retry()

    def _schedule_retry(self) -> None:
        if self._stopped:
            return
        attempt = self.session.attempt_count + 1
        mode, delay = self.policy.next_retry(attempt)
        if mode is ReconnectMode.FAST:
            self.session.attempt_count = attempt
            self.session.current_delay_s = delay
        self._set_mode(mode)
        logger.info("reconnect in %.1fs (%s)", delay, self.status_text())
        self._cancel_retry()
        self._retry_task = asyncio.create_task(self._retry_after(delay))

    async def _retry_after(self, delay_s: float) -> None:
        await self._sleep(delay_s)
        await self._attempt()

    async def _ping_loop(self, ws: Any) -> None:
        while True:
            await asyncio.sleep(self._ping_interval_s)
            try:
                await ws.send(orjson.dumps({KEY_TYPE: TYPE_PING, KEY_TIMESTAMP: now_ms()}).decode("utf-8"))
            except Exception:
                logger.debug("health ping failed", exc_info=True)

    def _cancel_retry(self) -> None:
        task, self._retry_task = self._retry_task, None
        if task is not None and task is not asyncio.current_task():
            task.cancel()

    def _stop_ping(self) -> None:
        task, self._ping_task = self._ping_task, None
        if task is not None:
            task.cancel()

    async def _drop_socket(self, *, reason: str) -> None:
        ws, self._ws = self._ws, None
        self._stop_ping()
        reader, self._reader_task = self._reader_task, None
        if reader is not None and reader is not asyncio.current_task():
            reader.cancel()
            with contextlib.suppress(asyncio.CancelledError, Exception):
                await reader
        if ws is not None:
            with contextlib.suppress(Exception):
                await ws.close(code=WS_CLOSE_CLEAN_CODE, reason=reason)

    def _set_mode(self, mode: ReconnectMode) -> None:
        self.session.mode = mode
        self._notify_status()

    def _notify_status(self) -> None:
        if self._on_status is not None:
            self._on_status(self.status_text())


__all__ = ["ReconnectionEngine"]

"""Host-side server lifecycle: bind, serve, stop, reconfigure."""

from __future__ import annotations

import socket
import asyncio
import logging
import contextlib
from typing import Any
from dataclasses import replace

import uvicorn

from deckbridge.app import create_app
from deckbridge.errors import BindError
from deckbridge.sync.store import StateStore
from deckbridge.state.settings import AppSettings
from deckbridge.domain.protocol import DomainCommands
from deckbridge.runtime.preferences import PreferencesStore
from deckbridge.runtime.dependencies import build_runtime_deps
from deckbridge.config.preferences import PREF_PORT, PREF_ENABLED
from deckbridge.config.websocket import WS_CLOSE_CLEAN_CODE, WS_CLOSE_SHUTDOWN_REASON
from deckbridge.runtime.settings_loader import load_settings, preferences_path, validate_port

logger = logging.getLogger(__name__)

_STARTUP_POLL_S = 0.01
_SHUTDOWN_TIMEOUT_S = 5.0


def _bind_socket(host: str, port: int) -> socket.socket:
    """Listen on the first address `host` resolves to; IPv6 loopback included."""
    try:
        infos = socket.getaddrinfo(host, port, type=socket.SOCK_STREAM, flags=socket.AI_PASSIVE)
    except socket.gaierror as exc:
        raise BindError(host=host, port=port, reason=exc.strerror or str(exc)) from exc

    error: OSError | None = None
    for family, kind, proto, _, address in infos:
        sock = socket.socket(family, kind, proto)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address)
            sock.listen(128)
        except OSError as exc:
            sock.close()
            error = exc
            continue
        return sock
    reason = (error.strerror or str(error)) if error is not None else "no usable address"
    raise BindError(host=host, port=port, reason=reason) from error


def ws_url(host: str, port: int) -> str:
    return f"ws://[{host}]:{port}" if ":" in host else f"ws://{host}:{port}"


class SurfaceServer:
    """Owns the listening socket, the uvicorn server and the runtime dependencies.

    `start()` raises `BindError` when the endpoint cannot be bound and returns
    False when the server is already running. `stop()` closes every control
    surface cleanly and resets the mirrored state.
    """

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        commands: DomainCommands | None = None,
        preferences: PreferencesStore | None = None,
    ) -> None:
        if preferences is None:
            path = settings.server.preferences_path if settings is not None else preferences_path()
            preferences = PreferencesStore(path)
        self.preferences = preferences
        self.settings = settings or load_settings(preferences)
        self.deps = build_runtime_deps(self.settings, commands=commands)
        self._server: uvicorn.Server | None = None
        self._task: asyncio.Task | None = None
        self._sock: socket.socket | None = None
        self._lock = asyncio.Lock()

    @property
    def store(self) -> StateStore:
        return self.deps.store

    @property
    def commands(self) -> DomainCommands:
        return self.deps.commands

    @property
    def host(self) -> str:
        return self.settings.server.host

    @property
    def port(self) -> int:
        return self.settings.server.port

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> bool:
        async with self._lock:
            return await self._start()

    async def stop(self) -> None:
        async with self._lock:
            await self._stop()

    async def _start(self) -> bool:
        if self.running:
            logger.info("control surface server already running on port %s", self.port)
            return False

        sock = _bind_socket(self.host, self.port)
        self.store.server_port = self.port
        self.store.bind_loop(asyncio.get_running_loop())

        config = uvicorn.Config(
            create_app(self.deps, status_fn=self.status),
            log_config=None,
            lifespan="off",
            timeout_graceful_shutdown=_SHUTDOWN_TIMEOUT_S,
        )
        server = uvicorn.Server(config)
        task = asyncio.create_task(server.serve(sockets=[sock]))
        while not server.started:
            if task.done():
                sock.close()
                await task
                raise BindError(host=self.host, port=self.port, reason="server exited during startup")
            await asyncio.sleep(_STARTUP_POLL_S)

        self._server, self._task, self._sock = server, task, sock
        logger.info("control surface server listening on %s", ws_url(self.host, self.port))
        return True

    async def _stop(self) -> None:
        closed = await self.store.close_all(code=WS_CLOSE_CLEAN_CODE, reason=WS_CLOSE_SHUTDOWN_REASON)
        server, task, sock = self._server, self._task, self._sock
        self._server = self._task = self._sock = None
        if server is not None and task is not None:
            server.should_exit = True
            try:
                await asyncio.wait_for(task, timeout=_SHUTDOWN_TIMEOUT_S * 2)
            except asyncio.TimeoutError:
                logger.warning("uvicorn did not exit in time; cancelling")
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        if sock is not None:
            with contextlib.suppress(OSError):
                sock.close()
        await self.store.reset()
        self.store.server_port = None
        if server is not None:
            logger.info("control surface server stopped; closed %s connection(s)", closed)

    def status(self) -> dict[str, Any]:
        return {
            "running": self.running,
            "port": self.port,
            "connections": self.store.registry.count(),
            "lastActivity": self.store.last_activity,
        }

    async def update_config(self, *, port: int | None = None, enabled: bool | None = None) -> bool:
        """Persist new settings; a running server is restarted on a port change.

        The new port is only persisted once the server listens on it. When it
        cannot be bound, the server comes back on the previous port and the
        `BindError` propagates. Returns True when the server was restarted.
        """
        async with self._lock:
            if enabled is not None:
                self.preferences.set(PREF_ENABLED, bool(enabled))
            if port is None or port == self.port:
                return False
            validate_port(port)
            previous = self.settings
            self.settings = replace(previous, server=replace(previous.server, port=port))
            if not self.running:
                self.preferences.set(PREF_PORT, port)
                return False
            logger.info("restarting control surface server on port %s", port)
            await self._stop()
            try:
                await self._start()
            except BindError:
                logger.warning("port %s unavailable; staying on port %s", port, previous.server.port)
                self.settings = previous
                await self._start()
                raise
            self.preferences.set(PREF_PORT, port)
            return True

    async def autostart(self) -> bool:
        """Start only when the persisted preference enables the integration."""
        if not self.preferences.get(PREF_ENABLED, False):
            logger.info("control surface integration disabled; not starting")
            return False
        return await self.start()


__all__ = ["SurfaceServer", "ws_url"]

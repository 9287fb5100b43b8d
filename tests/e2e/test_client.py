from __future__ import annotations

import asyncio
from collections.abc import Callable

import pytest

from deckbridge.sync import events
from deckbridge.server import SurfaceServer
from deckbridge.client.backoff import BackoffPolicy
from deckbridge.domain.queue import DomainCommand
from deckbridge.state.session import ReconnectMode
from deckbridge.client.engine import ReconnectionEngine
from deckbridge.client.controller import ControlSurfaceClient

_QUICK = BackoffPolicy(base_s=0.05, multiplier=1.0, max_s=0.05, max_attempts=100, slow_s=0.05)


def _client(srv: SurfaceServer) -> ControlSurfaceClient:
    url = f"ws://{srv.host}:{srv.port}/"
    engine = ReconnectionEngine(url, policy=_QUICK, health_ping_interval_s=0, connect_timeout_s=1.0)
    return ControlSurfaceClient(url, engine=engine)


async def _until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    async def wait() -> None:
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(wait(), timeout=timeout)


@pytest.mark.asyncio
async def test_client_mirrors_host_state_on_connect(server: SurfaceServer) -> None:
    await server.store.ingest(events.playing({"id": "3"}, volume=0.4))
    client = _client(server)

    assert await client.start()
    await _until(lambda: client.state.volume == 0.4)

    assert client.state.is_playing
    assert client.state.current_song == {"id": "3"}
    assert client.status_text() == "Connected"
    await client.stop()


@pytest.mark.asyncio
async def test_refused_toggle_is_corrected_by_host(server: SurfaceServer) -> None:
    client = _client(server)
    await client.start()
    await _until(lambda: client.state.connected)

    assert await client.toggle_loop()
    assert client.state.loop_enabled is True
    command = await asyncio.wait_for(server.commands.get(), timeout=2.0)
    assert command == DomainCommand(name="loop", args={"enabled": True})

    # The host keeps loop off and says so.
    await server.store.ingest(events.loop_changed(False))
    await _until(lambda: client.state.loop_enabled is False)
    await client.stop()


@pytest.mark.asyncio
async def test_host_tab_switch_reaches_client(server: SurfaceServer) -> None:
    client = _client(server)
    await client.start()
    await _until(lambda: client.state.connected)

    assert await client.change_tab(4)
    command = await asyncio.wait_for(server.commands.get(), timeout=2.0)
    assert command.args == {"tab_number": 4}

    await server.store.ingest(events.tab_switched(1, 4, tab_name="Stingers"))
    await _until(lambda: client.state.active_tab == 4)
    assert client.state.tab_names[4] == "Stingers"
    await client.stop()


@pytest.mark.asyncio
async def test_server_shutdown_is_not_retried(make_settings) -> None:
    srv = SurfaceServer(make_settings())
    await srv.start()
    client = _client(srv)
    await client.start()

    await srv.stop()
    await _until(lambda: client.engine.session.mode is ReconnectMode.IDLE)

    assert not client.engine.retry_pending
    assert client.status_text() == "Disconnected"


@pytest.mark.asyncio
async def test_client_retries_until_server_comes_up(make_settings) -> None:
    srv = SurfaceServer(make_settings())
    client = _client(srv)

    assert not await client.start()
    await _until(lambda: client.engine.session.attempt_count >= 2)

    await srv.start()
    try:
        await _until(lambda: client.engine.connected)
        assert client.engine.session.attempt_count == 0
    finally:
        await client.stop()
        await srv.stop()

from __future__ import annotations

import socket
import asyncio
from typing import Any

import orjson
import pytest
import websockets

from deckbridge.sync import events
from deckbridge.errors import BindError
from deckbridge.server import SurfaceServer
from deckbridge.domain.queue import DomainCommand
from deckbridge.protocol.envelope import dumps, encode


def _url(srv: SurfaceServer) -> str:
    return f"ws://{srv.host}:{srv.port}/"


async def _recv(ws: Any, timeout: float = 2.0) -> dict[str, Any]:
    return orjson.loads(await asyncio.wait_for(ws.recv(), timeout=timeout))


async def _send_action(ws: Any, action: str, payload: dict[str, Any] | None = None) -> None:
    await ws.send(dumps(encode(action, payload, source="test-surface")))


async def _close_code(ws: Any, timeout: float = 2.0) -> int:
    try:
        while True:
            await asyncio.wait_for(ws.recv(), timeout=timeout)
    except websockets.exceptions.ConnectionClosed as exc:
        assert exc.rcvd is not None
        return exc.rcvd.code


async def _http_get(srv: SurfaceServer, path: str) -> tuple[str, dict[str, Any]]:
    reader, writer = await asyncio.open_connection(srv.host, srv.port)
    writer.write(f"GET {path} HTTP/1.1\r\nHost: {srv.host}\r\nConnection: close\r\n\r\n".encode())
    await writer.drain()
    raw = await asyncio.wait_for(reader.read(), timeout=2.0)
    writer.close()
    head, _, body = raw.partition(b"\r\n\r\n")
    return head.split(b"\r\n", 1)[0].decode(), orjson.loads(body)


@pytest.mark.asyncio
async def test_connect_receives_full_state_greeting(server: SurfaceServer) -> None:
    async with websockets.connect(_url(server)) as ws:
        greeting = await _recv(ws)

    assert greeting["action"] == "connectionStateUpdate"
    assert greeting["version"] == "1.0"
    assert greeting["payload"]["connected"] is True
    assert greeting["payload"]["connectionCount"] == 1
    assert greeting["payload"]["serverPort"] == server.port


@pytest.mark.asyncio
async def test_invalid_requests_are_answered_not_dropped(server: SurfaceServer) -> None:
    async with websockets.connect(_url(server)) as ws:
        await _recv(ws)

        await _send_action(ws, "setVolume", {"volume": 1.5})
        bad_volume = await _recv(ws)
        await _send_action(ws, "rewind")
        unknown = await _recv(ws)
        await ws.send("{nope")
        garbage = await _recv(ws)

    assert bad_volume["action"] == "setVolumeResponse"
    assert bad_volume["payload"]["error"]["code"] == "INVALID_VOLUME"
    assert unknown["action"] == "errorResponse"
    assert unknown["payload"]["error"]["code"] == "UNKNOWN_ACTION"
    assert garbage["payload"]["error"]["code"] == "PARSE_ERROR"
    assert server.commands.queue.empty()


@pytest.mark.asyncio
async def test_ping_is_answered_with_pong(server: SurfaceServer) -> None:
    async with websockets.connect(_url(server)) as ws:
        await _recv(ws)
        await ws.send(orjson.dumps({"type": "ping", "timestamp": 1}).decode())
        pong = await _recv(ws)

    assert pong["type"] == "pong"
    assert isinstance(pong["timestamp"], int)


@pytest.mark.asyncio
async def test_command_reaches_domain_and_confirmation_reaches_all(server: SurfaceServer) -> None:
    async with websockets.connect(_url(server)) as first, websockets.connect(_url(server)) as second:
        await _recv(first)
        await _recv(second)

        await _send_action(first, "playTrack", {"songId": "12"})
        response = await _recv(first)
        command = await asyncio.wait_for(server.commands.get(), timeout=2.0)
        assert response["payload"] == {"success": True, "action": "play_song", "songId": "12"}
        assert command == DomainCommand(name="play", args={"song_id": "12", "file_path": None})

        await server.store.ingest(events.playing({"id": "12", "title": "Theme"}, volume=0.9))
        for ws in (first, second):
            update = await _recv(ws)
            assert update["action"] == "audioStateUpdate"
            assert update["payload"]["currentSong"]["id"] == "12"

        await _send_action(second, "getState")
        state = (await _recv(second))["payload"]["state"]
        assert state["isPlaying"] is True
        assert state["connectionCount"] == 2


@pytest.mark.asyncio
async def test_start_twice_is_a_noop(server: SurfaceServer) -> None:
    assert server.running
    assert not await server.start()


@pytest.mark.asyncio
async def test_occupied_port_raises_bind_error(make_settings, free_port: int) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", free_port))
        holder.listen(1)
        srv = SurfaceServer(make_settings(port=free_port))
        with pytest.raises(BindError) as exc:
            await srv.start()

    assert exc.value.port == free_port
    assert not srv.running


@pytest.mark.asyncio
async def test_capacity_rejects_extra_connection(make_settings) -> None:
    srv = SurfaceServer(make_settings(max_connections=1))
    await srv.start()
    try:
        async with websockets.connect(_url(srv)) as first:
            await _recv(first)
            async with websockets.connect(_url(srv)) as extra:
                rejection = await _recv(extra)
                code = await _close_code(extra)
    finally:
        await srv.stop()

    assert rejection["payload"]["error"]["code"] == "SERVER_AT_CAPACITY"
    assert code == 4002


@pytest.mark.asyncio
async def test_idle_connection_is_closed(make_settings) -> None:
    srv = SurfaceServer(make_settings(idle_timeout_s=0.2))
    await srv.start()
    try:
        async with websockets.connect(_url(srv), ping_interval=None) as ws:
            await _recv(ws)
            code = await _close_code(ws)
    finally:
        await srv.stop()

    assert code == 4000


@pytest.mark.asyncio
async def test_stop_closes_clients_cleanly_and_resets_state(make_settings) -> None:
    srv = SurfaceServer(make_settings())
    await srv.start()
    async with websockets.connect(_url(srv)) as ws:
        await _recv(ws)
        await srv.store.ingest(events.loop_changed(True))
        await _recv(ws)

        await srv.stop()
        code = await _close_code(ws)

    assert code == 1000
    assert not srv.running
    assert srv.store.snapshot()["loopEnabled"] is False
    assert srv.store.snapshot()["connectionCount"] == 0
    assert srv.store.server_port is None


@pytest.mark.asyncio
async def test_http_health_and_status(server: SurfaceServer) -> None:
    status_line, health = await _http_get(server, "/health")
    assert "200" in status_line
    assert health == {"status": "ok"}

    _, status = await _http_get(server, "/status")
    assert status["running"] is True
    assert status["port"] == server.port
    assert status["connections"] == 0


@pytest.mark.asyncio
async def test_port_change_restarts_running_server(server: SurfaceServer) -> None:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as spare:
        spare.bind(("127.0.0.1", 0))
        new_port = spare.getsockname()[1]

    assert await server.update_config(port=new_port, enabled=True)

    assert server.port == new_port
    assert server.preferences.get("surface_port") == new_port
    assert server.preferences.get("surface_enabled") is True
    async with websockets.connect(_url(server)) as ws:
        greeting = await _recv(ws)
    assert greeting["payload"]["serverPort"] == new_port


@pytest.mark.asyncio
async def test_port_change_to_busy_port_stays_on_previous_port(server: SurfaceServer) -> None:
    old_port = server.port
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as holder:
        holder.bind(("127.0.0.1", 0))
        holder.listen(1)
        busy_port = holder.getsockname()[1]

        with pytest.raises(BindError) as exc:
            await server.update_config(port=busy_port)

    assert exc.value.port == busy_port
    assert server.running
    assert server.port == old_port
    assert server.preferences.get("surface_port") is None
    async with websockets.connect(_url(server)) as ws:
        greeting = await _recv(ws)
    assert greeting["payload"]["serverPort"] == old_port


@pytest.mark.asyncio
async def test_port_change_while_stopped_is_persisted(make_settings) -> None:
    srv = SurfaceServer(make_settings())
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as spare:
        spare.bind(("127.0.0.1", 0))
        new_port = spare.getsockname()[1]

    assert not await srv.update_config(port=new_port)
    assert srv.port == new_port
    assert srv.preferences.get("surface_port") == new_port
    assert not srv.running


@pytest.mark.asyncio
async def test_autostart_follows_enabled_preference(make_settings) -> None:
    srv = SurfaceServer(make_settings())
    assert not await srv.autostart()
    assert not srv.running

    srv.preferences.set("surface_enabled", True)
    try:
        assert await srv.autostart()
        assert srv.status()["running"] is True
    finally:
        await srv.stop()

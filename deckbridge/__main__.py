"""Command line entry point: run a host server or monitor one."""

from __future__ import annotations

import sys
import asyncio
import logging
import argparse
import contextlib
from dataclasses import replace

import orjson
import websockets

from deckbridge.server import SurfaceServer, ws_url
from deckbridge.errors import BindError
from deckbridge.domain.queue import CommandQueue
from deckbridge.runtime.logging import configure_logging
from deckbridge.protocol.envelope import dumps, encode
from deckbridge.runtime.settings_loader import load_settings, validate_port
from deckbridge.config.protocol import SURFACE_SOURCE, ACTION_GET_STATE
from deckbridge.config.websocket import DEFAULT_HOST, DEFAULT_PORT

logger = logging.getLogger("deckbridge")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="deckbridge", description="Control-surface bridge")
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the host-side WebSocket server")
    serve.add_argument("--port", type=int, default=None, help="listening port (overrides env and preferences)")

    monitor = sub.add_parser("monitor", help="connect to a running server and print every envelope")
    monitor.add_argument("--host", default=DEFAULT_HOST)
    monitor.add_argument("--port", type=int, default=DEFAULT_PORT)
    monitor.add_argument("--max-messages", type=int, default=0, help="stop after N messages (0 = unlimited)")
    monitor.add_argument("--timeout", type=float, default=0.0, help="stop after N seconds (0 = no limit)")
    return p.parse_args(argv)


async def _log_commands(commands: CommandQueue) -> None:
    while True:
        cmd = await commands.get()
        logger.info("domain command %s %s", cmd.name, cmd.args)


async def serve(port: int | None) -> int:
    settings = load_settings()
    if port is not None:
        settings = replace(settings, server=replace(settings.server, port=validate_port(port)))
    commands = CommandQueue(maxsize=settings.limits.command_queue_max)
    server = SurfaceServer(settings, commands=commands)
    try:
        await server.start()
    except BindError as exc:
        logger.error("%s", exc)
        return 1

    consumer = asyncio.create_task(_log_commands(commands))
    try:
        await asyncio.Event().wait()
    finally:
        consumer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await consumer
        await server.stop()
    return 0


async def monitor(host: str, port: int, *, max_messages: int, timeout_s: float) -> int:
    url = ws_url(host, port)
    received = 0
    try:
        async with websockets.connect(url, ping_interval=None) as ws:
            print(f"connected to {url}")
            await ws.send(dumps(encode(ACTION_GET_STATE, source=SURFACE_SOURCE)))
            loop = asyncio.get_running_loop()
            deadline = loop.time() + timeout_s if timeout_s > 0 else None
            while max_messages <= 0 or received < max_messages:
                remaining = None if deadline is None else max(0.0, deadline - loop.time())
                try:
                    raw = await asyncio.wait_for(ws.recv(), timeout=remaining)
                except asyncio.TimeoutError:
                    break
                received += 1
                msg = orjson.loads(raw)
                print(orjson.dumps(msg, option=orjson.OPT_INDENT_2).decode("utf-8"))
    except websockets.exceptions.ConnectionClosed as exc:
        rcvd = getattr(exc, "rcvd", None)
        print(f"connection closed code={rcvd.code if rcvd else 'n/a'}")
    except OSError as exc:
        print(f"cannot connect to {url}: {exc}", file=sys.stderr)
        return 1
    print(f"received {received} message(s)")
    return 0


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging()
    try:
        if args.command == "serve":
            code = asyncio.run(serve(args.port))
        else:
            code = asyncio.run(
                monitor(args.host, args.port, max_messages=args.max_messages, timeout_s=args.timeout)
            )
    except KeyboardInterrupt:
        code = 0
    raise SystemExit(code)


if __name__ == "__main__":
    main()

"""Inbound frame parsing: keep-alive pings first, then the action envelope."""

from __future__ import annotations

from typing import Any
from dataclasses import dataclass

import orjson

from deckbridge.errors import DecodeError
from deckbridge.protocol.envelope import Envelope, decode
from deckbridge.config.protocol import KEY_TYPE, TYPE_PING, TYPE_PONG, KEY_ACTION, ERROR_PARSE, KEY_TIMESTAMP


@dataclass(frozen=True, slots=True)
class PingMessage:
    kind: str
    timestamp: int | None = None

    @property
    def is_ping(self) -> bool:
        return self.kind == TYPE_PING


def parse_client_message(raw: str | bytes) -> PingMessage | Envelope:
    try:
        msg: Any = orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise DecodeError(code=ERROR_PARSE, message=f"Invalid message format: {exc}") from exc

    if isinstance(msg, dict) and KEY_ACTION not in msg and msg.get(KEY_TYPE) in (TYPE_PING, TYPE_PONG):
        ts = msg.get(KEY_TIMESTAMP)
        return PingMessage(
            kind=msg[KEY_TYPE],
            timestamp=ts if isinstance(ts, int) and not isinstance(ts, bool) else None,
        )
    return decode(msg)


__all__ = ["PingMessage", "parse_client_message"]

"""Versioned JSON envelope used for every message on the wire.

Every frame exchanged with a control surface is

    {"version": "1.0", "timestamp": "<ISO8601>", "source": "<sender>",
     "action": "<name>", "payload": {...}}

except the minimal keep-alive `{"type": "ping"|"pong", "timestamp": <epoch-ms>}`
which is handled by the inbound parser before generic decoding.
"""

from __future__ import annotations

import copy
import time
from typing import Any
from datetime import datetime, timezone
from collections.abc import Mapping
from dataclasses import dataclass

import orjson

from deckbridge.errors import DecodeError
from deckbridge.config.protocol import (
    KEY_ACTION,
    ERROR_PARSE,
    HOST_SOURCE,
    KEY_PAYLOAD,
    KEY_SOURCE,
    KEY_VERSION,
    KEY_TIMESTAMP,
    RESPONSE_SUFFIX,
    PROTOCOL_VERSION,
    ERROR_MISSING_ACTION,
    ACTION_ERROR_RESPONSE,
)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True, slots=True)
class Envelope:
    action: str
    payload: dict[str, Any]
    version: str = PROTOCOL_VERSION
    timestamp: str = ""
    source: str = HOST_SOURCE

    def __post_init__(self) -> None:
        # Detach from the caller's dict so later edits on either side cannot leak.
        object.__setattr__(self, "payload", copy.deepcopy(dict(self.payload or {})))
        if not self.timestamp:
            object.__setattr__(self, "timestamp", now_iso())

    def to_dict(self) -> dict[str, Any]:
        return {
            KEY_VERSION: self.version,
            KEY_TIMESTAMP: self.timestamp,
            KEY_SOURCE: self.source,
            KEY_ACTION: self.action,
            KEY_PAYLOAD: copy.deepcopy(self.payload),
        }


def encode(action: str, payload: Mapping[str, Any] | None = None, *, source: str = HOST_SOURCE) -> Envelope:
    return Envelope(action=action, payload=dict(payload or {}), source=source)


def dumps(envelope: Envelope) -> str:
    return orjson.dumps(envelope.to_dict()).decode("utf-8")


def _loads(raw: str | bytes) -> Any:
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError as exc:
        raise DecodeError(code=ERROR_PARSE, message=f"Invalid message format: {exc}") from exc


def decode(raw: str | bytes | Mapping[str, Any]) -> Envelope:
    """Decode one inbound frame; fails closed with `DecodeError`."""
    msg = raw if isinstance(raw, Mapping) else _loads(raw)
    if not isinstance(msg, Mapping):
        raise DecodeError(code=ERROR_PARSE, message="Invalid message format: message must be a JSON object")

    if KEY_ACTION not in msg:
        raise DecodeError(code=ERROR_PARSE, message="Invalid message format: expected an 'action' or a ping")
    action = msg.get(KEY_ACTION)
    if not isinstance(action, str) or not action.strip():
        raise DecodeError(code=ERROR_MISSING_ACTION, message="Action is required")

    payload = msg.get(KEY_PAYLOAD)
    if payload is None:
        payload = {}
    if not isinstance(payload, Mapping):
        raise DecodeError(code=ERROR_PARSE, message="Invalid message format: 'payload' must be an object")

    version = msg.get(KEY_VERSION)
    timestamp = msg.get(KEY_TIMESTAMP)
    source = msg.get(KEY_SOURCE)
    return Envelope(
        action=action.strip(),
        payload=dict(payload),
        version=version if isinstance(version, str) and version else PROTOCOL_VERSION,
        timestamp=timestamp if isinstance(timestamp, str) else "",
        source=source if isinstance(source, str) and source else "unknown",
    )


def response_action(action: str | None) -> str:
    return f"{action}{RESPONSE_SUFFIX}" if action else ACTION_ERROR_RESPONSE


def build_response(action: str | None, result: Mapping[str, Any] | None = None) -> Envelope:
    payload: dict[str, Any] = {"success": True}
    payload.update(result or {})
    return encode(response_action(action), payload)


def build_error_response(
    code: str,
    message: str,
    *,
    action: str | None = None,
    as_error_response: bool = False,
) -> Envelope:
    """`${action}Response{success:false}`, or `errorResponse` when the action itself is the problem."""
    payload: dict[str, Any] = {"success": False, "error": {"message": message, "code": code}}
    if as_error_response or not action:
        if action:
            payload["action"] = action
        return encode(ACTION_ERROR_RESPONSE, payload)
    return encode(response_action(action), payload)


__all__ = [
    "Envelope",
    "build_error_response",
    "build_response",
    "decode",
    "dumps",
    "encode",
    "now_iso",
    "now_ms",
    "response_action",
]

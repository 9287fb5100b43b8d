from __future__ import annotations

import json

import pytest

from deckbridge.errors import DecodeError
from deckbridge.protocol.envelope import decode, dumps, encode, build_response, build_error_response


def test_round_trip_preserves_action_and_payload() -> None:
    payload = {"volume": 0.5, "currentSong": {"id": "s1", "title": "Intro"}, "tags": [1, 2]}
    env = encode("audioStateUpdate", payload)

    decoded = decode(dumps(env))

    assert decoded.action == "audioStateUpdate"
    assert decoded.payload == payload
    assert decoded.version == "1.0"
    assert decoded.source == "deckbridge-host"
    assert decoded.timestamp == env.timestamp


def test_envelope_detaches_payload_from_caller() -> None:
    payload = {"song": {"id": "a"}}
    env = encode("x", payload)
    payload["song"]["id"] = "b"

    assert env.payload["song"]["id"] == "a"
    env.to_dict()["payload"]["song"]["id"] = "c"
    assert env.payload["song"]["id"] == "a"


def test_timestamp_is_iso_utc_millis() -> None:
    ts = encode("x").timestamp
    assert ts.endswith("Z")
    assert len(ts.split(".")[-1]) == 4  # "123Z"


@pytest.mark.parametrize(
    ("raw", "code"),
    [
        ("not json", "PARSE_ERROR"),
        (json.dumps([1, 2]), "PARSE_ERROR"),
        (json.dumps({"payload": {}}), "PARSE_ERROR"),
        (json.dumps({"type": "hello"}), "PARSE_ERROR"),
        (json.dumps({"action": ""}), "MISSING_ACTION"),
        (json.dumps({"action": 5}), "MISSING_ACTION"),
        (json.dumps({"action": "   "}), "MISSING_ACTION"),
        (json.dumps({"action": "x", "payload": [1]}), "PARSE_ERROR"),
    ],
)
def test_decode_rejects_malformed_frames(raw: str, code: str) -> None:
    with pytest.raises(DecodeError) as exc:
        decode(raw)
    assert exc.value.code == code


def test_decode_fills_defaults() -> None:
    env = decode(json.dumps({"action": "getState"}))
    assert env.payload == {}
    assert env.version == "1.0"
    assert env.source == "unknown"
    assert env.timestamp


def test_build_response_shapes() -> None:
    ok = build_response("playTrack", {"action": "smart_play"})
    assert ok.action == "playTrackResponse"
    assert ok.payload == {"success": True, "action": "smart_play"}

    failed = build_error_response("INVALID_VOLUME", "Volume must be between 0 and 1", action="setVolume")
    assert failed.action == "setVolumeResponse"
    assert failed.payload["success"] is False
    assert failed.payload["error"] == {"message": "Volume must be between 0 and 1", "code": "INVALID_VOLUME"}

    unknown = build_error_response("UNKNOWN_ACTION", "Unknown action: nope", action="nope", as_error_response=True)
    assert unknown.action == "errorResponse"
    assert unknown.payload["action"] == "nope"

"""Per-action reducers that fold an authoritative event into the canonical state.

Each reducer mutates `ControlSurfaceState` in place and returns the payload to
broadcast. Only the store calls these, and only while holding its lock.
"""

from __future__ import annotations

import math
from typing import Any
from collections.abc import Mapping, Callable

from deckbridge.state.surface import ControlSurfaceState
from deckbridge.protocol.envelope import Envelope, encode
from deckbridge.config.limits import MAX_TAB_NUMBER, MIN_TAB_NUMBER
from deckbridge.config.protocol import (
    AUDIO_PLAYING,
    AUDIO_STOPPED,
    HOTKEY_CLEARED,
    ACTION_POSITION,
    ACTION_LOOP_STATE,
    ACTION_MUTE_STATE,
    ACTION_AUDIO_STATE,
    ACTION_HOTKEY_STATE,
    ACTION_VOLUME_STATE,
    HOTKEY_TAB_SWITCHED,
    ACTION_CONNECTION_STATE,
)

Reducer = Callable[[ControlSurfaceState, dict[str, Any]], dict[str, Any]]

# camelCase wire field -> state attribute, for generic patches.
PATCHABLE_FIELDS: dict[str, str] = {
    "currentSong": "current_song",
    "isPlaying": "is_playing",
    "audioState": "audio_state",
    "volume": "volume",
    "position": "position",
    "duration": "duration",
    "loopEnabled": "loop_enabled",
    "muteEnabled": "mute_enabled",
    "activeTab": "active_tab",
}


def _number(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _song_metric(payload: Mapping[str, Any], key: str) -> float | None:
    value = _number(payload.get(key))
    if value is None:
        song = payload.get("currentSong")
        if isinstance(song, Mapping):
            value = _number(song.get(key))
    return value


def _tab(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value if MIN_TAB_NUMBER <= value <= MAX_TAB_NUMBER else None


def _volume(value: Any) -> float | None:
    volume = _number(value)
    return None if volume is None else min(1.0, max(0.0, volume))


def _song(value: Any) -> dict[str, Any] | None:
    return dict(value) if isinstance(value, Mapping) else None


def _apply_playback_fields(state: ControlSurfaceState, payload: Mapping[str, Any]) -> None:
    audio_state = payload.get("audioState")
    if isinstance(audio_state, str) and audio_state:
        state.audio_state = audio_state
        state.is_playing = bool(payload.get("isPlaying", audio_state == AUDIO_PLAYING))
    elif "isPlaying" in payload:
        state.is_playing = bool(payload["isPlaying"])
    if "currentSong" in payload:
        state.current_song = _song(payload["currentSong"])
    volume = _volume(payload.get("volume"))
    if volume is not None:
        state.volume = volume


def reduce_audio_state(state: ControlSurfaceState, payload: dict[str, Any]) -> dict[str, Any]:
    """Fold a playback transition; fields the host left out keep their mirrored value.

    A reported `currentSong` (including an explicit null) starts a new track, so
    position and duration restart from whatever the payload or song carries.
    """
    _apply_playback_fields(state, payload)
    if "audioState" not in payload and "isPlaying" in payload:
        state.audio_state = AUDIO_PLAYING if state.is_playing else AUDIO_STOPPED
    new_track = "currentSong" in payload
    for key in ("position", "duration"):
        value = _song_metric(payload, key)
        if value is None and new_track:
            value = 0.0
        if value is not None:
            setattr(state, key, value)
    return payload


def reduce_position(state: ControlSurfaceState, payload: dict[str, Any]) -> dict[str, Any]:
    _apply_playback_fields(state, payload)
    position = _song_metric(payload, "position")
    if position is None:
        position = state.position
    duration = _song_metric(payload, "duration")
    if duration is None:
        duration = state.duration
    state.position = round(position, 2)
    state.duration = duration
    out = dict(payload)
    out["position"] = state.position
    out["duration"] = duration
    out["percentage"] = round(position / duration * 100, 2) if duration > 0 else 0
    return out


def reduce_loop_state(state: ControlSurfaceState, payload: dict[str, Any]) -> dict[str, Any]:
    if "loopEnabled" in payload:
        state.loop_enabled = bool(payload["loopEnabled"])
    _apply_playback_fields(state, payload)
    return payload


def reduce_mute_state(state: ControlSurfaceState, payload: dict[str, Any]) -> dict[str, Any]:
    if "muteEnabled" in payload:
        state.mute_enabled = bool(payload["muteEnabled"])
    _apply_playback_fields(state, payload)
    return payload


def reduce_volume_state(state: ControlSurfaceState, payload: dict[str, Any]) -> dict[str, Any]:
    if "muteEnabled" in payload:
        state.mute_enabled = bool(payload["muteEnabled"])
    _apply_playback_fields(state, payload)
    return payload


def _cache_tab(state: ControlSurfaceState, tab: int, payload: Mapping[str, Any]) -> None:
    name = payload.get("tabName")
    if isinstance(name, str) and name:
        state.tab_names[tab] = name
    hotkeys = payload.get("hotkeys")
    if isinstance(hotkeys, Mapping):
        state.tab_hotkeys[tab] = dict(hotkeys)
    elif payload.get("changeAction") == HOTKEY_CLEARED:
        state.tab_hotkeys[tab] = {}


def reduce_hotkey_state(state: ControlSurfaceState, payload: dict[str, Any]) -> dict[str, Any]:
    if payload.get("changeAction") == HOTKEY_TAB_SWITCHED:
        tab = _tab(payload.get("toTab", payload.get("activeTab")))
        if tab is not None:
            state.active_tab = tab
            _cache_tab(state, tab, payload)
    else:
        tab = _tab(payload.get("tabNumber"))
        if tab is not None:
            _cache_tab(state, tab, payload)
        active = _tab(payload.get("activeTab"))
        if active is not None:
            state.active_tab = active

    tabs = payload.get("tabs")
    if isinstance(tabs, list):
        for entry in tabs:
            if not isinstance(entry, Mapping):
                continue
            number = _tab(entry.get("number", entry.get("tabNumber")))
            name = entry.get("name", entry.get("tabName"))
            if number is not None and isinstance(name, str) and name:
                state.tab_names[number] = name
    return payload


def connection_state_payload(state: ControlSurfaceState, *, server_port: int | None = None) -> dict[str, Any]:
    payload = state.to_payload()
    payload["serverPort"] = server_port
    return payload


def apply_patch(state: ControlSurfaceState, fields: Mapping[str, Any]) -> None:
    """Generic field patch; connection bookkeeping stays with the registry."""
    for key, value in fields.items():
        attr = PATCHABLE_FIELDS.get(key)
        if attr is None:
            continue
        if attr == "current_song":
            state.current_song = _song(value)
        elif attr in ("is_playing", "loop_enabled", "mute_enabled"):
            setattr(state, attr, bool(value))
        elif attr == "audio_state":
            if isinstance(value, str) and value:
                state.audio_state = value
        elif attr == "active_tab":
            tab = _tab(value)
            if tab is not None:
                state.active_tab = tab
        elif attr == "volume":
            volume = _volume(value)
            if volume is not None:
                state.volume = volume
        else:
            number = _number(value)
            if number is not None:
                setattr(state, attr, number)


REDUCERS: dict[str, Reducer] = {
    ACTION_AUDIO_STATE: reduce_audio_state,
    ACTION_POSITION: reduce_position,
    ACTION_LOOP_STATE: reduce_loop_state,
    ACTION_MUTE_STATE: reduce_mute_state,
    ACTION_VOLUME_STATE: reduce_volume_state,
    ACTION_HOTKEY_STATE: reduce_hotkey_state,
}


def apply_event(state: ControlSurfaceState, envelope: Envelope, *, server_port: int | None = None) -> Envelope:
    """Fold `envelope` into `state` and return the envelope to broadcast.

    A `connectionStateUpdate` is treated as a field patch and answered with the
    full snapshot. Actions without a reducer are forwarded unchanged.
    """
    payload = dict(envelope.payload)
    if envelope.action == ACTION_CONNECTION_STATE:
        apply_patch(state, payload)
        return encode(ACTION_CONNECTION_STATE, connection_state_payload(state, server_port=server_port))
    reducer = REDUCERS.get(envelope.action)
    if reducer is not None:
        payload = reducer(state, payload)
    return encode(envelope.action, payload)


__all__ = [
    "PATCHABLE_FIELDS",
    "REDUCERS",
    "apply_event",
    "apply_patch",
    "connection_state_payload",
    "reduce_audio_state",
    "reduce_hotkey_state",
    "reduce_loop_state",
    "reduce_mute_state",
    "reduce_position",
    "reduce_volume_state",
]

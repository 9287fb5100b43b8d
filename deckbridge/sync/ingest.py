"""Normalization of host domain events into envelopes.

The host may hand the store either a ready envelope
(`{"action": ..., "payload": {...}}`) or the older flat shape
(`{"type": "audio:play", "song": {...}, "volume": 0.8}`). Both end up as one
`Envelope`; a flat event with an unmapped (or missing) type becomes a generic
state patch.
"""

from __future__ import annotations

from typing import Any
from collections.abc import Mapping, Callable

from deckbridge.sync import events
from deckbridge.protocol.envelope import Envelope, decode, encode
from deckbridge.config.protocol import (
    KEY_TYPE,
    KEY_ACTION,
    HOTKEY_ADDED,
    DOMAIN_SOURCE,
    HOTKEY_CLEARED,
    HOTKEY_REMOVED,
    HOTKEY_UPDATED,
    ACTION_CONNECTION_STATE,
)

LegacyBuilder = Callable[[Mapping[str, Any]], Envelope]


def _song(fields: Mapping[str, Any]) -> Mapping[str, Any] | None:
    song = fields.get("song", fields.get("currentSong"))
    return song if isinstance(song, Mapping) else None


def _number(fields: Mapping[str, Any], key: str) -> float | None:
    value = fields.get(key)
    return value if isinstance(value, (int, float)) and not isinstance(value, bool) else None


def _flag(fields: Mapping[str, Any], key: str) -> bool | None:
    value = fields.get(key, fields.get("enabled"))
    return None if value is None else bool(value)


def _reason(fields: Mapping[str, Any], default: str) -> str:
    reason = fields.get("reason")
    return reason if isinstance(reason, str) and reason else default


def _play(fields: Mapping[str, Any]) -> Envelope:
    return events.playing(_song(fields), volume=_number(fields, "volume"), reason=_reason(fields, "user_initiated"))


def _pause(fields: Mapping[str, Any]) -> Envelope:
    return events.paused(_song(fields), volume=_number(fields, "volume"), reason=_reason(fields, "user_paused"))


def _stop(fields: Mapping[str, Any]) -> Envelope:
    return events.stopped(_song(fields), volume=_number(fields, "volume"), reason=_reason(fields, "user_stopped"))


def _song_changed(fields: Mapping[str, Any]) -> Envelope:
    is_playing = fields.get("isPlaying")
    return events.song_changed(
        _song(fields),
        is_playing=is_playing if isinstance(is_playing, bool) else None,
        volume=_number(fields, "volume"),
    )


def _position(fields: Mapping[str, Any]) -> Envelope:
    return events.position(_number(fields, "position"), _number(fields, "duration"), _song(fields))


def _seek(fields: Mapping[str, Any]) -> Envelope:
    audio_state = fields.get("audioState")
    return events.seeked(
        _number(fields, "position"),
        _number(fields, "duration"),
        _song(fields),
        audio_state=audio_state if isinstance(audio_state, str) and audio_state else None,
        volume=_number(fields, "volume"),
    )


def _volume_changed(fields: Mapping[str, Any]) -> Envelope:
    mute = fields.get("muteEnabled")
    return events.volume_changed(_number(fields, "volume"), mute_enabled=mute if isinstance(mute, bool) else None)


def _loop(fields: Mapping[str, Any]) -> Envelope:
    return events.loop_changed(_flag(fields, "loopEnabled"))


def _mute(fields: Mapping[str, Any]) -> Envelope:
    return events.mute_changed(_flag(fields, "muteEnabled"))


def _tab_switched(fields: Mapping[str, Any]) -> Envelope:
    return events.tab_switched(
        fields.get("fromTab"),
        fields.get("toTab", fields.get("tabNumber")),
        tab_name=fields.get("tabName"),
        hotkeys=fields.get("hotkeys"),
    )


def _hotkey(change_action: str) -> LegacyBuilder:
    def build(fields: Mapping[str, Any]) -> Envelope:
        return events.hotkey_changed(
            change_action,
            fields.get("tabNumber"),
            tab_name=fields.get("tabName"),
            hotkeys=fields.get("hotkeys"),
        )

    return build


LEGACY_BUILDERS: dict[str, LegacyBuilder] = {
    "play": _play,
    "audio:play": _play,
    "pause": _pause,
    "audio:pause": _pause,
    "stop": _stop,
    "audio:stop": _stop,
    "song-changed": _song_changed,
    "seek": _seek,
    "audio:seek": _seek,
    "position": _position,
    "volume-changed": _volume_changed,
    "audio:volume": _volume_changed,
    "loop-changed": _loop,
    "audio:loop": _loop,
    "mute-changed": _mute,
    "audio:mute": _mute,
    "hotkey-tab-changed": _tab_switched,
    "tab-switched": _tab_switched,
    "hotkey-added": _hotkey(HOTKEY_ADDED),
    "hotkey-removed": _hotkey(HOTKEY_REMOVED),
    "hotkey-updated": _hotkey(HOTKEY_UPDATED),
    "hotkey-cleared": _hotkey(HOTKEY_CLEARED),
}


def normalize_event(event: Envelope | Mapping[str, Any]) -> Envelope:
    """Return the envelope for `event`; raises `DecodeError` on a malformed envelope."""
    if isinstance(event, Envelope):
        return event
    if not isinstance(event, Mapping):
        raise TypeError(f"domain event must be an Envelope or a mapping, got {type(event).__name__}")
    if KEY_ACTION in event:
        return decode(event)

    fields = {k: v for k, v in event.items() if k != KEY_TYPE}
    kind = event.get(KEY_TYPE)
    builder = LEGACY_BUILDERS.get(kind) if isinstance(kind, str) else None
    if builder is not None:
        return builder(fields)
    return encode(ACTION_CONNECTION_STATE, fields, source=DOMAIN_SOURCE)


__all__ = ["LEGACY_BUILDERS", "normalize_event"]

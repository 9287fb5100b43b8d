"""Builders the host domain layer uses to describe authoritative changes.

Each helper returns an `Envelope` ready for `StateStore.ingest`. They only
shape data; nothing here touches the store or the wire.
"""

from __future__ import annotations

from typing import Any
from collections.abc import Mapping

from deckbridge.protocol.envelope import Envelope, encode
from deckbridge.config.protocol import (
    AUDIO_PAUSED,
    AUDIO_PLAYING,
    AUDIO_STOPPED,
    DOMAIN_SOURCE,
    ACTION_POSITION,
    ACTION_LOOP_STATE,
    ACTION_MUTE_STATE,
    ACTION_AUDIO_STATE,
    ACTION_HOTKEY_STATE,
    ACTION_VOLUME_STATE,
    HOTKEY_TAB_SWITCHED,
)

Song = Mapping[str, Any]


def _song(song: Song | None) -> dict[str, Any] | None:
    return dict(song) if song is not None else None


def _present(payload: dict[str, Any], **fields: Any) -> dict[str, Any]:
    """Add the fields that were actually reported; None means the host did not say."""
    payload.update({key: value for key, value in fields.items() if value is not None})
    return payload


def _audio(audio_state: str | None, song: Song | None, volume: float | None, reason: str) -> Envelope:
    payload: dict[str, Any] = {"reason": reason}
    if audio_state is not None:
        payload["audioState"] = audio_state
        payload["isPlaying"] = audio_state == AUDIO_PLAYING
    return encode(ACTION_AUDIO_STATE, _present(payload, currentSong=_song(song), volume=volume), source=DOMAIN_SOURCE)


def playing(song: Song | None, *, volume: float | None = None, reason: str = "user_initiated") -> Envelope:
    return _audio(AUDIO_PLAYING, song, volume, reason)


def paused(song: Song | None, *, volume: float | None = None, reason: str = "user_paused") -> Envelope:
    return _audio(AUDIO_PAUSED, song, volume, reason)


def stopped(song: Song | None = None, *, volume: float | None = None, reason: str = "user_stopped") -> Envelope:
    """Playback stopped. The song is only kept when the track ended on its own."""
    payload: dict[str, Any] = {
        "audioState": AUDIO_STOPPED,
        "currentSong": _song(song) if reason == "ended" else None,
        "isPlaying": False,
        "reason": reason,
    }
    return encode(ACTION_AUDIO_STATE, _present(payload, volume=volume), source=DOMAIN_SOURCE)


def song_changed(song: Song | None, *, is_playing: bool | None = None, volume: float | None = None) -> Envelope:
    """A new track was loaded; the playback state is only set when the host reported it."""
    if is_playing is None:
        return _audio(None, song, volume, "song_changed")
    return _audio(AUDIO_PLAYING if is_playing else AUDIO_PAUSED, song, volume, "song_changed")


def position(position_s: float | None, duration_s: float | None, song: Song | None = None) -> Envelope:
    payload = _present({}, position=position_s, duration=duration_s, currentSong=_song(song))
    return encode(ACTION_POSITION, payload, source=DOMAIN_SOURCE)


def seeked(
    position_s: float | None,
    duration_s: float | None,
    song: Song | None = None,
    *,
    audio_state: str | None = None,
    volume: float | None = None,
) -> Envelope:
    payload: dict[str, Any] = {"reason": "user_seeked"}
    if audio_state is not None:
        payload["audioState"] = audio_state
        payload["isPlaying"] = audio_state == AUDIO_PLAYING
    payload = _present(payload, position=position_s, duration=duration_s, currentSong=_song(song), volume=volume)
    return encode(ACTION_POSITION, payload, source=DOMAIN_SOURCE)


def loop_changed(enabled: bool | None) -> Envelope:
    payload = _present({"reason": "user_toggled_loop"}, loopEnabled=None if enabled is None else bool(enabled))
    return encode(ACTION_LOOP_STATE, payload, source=DOMAIN_SOURCE)


def mute_changed(enabled: bool | None) -> Envelope:
    payload = _present({"reason": "user_toggled_mute"}, muteEnabled=None if enabled is None else bool(enabled))
    return encode(ACTION_MUTE_STATE, payload, source=DOMAIN_SOURCE)


def volume_changed(volume: float | None, *, mute_enabled: bool | None = None) -> Envelope:
    payload = _present({"reason": "user_changed_volume"}, volume=volume)
    if mute_enabled is not None:
        payload["muteEnabled"] = bool(mute_enabled)
    return encode(ACTION_VOLUME_STATE, payload, source=DOMAIN_SOURCE)


def tab_switched(
    from_tab: int | None,
    to_tab: int,
    *,
    tab_name: str | None = None,
    hotkeys: Mapping[str, Any] | None = None,
) -> Envelope:
    payload: dict[str, Any] = {
        "changeAction": HOTKEY_TAB_SWITCHED,
        "fromTab": from_tab,
        "toTab": to_tab,
        "activeTab": to_tab,
    }
    if tab_name is not None:
        payload["tabName"] = tab_name
    if hotkeys is not None:
        payload["hotkeys"] = dict(hotkeys)
    return encode(ACTION_HOTKEY_STATE, payload, source=DOMAIN_SOURCE)


def hotkey_changed(
    change_action: str,
    tab_number: int,
    *,
    tab_name: str | None = None,
    hotkeys: Mapping[str, Any] | None = None,
) -> Envelope:
    """A hotkey was added, removed, updated or cleared on `tab_number`."""
    payload: dict[str, Any] = {"changeAction": change_action, "tabNumber": tab_number}
    if tab_name is not None:
        payload["tabName"] = tab_name
    if hotkeys is not None:
        payload["hotkeys"] = dict(hotkeys)
    return encode(ACTION_HOTKEY_STATE, payload, source=DOMAIN_SOURCE)


__all__ = [
    "hotkey_changed",
    "loop_changed",
    "mute_changed",
    "paused",
    "playing",
    "position",
    "seeked",
    "song_changed",
    "stopped",
    "tab_switched",
    "volume_changed",
]

"""Typed inbound action payloads.

Each inbound action is parsed into its own frozen dataclass at the dispatch
boundary so handlers never touch the raw JSON object. Parsing raises
`PayloadValidationError` carrying the wire error code.
"""

from __future__ import annotations

import math
from typing import Any
from collections.abc import Mapping
from dataclasses import dataclass

from deckbridge.errors import PayloadValidationError
from deckbridge.config.limits import MAX_TAB_NUMBER, MIN_TAB_NUMBER
from deckbridge.config.protocol import (
    ERROR_INVALID_VOLUME,
    ERROR_INVALID_PAYLOAD,
    ERROR_INVALID_POSITION,
    ERROR_INVALID_TAB_NUMBER,
)


def _finite_number(value: Any) -> float | None:
    # bool is an int subclass; a JSON true is never a valid number here.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    number = float(value)
    return number if math.isfinite(number) else None


def _optional_flag(payload: Mapping[str, Any], key: str) -> bool | None:
    value = payload.get(key)
    if value is None or isinstance(value, bool):
        return value
    raise PayloadValidationError(code=ERROR_INVALID_PAYLOAD, message=f"'{key}' must be a boolean when provided")


def _tab_number(payload: Mapping[str, Any]) -> int:
    number = _finite_number(payload.get("tabNumber"))
    if number is None or not number.is_integer() or not MIN_TAB_NUMBER <= number <= MAX_TAB_NUMBER:
        raise PayloadValidationError(
            code=ERROR_INVALID_TAB_NUMBER,
            message=f"Tab number must be between {MIN_TAB_NUMBER} and {MAX_TAB_NUMBER}",
        )
    return int(number)


@dataclass(frozen=True, slots=True)
class PlayTrack:
    song_id: str | None = None
    file_path: str | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PlayTrack:
        song_id = payload.get("songId")
        file_path = payload.get("filePath")
        if song_id is not None and (isinstance(song_id, bool) or not isinstance(song_id, (str, int))):
            raise PayloadValidationError(code=ERROR_INVALID_PAYLOAD, message="'songId' must be a string or integer")
        if file_path is not None and not isinstance(file_path, str):
            raise PayloadValidationError(code=ERROR_INVALID_PAYLOAD, message="'filePath' must be a string")
        return cls(
            song_id=str(song_id) if song_id not in (None, "") else None,
            file_path=file_path or None,
        )


@dataclass(frozen=True, slots=True)
class PauseTrack:
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> PauseTrack:
        return cls()


@dataclass(frozen=True, slots=True)
class StopTrack:
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> StopTrack:
        return cls()


@dataclass(frozen=True, slots=True)
class SetVolume:
    volume: float

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SetVolume:
        volume = _finite_number(payload.get("volume"))
        if volume is None or not 0.0 <= volume <= 1.0:
            raise PayloadValidationError(code=ERROR_INVALID_VOLUME, message="Volume must be between 0 and 1")
        return cls(volume=volume)


@dataclass(frozen=True, slots=True)
class SeekToPosition:
    position: float

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SeekToPosition:
        position = _finite_number(payload.get("position"))
        if position is None or position < 0:
            raise PayloadValidationError(code=ERROR_INVALID_POSITION, message="Position must be >= 0")
        return cls(position=position)


@dataclass(frozen=True, slots=True)
class ToggleLoop:
    enabled: bool | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ToggleLoop:
        return cls(enabled=_optional_flag(payload, "enabled"))


@dataclass(frozen=True, slots=True)
class ToggleMute:
    enabled: bool | None = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> ToggleMute:
        return cls(enabled=_optional_flag(payload, "enabled"))


@dataclass(frozen=True, slots=True)
class GetState:
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GetState:
        return cls()


@dataclass(frozen=True, slots=True)
class SwitchHotkeyTab:
    tab_number: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> SwitchHotkeyTab:
        return cls(tab_number=_tab_number(payload))


@dataclass(frozen=True, slots=True)
class GetHotkeyTabs:
    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GetHotkeyTabs:
        return cls()


@dataclass(frozen=True, slots=True)
class GetHotkeyTabContent:
    tab_number: int

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> GetHotkeyTabContent:
        return cls(tab_number=_tab_number(payload))


__all__ = [
    "GetHotkeyTabContent",
    "GetHotkeyTabs",
    "GetState",
    "PauseTrack",
    "PlayTrack",
    "SeekToPosition",
    "SetVolume",
    "StopTrack",
    "SwitchHotkeyTab",
    "ToggleLoop",
    "ToggleMute",
]

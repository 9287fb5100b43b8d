"""Client-side mirror of host state with optimistic updates."""

from __future__ import annotations

from typing import Any
from collections.abc import Mapping
from dataclasses import field, dataclass

from deckbridge.protocol.envelope import Envelope, response_action
from deckbridge.config.protocol import (
    AUDIO_PAUSED,
    AUDIO_PLAYING,
    AUDIO_STOPPED,
    ACTION_POSITION,
    ACTION_GET_STATE,
    ACTION_LOOP_STATE,
    ACTION_MUTE_STATE,
    ACTION_AUDIO_STATE,
    ACTION_HOTKEY_STATE,
    ACTION_VOLUME_STATE,
    HOTKEY_TAB_SWITCHED,
    ACTION_CONNECTION_STATE,
)

_FIELDS = {
    "connected": "connected",
    "audioState": "audio_state",
    "currentSong": "current_song",
    "volume": "volume",
    "position": "position",
    "duration": "duration",
    "percentage": "percentage",
    "loopEnabled": "loop_enabled",
    "muteEnabled": "mute_enabled",
    "activeTab": "active_tab",
}


@dataclass(slots=True)
class LocalSurfaceState:
    """What the buttons render.

    Button presses flip fields immediately; every authoritative envelope from
    the host overwrites them, so a wrong guess lasts until the next update.
    """

    connected: bool = False
    audio_state: str = AUDIO_STOPPED
    current_song: dict[str, Any] | None = None
    volume: float = 1.0
    position: float = 0.0
    duration: float = 0.0
    percentage: float = 0.0
    loop_enabled: bool = False
    mute_enabled: bool = False
    active_tab: int = 1
    tab_names: dict[int, str] = field(default_factory=dict)

    @property
    def is_playing(self) -> bool:
        return self.audio_state == AUDIO_PLAYING

    @property
    def is_paused(self) -> bool:
        return self.audio_state == AUDIO_PAUSED

    @property
    def is_stopped(self) -> bool:
        return self.audio_state not in (AUDIO_PLAYING, AUDIO_PAUSED)

    def optimistic_play(self) -> None:
        self.audio_state = AUDIO_PLAYING

    def optimistic_pause(self) -> None:
        self.audio_state = AUDIO_PAUSED

    def optimistic_stop(self) -> None:
        self.audio_state = AUDIO_STOPPED
        self.current_song = None

    def optimistic_loop(self, enabled: bool) -> None:
        self.loop_enabled = enabled

    def optimistic_mute(self, enabled: bool) -> None:
        self.mute_enabled = enabled

    def apply_authoritative(self, envelope: Envelope) -> bool:
        """Overwrite local fields from a host envelope. False if the action carries no state."""
        action = envelope.action
        payload = envelope.payload
        if action == response_action(ACTION_GET_STATE):
            state = payload.get("state")
            if not payload.get("success") or not isinstance(state, Mapping):
                return False
            self._overwrite(state)
            return True
        if action == ACTION_CONNECTION_STATE:
            self._overwrite(payload)
            return True
        if action == ACTION_AUDIO_STATE:
            self._overwrite(payload)
            if "audioState" not in payload and "isPlaying" in payload:
                self.audio_state = AUDIO_PLAYING if payload["isPlaying"] else AUDIO_STOPPED
            return True
        if action in (ACTION_POSITION, ACTION_LOOP_STATE, ACTION_MUTE_STATE, ACTION_VOLUME_STATE):
            self._overwrite(payload)
            return True
        if action == ACTION_HOTKEY_STATE:
            self._apply_hotkey(payload)
            return True
        return False

    def _overwrite(self, payload: Mapping[str, Any]) -> None:
        for key, attr in _FIELDS.items():
            if key not in payload:
                continue
            value = payload[key]
            if attr == "current_song":
                self.current_song = dict(value) if isinstance(value, Mapping) else None
            elif attr in ("connected", "loop_enabled", "mute_enabled"):
                setattr(self, attr, bool(value))
            elif attr == "audio_state":
                if isinstance(value, str) and value:
                    self.audio_state = value
            elif attr == "active_tab":
                if isinstance(value, int) and not isinstance(value, bool):
                    self.active_tab = value
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                setattr(self, attr, float(value))

    def _apply_hotkey(self, payload: Mapping[str, Any]) -> None:
        if payload.get("changeAction") == HOTKEY_TAB_SWITCHED:
            tab = payload.get("toTab", payload.get("activeTab"))
        else:
            tab = payload.get("activeTab")
        if isinstance(tab, int) and not isinstance(tab, bool):
            self.active_tab = tab
        name = payload.get("tabName")
        number = payload.get("toTab", payload.get("tabNumber"))
        if isinstance(name, str) and isinstance(number, int) and not isinstance(number, bool):
            self.tab_names[number] = name


__all__ = ["LocalSurfaceState"]

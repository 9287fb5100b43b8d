"""Canonical control-surface state mirrored from the host domain layer."""

from __future__ import annotations

from typing import Any
from dataclasses import field, dataclass

from deckbridge.config.protocol import AUDIO_STOPPED


@dataclass(slots=True)
class ControlSurfaceState:
    connected: bool = False
    connection_count: int = 0
    current_song: dict[str, Any] | None = None
    is_playing: bool = False
    audio_state: str = AUDIO_STOPPED
    volume: float = 1.0
    position: float = 0.0
    duration: float = 0.0
    loop_enabled: bool = False
    mute_enabled: bool = False
    active_tab: int = 1
    last_activity: int | None = None
    # Mirrors of hotkeyStateUpdate traffic; answered back without asking the host.
    tab_names: dict[int, str] = field(default_factory=dict)
    tab_hotkeys: dict[int, dict[str, Any]] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        """Wire view of the state (camelCase, as clients expect it)."""
        return {
            "connected": self.connected,
            "connectionCount": self.connection_count,
            "currentSong": dict(self.current_song) if self.current_song is not None else None,
            "isPlaying": self.is_playing,
            "audioState": self.audio_state,
            "volume": self.volume,
            "position": self.position,
            "duration": self.duration,
            "loopEnabled": self.loop_enabled,
            "muteEnabled": self.mute_enabled,
            "activeTab": self.active_tab,
            "lastActivity": self.last_activity,
        }


__all__ = ["ControlSurfaceState"]

"""Client-side reconnection bookkeeping."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class ReconnectMode(str, enum.Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAST = "fast"
    SLOW = "slow"


@dataclass(slots=True)
class ReconnectSession:
    base_delay_s: float
    attempt_count: int = 0
    current_delay_s: float = 0.0
    mode: ReconnectMode = ReconnectMode.IDLE

    def __post_init__(self) -> None:
        if not self.current_delay_s:
            self.current_delay_s = self.base_delay_s

    def reset(self, mode: ReconnectMode) -> None:
        self.attempt_count = 0
        self.current_delay_s = self.base_delay_s
        self.mode = mode


__all__ = ["ReconnectMode", "ReconnectSession"]

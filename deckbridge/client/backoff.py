"""Reconnection delay policy: exponential fast retries, then slow polling."""

from __future__ import annotations

from dataclasses import dataclass

from deckbridge.state.settings import ReconnectSettings
from deckbridge.state.session import ReconnectMode
from deckbridge.config.reconnect import (
    DEFAULT_RECONNECT_MULTIPLIER,
    DEFAULT_RECONNECT_MAX_ATTEMPTS,
    DEFAULT_RECONNECT_MAX_DELAY_MS,
    DEFAULT_RECONNECT_BASE_DELAY_MS,
    DEFAULT_RECONNECT_SLOW_DELAY_MS,
)


def fast_delay(attempt: int, *, base_s: float, multiplier: float, max_s: float) -> float:
    """Delay before fast attempt `attempt` (1-based): min(base * multiplier^(n-1), max)."""
    return min(base_s * multiplier ** (max(1, attempt) - 1), max_s)


@dataclass(frozen=True, slots=True)
class BackoffPolicy:
    base_s: float = DEFAULT_RECONNECT_BASE_DELAY_MS / 1000.0
    multiplier: float = DEFAULT_RECONNECT_MULTIPLIER
    max_s: float = DEFAULT_RECONNECT_MAX_DELAY_MS / 1000.0
    max_attempts: int = DEFAULT_RECONNECT_MAX_ATTEMPTS
    slow_s: float = DEFAULT_RECONNECT_SLOW_DELAY_MS / 1000.0

    @classmethod
    def from_settings(cls, settings: ReconnectSettings) -> BackoffPolicy:
        return cls(
            base_s=settings.base_delay_s,
            multiplier=settings.multiplier,
            max_s=settings.max_delay_s,
            max_attempts=settings.max_attempts,
            slow_s=settings.slow_delay_s,
        )

    def delay(self, attempt: int) -> float:
        return fast_delay(attempt, base_s=self.base_s, multiplier=self.multiplier, max_s=self.max_s)

    def next_retry(self, attempt: int) -> tuple[ReconnectMode, float]:
        """Mode and delay for retry number `attempt` after a disconnect."""
        if attempt <= self.max_attempts:
            return ReconnectMode.FAST, self.delay(attempt)
        return ReconnectMode.SLOW, self.slow_s

    def delays(self, count: int) -> list[float]:
        return [self.next_retry(n)[1] for n in range(1, count + 1)]


__all__ = ["BackoffPolicy", "fast_delay"]

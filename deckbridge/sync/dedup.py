"""Suppression of the same notification arriving from two trigger paths."""

from __future__ import annotations

import time
import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Callable

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DedupEntry:
    from_key: Any
    to_key: Any
    timestamp: float


class NotificationDeduplicator:
    """Remembers only the most recent emission; older markers are simply overwritten."""

    def __init__(self, *, window_s: float = 0.5, now_fn: Callable[[], float] | None = None) -> None:
        self.window_s = max(0.0, float(window_s))
        self._now = now_fn or time.monotonic
        self._last: DedupEntry | None = None

    @property
    def last(self) -> DedupEntry | None:
        return self._last

    def should_emit(self, from_key: Any, to_key: Any) -> bool:
        now = self._now()
        last = self._last
        if (
            last is not None
            and last.from_key == from_key
            and last.to_key == to_key
            and (now - last.timestamp) < self.window_s
        ):
            logger.debug("suppressing duplicate notification %s->%s", from_key, to_key)
            return False
        self._last = DedupEntry(from_key=from_key, to_key=to_key, timestamp=now)
        return True

    def reset(self) -> None:
        self._last = None


__all__ = ["DedupEntry", "NotificationDeduplicator"]

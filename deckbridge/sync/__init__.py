"""Authoritative state mirroring and fan-out to control surfaces."""

from __future__ import annotations

from .store import StateStore
from .dedup import DedupEntry, NotificationDeduplicator
from .ingest import normalize_event
from .broadcaster import Broadcaster

__all__ = [
    "Broadcaster",
    "DedupEntry",
    "NotificationDeduplicator",
    "StateStore",
    "normalize_event",
]

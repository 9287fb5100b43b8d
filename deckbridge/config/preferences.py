"""Persisted preference keys and location."""

from __future__ import annotations

from pathlib import Path

ENV_PREFERENCES_PATH = "DECKBRIDGE_PREFERENCES_PATH"
DEFAULT_PREFERENCES_PATH = Path("~/.config/deckbridge/preferences.json")

PREF_PORT = "surface_port"
PREF_ENABLED = "surface_enabled"

__all__ = [
    "DEFAULT_PREFERENCES_PATH",
    "ENV_PREFERENCES_PATH",
    "PREF_ENABLED",
    "PREF_PORT",
]

"""Persisted user preferences (a small JSON document on disk)."""

from __future__ import annotations

import os
import logging
from typing import Any
from pathlib import Path

import orjson

logger = logging.getLogger(__name__)


class PreferencesStore:
    """Reads and writes the preferences file; a missing or corrupt file reads as empty."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path).expanduser()

    def load(self) -> dict[str, Any]:
        try:
            data = orjson.loads(self.path.read_bytes())
        except FileNotFoundError:
            return {}
        except (OSError, orjson.JSONDecodeError):
            logger.warning("ignoring unreadable preferences file %s", self.path, exc_info=True)
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key: str, default: Any = None) -> Any:
        return self.load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        self.update({key: value})

    def update(self, values: dict[str, Any]) -> None:
        data = self.load()
        data.update(values)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_bytes(orjson.dumps(data, option=orjson.OPT_INDENT_2 | orjson.OPT_SORT_KEYS))
        os.replace(tmp, self.path)


__all__ = ["PreferencesStore"]

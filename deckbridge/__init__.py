"""Real-time bridge between a desktop audio host and hardware control surfaces."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]

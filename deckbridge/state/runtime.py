"""Typed runtime state objects for dependency wiring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from deckbridge.sync.store import StateStore
    from deckbridge.state.settings import AppSettings
    from deckbridge.domain.protocol import DomainCommands
    from deckbridge.handlers.dispatch import ActionDispatcher


@dataclass(slots=True)
class RuntimeDeps:
    settings: AppSettings
    store: StateStore
    dispatcher: ActionDispatcher
    commands: DomainCommands


__all__ = ["RuntimeDeps"]

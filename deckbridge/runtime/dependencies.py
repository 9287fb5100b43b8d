"""Runtime dependency construction (store, dispatch table, command channel)."""

from __future__ import annotations

import logging

from deckbridge.state import RuntimeDeps
from deckbridge.sync.store import StateStore
from deckbridge.state.settings import AppSettings
from deckbridge.sync.dedup import NotificationDeduplicator
from deckbridge.handlers.actions import build_dispatcher
from deckbridge.handlers.registry import ConnectionRegistry
from deckbridge.domain import CommandQueue, DomainCommands

from .settings_loader import load_settings

logger = logging.getLogger(__name__)


def build_runtime_deps(settings: AppSettings | None = None, *, commands: DomainCommands | None = None) -> RuntimeDeps:
    settings = settings or load_settings()

    registry = ConnectionRegistry(max_connections=settings.limits.max_connections)
    store = StateStore(
        registry,
        deduplicator=NotificationDeduplicator(window_s=settings.limits.dedup_window_s),
    )
    dispatcher = build_dispatcher(handler_timeout_s=settings.limits.handler_timeout_s)
    if commands is None:
        commands = CommandQueue(maxsize=settings.limits.command_queue_max)

    logger.debug(
        "runtime deps built max_connections=%s actions=%s",
        registry.max_connections,
        len(dispatcher.actions()),
    )
    return RuntimeDeps(settings=settings, store=store, dispatcher=dispatcher, commands=commands)


__all__ = ["RuntimeDeps", "build_runtime_deps"]

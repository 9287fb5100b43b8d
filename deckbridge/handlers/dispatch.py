"""Action dispatch table: action name -> typed payload -> handler -> response."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from dataclasses import dataclass
from collections.abc import Mapping, Callable, Awaitable

from deckbridge.sync.store import StateStore
from deckbridge.domain.protocol import DomainCommands
from deckbridge.protocol.envelope import Envelope, build_response, build_error_response
from deckbridge.errors import UnknownActionError, ActionExecutionError, PayloadValidationError
from deckbridge.config.protocol import ERROR_EXECUTION, ERROR_MISSING_ACTION, ERROR_UNKNOWN_ACTION

from .connection import Connection

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ActionContext:
    connection: Connection | None
    store: StateStore
    commands: DomainCommands


Handler = Callable[[ActionContext, Any], Awaitable[Mapping[str, Any] | None]]


@dataclass(frozen=True, slots=True)
class _Route:
    action: str
    handler: Handler
    payload_type: type


class ActionDispatcher:
    """Routes one inbound action to its handler and always yields one response.

    Routes are registered at startup and the table is frozen before the server
    accepts connections.
    """

    def __init__(self, *, handler_timeout_s: float = 5.0) -> None:
        self.handler_timeout_s = float(handler_timeout_s)
        self._routes: dict[str, _Route] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def actions(self) -> tuple[str, ...]:
        return tuple(self._routes)

    def register(self, action: str, handler: Handler, payload_type: type) -> None:
        if self._frozen:
            raise RuntimeError(f"cannot register '{action}': dispatch table is frozen")
        if action in self._routes:
            raise ValueError(f"action '{action}' is already registered")
        self._routes[action] = _Route(action=action, handler=handler, payload_type=payload_type)

    def freeze(self) -> None:
        self._frozen = True

    def _route(self, action: str) -> _Route:
        route = self._routes.get(action)
        if route is None:
            raise UnknownActionError(code=ERROR_UNKNOWN_ACTION, message=f"Unknown action: {action}", action=action)
        return route

    async def dispatch(self, ctx: ActionContext, action: str | None, payload: Mapping[str, Any] | None) -> Envelope:
        if not action:
            return build_error_response(ERROR_MISSING_ACTION, "Action is required")
        try:
            route = self._route(action)
        except UnknownActionError as exc:
            logger.info("unknown action=%s", exc.action)
            return build_error_response(exc.code, exc.message, action=exc.action, as_error_response=True)

        try:
            typed = route.payload_type.from_payload(payload or {})
        except PayloadValidationError as exc:
            return build_error_response(exc.code, exc.message, action=action)

        try:
            result = await self._run(route, ctx, typed)
        except ActionExecutionError as exc:
            return build_error_response(exc.code, exc.message, action=exc.action)
        return build_response(action, result)

    async def _run(self, route: _Route, ctx: ActionContext, typed: Any) -> Mapping[str, Any] | None:
        timeout = self.handler_timeout_s if self.handler_timeout_s > 0 else None
        action = route.action
        try:
            return await asyncio.wait_for(route.handler(ctx, typed), timeout=timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("action=%s timed out after %.1fs", action, self.handler_timeout_s)
            raise ActionExecutionError(
                code=ERROR_EXECUTION,
                message=f"Action execution failed: timed out after {self.handler_timeout_s:g}s",
                action=action,
            ) from exc
        except Exception as exc:
            logger.exception("action=%s failed", action)
            raise ActionExecutionError(
                code=ERROR_EXECUTION,
                message=f"Action execution failed: {exc}",
                action=action,
            ) from exc


__all__ = ["ActionContext", "ActionDispatcher", "Handler"]

"""Fan-out of one envelope to every registered connection."""

from __future__ import annotations

import asyncio
import logging

from deckbridge.handlers.registry import ConnectionRegistry
from deckbridge.handlers.connection import Connection
from deckbridge.protocol.envelope import Envelope, dumps
from deckbridge.config.websocket import WS_CLOSE_SLOW_CONSUMER_CODE, WS_CLOSE_SLOW_CONSUMER_REASON

logger = logging.getLogger(__name__)


class Broadcaster:
    def __init__(self, registry: ConnectionRegistry) -> None:
        self._registry = registry
        self._closing: set[asyncio.Task] = set()

    def broadcast(self, envelope: Envelope) -> int:
        """Offer `envelope` to every live connection and return how many accepted it.

        Never awaits a peer. Closed connections are pruned; a connection whose
        outbound queue is full is dropped rather than allowed to stall the rest.
        """
        text = dumps(envelope)
        delivered = 0
        for conn in self._registry.connections():
            if conn.offer(text):
                delivered += 1
                continue
            self._registry.discard(conn)
            if conn.closed:
                logger.debug("pruned closed control surface id=%s", conn.id)
                continue
            logger.warning(
                "dropping slow control surface id=%s action=%s pending=%s",
                conn.id,
                envelope.action,
                conn.pending,
            )
            self._drop(conn)
        return delivered

    def _drop(self, conn: Connection) -> None:
        task = asyncio.create_task(conn.close(code=WS_CLOSE_SLOW_CONSUMER_CODE, reason=WS_CLOSE_SLOW_CONSUMER_REASON))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)


__all__ = ["Broadcaster"]

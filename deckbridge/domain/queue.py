"""`DomainCommands` delivered as messages on a queue the host drains."""

from __future__ import annotations

import asyncio
import logging
from typing import Any
from dataclasses import field, dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DomainCommand:
    name: str
    args: dict[str, Any] = field(default_factory=dict)


class CommandQueue:
    """Bounded; a full queue makes the request wait, which the dispatcher bounds with its handler timeout."""

    def __init__(self, *, maxsize: int = 64) -> None:
        self.queue: asyncio.Queue[DomainCommand] = asyncio.Queue(maxsize=max(1, int(maxsize)))

    async def _put(self, name: str, **args: Any) -> None:
        await self.queue.put(DomainCommand(name=name, args=args))
        logger.debug("domain command queued name=%s args=%s", name, args)

    async def request_play(self, *, song_id: str | None = None, file_path: str | None = None) -> None:
        await self._put("play", song_id=song_id, file_path=file_path)

    async def request_pause(self) -> None:
        await self._put("pause")

    async def request_stop(self) -> None:
        await self._put("stop")

    async def request_volume(self, volume: float) -> None:
        await self._put("volume", volume=volume)

    async def request_seek(self, position: float) -> None:
        await self._put("seek", position=position)

    async def request_loop(self, enabled: bool | None = None) -> None:
        await self._put("loop", enabled=enabled)

    async def request_mute(self, enabled: bool | None = None) -> None:
        await self._put("mute", enabled=enabled)

    async def request_hotkey_tab(self, tab_number: int) -> None:
        await self._put("hotkey_tab", tab_number=tab_number)

    async def get(self) -> DomainCommand:
        return await self.queue.get()

    def get_nowait(self) -> DomainCommand:
        return self.queue.get_nowait()


__all__ = ["CommandQueue", "DomainCommand"]

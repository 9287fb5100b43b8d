"""What action handlers may ask of the host domain layer."""

from __future__ import annotations

from typing import Protocol


class DomainCommands(Protocol):
    """Each call requests exactly one effect and returns without waiting for it."""

    async def request_play(self, *, song_id: str | None = None, file_path: str | None = None) -> None: ...

    async def request_pause(self) -> None: ...

    async def request_stop(self) -> None: ...

    async def request_volume(self, volume: float) -> None: ...

    async def request_seek(self, position: float) -> None: ...

    async def request_loop(self, enabled: bool | None = None) -> None: ...

    async def request_mute(self, enabled: bool | None = None) -> None: ...

    async def request_hotkey_tab(self, tab_number: int) -> None: ...


__all__ = ["DomainCommands"]

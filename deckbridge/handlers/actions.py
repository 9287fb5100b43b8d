"""Inbound action handlers.

Each handler issues exactly one domain command (or answers from the store's
mirror) and returns at once; the confirming state change reaches clients later
as an ingested authoritative event.
"""

from __future__ import annotations

from typing import Any

from deckbridge.protocol import payloads as p
from deckbridge.config.protocol import (
    ACTION_PLAY,
    ACTION_SEEK,
    ACTION_STOP,
    ACTION_PAUSE,
    ACTION_GET_TABS,
    ACTION_GET_STATE,
    ACTION_SWITCH_TAB,
    ACTION_SET_VOLUME,
    ACTION_TOGGLE_LOOP,
    ACTION_TOGGLE_MUTE,
    ACTION_GET_TAB_CONTENT,
)

from .dispatch import ActionContext, ActionDispatcher


async def play_track(ctx: ActionContext, cmd: p.PlayTrack) -> dict[str, Any]:
    await ctx.commands.request_play(song_id=cmd.song_id, file_path=cmd.file_path)
    if cmd.file_path:
        return {"action": "play_file", "filePath": cmd.file_path}
    if cmd.song_id:
        return {"action": "play_song", "songId": cmd.song_id}
    return {"action": "smart_play"}


async def pause_track(ctx: ActionContext, _cmd: p.PauseTrack) -> dict[str, Any]:
    await ctx.commands.request_pause()
    return {"action": "pause"}


async def stop_track(ctx: ActionContext, _cmd: p.StopTrack) -> dict[str, Any]:
    await ctx.commands.request_stop()
    return {"action": "stop"}


async def set_volume(ctx: ActionContext, cmd: p.SetVolume) -> dict[str, Any]:
    # No host-side speculation: the store moves when the host reports the new volume.
    await ctx.commands.request_volume(cmd.volume)
    return {"volume": cmd.volume}


async def seek_to_position(ctx: ActionContext, cmd: p.SeekToPosition) -> dict[str, Any]:
    await ctx.commands.request_seek(cmd.position)
    return {"position": cmd.position}


async def toggle_loop(ctx: ActionContext, cmd: p.ToggleLoop) -> dict[str, Any]:
    await ctx.commands.request_loop(cmd.enabled)
    return {} if cmd.enabled is None else {"enabled": cmd.enabled}


async def toggle_mute(ctx: ActionContext, cmd: p.ToggleMute) -> dict[str, Any]:
    await ctx.commands.request_mute(cmd.enabled)
    return {} if cmd.enabled is None else {"enabled": cmd.enabled}


async def get_state(ctx: ActionContext, _cmd: p.GetState) -> dict[str, Any]:
    state = ctx.store.snapshot()
    state["serverPort"] = ctx.store.server_port
    return {"state": state}


async def switch_hotkey_tab(ctx: ActionContext, cmd: p.SwitchHotkeyTab) -> dict[str, Any]:
    await ctx.commands.request_hotkey_tab(cmd.tab_number)
    return {"tabNumber": cmd.tab_number}


async def get_hotkey_tabs(ctx: ActionContext, _cmd: p.GetHotkeyTabs) -> dict[str, Any]:
    return ctx.store.hotkey_tabs()


async def get_hotkey_tab_content(ctx: ActionContext, cmd: p.GetHotkeyTabContent) -> dict[str, Any]:
    return ctx.store.hotkey_tab_content(cmd.tab_number)


ACTION_TABLE = (
    (ACTION_PLAY, play_track, p.PlayTrack),
    (ACTION_PAUSE, pause_track, p.PauseTrack),
    (ACTION_STOP, stop_track, p.StopTrack),
    (ACTION_SET_VOLUME, set_volume, p.SetVolume),
    (ACTION_SEEK, seek_to_position, p.SeekToPosition),
    (ACTION_TOGGLE_LOOP, toggle_loop, p.ToggleLoop),
    (ACTION_TOGGLE_MUTE, toggle_mute, p.ToggleMute),
    (ACTION_GET_STATE, get_state, p.GetState),
    (ACTION_SWITCH_TAB, switch_hotkey_tab, p.SwitchHotkeyTab),
    (ACTION_GET_TABS, get_hotkey_tabs, p.GetHotkeyTabs),
    (ACTION_GET_TAB_CONTENT, get_hotkey_tab_content, p.GetHotkeyTabContent),
)


def build_dispatcher(*, handler_timeout_s: float) -> ActionDispatcher:
    """Register every built-in action and freeze the table."""
    dispatcher = ActionDispatcher(handler_timeout_s=handler_timeout_s)
    for action, handler, payload_type in ACTION_TABLE:
        dispatcher.register(action, handler, payload_type)
    dispatcher.freeze()
    return dispatcher


__all__ = [
    "ACTION_TABLE",
    "build_dispatcher",
    "get_hotkey_tab_content",
    "get_hotkey_tabs",
    "get_state",
    "pause_track",
    "play_track",
    "seek_to_position",
    "set_volume",
    "stop_track",
    "switch_hotkey_tab",
    "toggle_loop",
    "toggle_mute",
]

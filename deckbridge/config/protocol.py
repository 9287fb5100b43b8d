"""Wire protocol constants: envelope keys, action names and error codes."""

from __future__ import annotations

PROTOCOL_VERSION = "1.0"
HOST_SOURCE = "deckbridge-host"
SURFACE_SOURCE = "deckbridge-surface"
DOMAIN_SOURCE = "deckbridge-domain"

# Envelope keys
KEY_VERSION = "version"
KEY_TIMESTAMP = "timestamp"
KEY_SOURCE = "source"
KEY_ACTION = "action"
KEY_PAYLOAD = "payload"
KEY_TYPE = "type"

# Keep-alive shape
TYPE_PING = "ping"
TYPE_PONG = "pong"

RESPONSE_SUFFIX = "Response"

# Outbound actions
ACTION_ERROR_RESPONSE = "errorResponse"
ACTION_CONNECTION_STATE = "connectionStateUpdate"
ACTION_AUDIO_STATE = "audioStateUpdate"
ACTION_POSITION = "positionUpdate"
ACTION_LOOP_STATE = "loopStateUpdate"
ACTION_MUTE_STATE = "muteStateUpdate"
ACTION_VOLUME_STATE = "volumeStateUpdate"
ACTION_HOTKEY_STATE = "hotkeyStateUpdate"

# Inbound actions
ACTION_PLAY = "playTrack"
ACTION_PAUSE = "pauseTrack"
ACTION_STOP = "stopTrack"
ACTION_SET_VOLUME = "setVolume"
ACTION_SEEK = "seekToPosition"
ACTION_TOGGLE_LOOP = "toggleLoop"
ACTION_TOGGLE_MUTE = "toggleMute"
ACTION_GET_STATE = "getState"
ACTION_SWITCH_TAB = "switchToHotkeyTab"
ACTION_GET_TABS = "getHotkeyTabs"
ACTION_GET_TAB_CONTENT = "getHotkeyTabContent"

# Audio states carried in audioStateUpdate
AUDIO_PLAYING = "playing"
AUDIO_PAUSED = "paused"
AUDIO_STOPPED = "stopped"

# Hotkey change actions
HOTKEY_TAB_SWITCHED = "tab-switched"
HOTKEY_ADDED = "added"
HOTKEY_REMOVED = "removed"
HOTKEY_UPDATED = "updated"
HOTKEY_CLEARED = "cleared"

# Errors (payload.error.code values)
ERROR_PARSE = "PARSE_ERROR"
ERROR_MISSING_ACTION = "MISSING_ACTION"
ERROR_UNKNOWN_ACTION = "UNKNOWN_ACTION"
ERROR_EXECUTION = "EXECUTION_ERROR"
ERROR_INVALID_PAYLOAD = "INVALID_PAYLOAD"
ERROR_INVALID_VOLUME = "INVALID_VOLUME"
ERROR_INVALID_POSITION = "INVALID_POSITION"
ERROR_INVALID_TAB_NUMBER = "INVALID_TAB_NUMBER"
ERROR_SERVER_AT_CAPACITY = "SERVER_AT_CAPACITY"

__all__ = [
    "ACTION_AUDIO_STATE",
    "ACTION_CONNECTION_STATE",
    "ACTION_ERROR_RESPONSE",
    "ACTION_GET_STATE",
    "ACTION_GET_TABS",
    "ACTION_GET_TAB_CONTENT",
    "ACTION_HOTKEY_STATE",
    "ACTION_LOOP_STATE",
    "ACTION_MUTE_STATE",
    "ACTION_PAUSE",
    "ACTION_PLAY",
    "ACTION_POSITION",
    "ACTION_SEEK",
    "ACTION_SET_VOLUME",
    "ACTION_STOP",
    "ACTION_SWITCH_TAB",
    "ACTION_TOGGLE_LOOP",
    "ACTION_TOGGLE_MUTE",
    "ACTION_VOLUME_STATE",
    "AUDIO_PAUSED",
    "AUDIO_PLAYING",
    "AUDIO_STOPPED",
    "DOMAIN_SOURCE",
    "ERROR_EXECUTION",
    "ERROR_INVALID_PAYLOAD",
    "ERROR_INVALID_POSITION",
    "ERROR_INVALID_TAB_NUMBER",
    "ERROR_INVALID_VOLUME",
    "ERROR_MISSING_ACTION",
    "ERROR_PARSE",
    "ERROR_SERVER_AT_CAPACITY",
    "ERROR_UNKNOWN_ACTION",
    "HOST_SOURCE",
    "HOTKEY_ADDED",
    "HOTKEY_CLEARED",
    "HOTKEY_REMOVED",
    "HOTKEY_TAB_SWITCHED",
    "HOTKEY_UPDATED",
    "KEY_ACTION",
    "KEY_PAYLOAD",
    "KEY_SOURCE",
    "KEY_TIMESTAMP",
    "KEY_TYPE",
    "KEY_VERSION",
    "PROTOCOL_VERSION",
    "RESPONSE_SUFFIX",
    "SURFACE_SOURCE",
    "TYPE_PING",
    "TYPE_PONG",
]

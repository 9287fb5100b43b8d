from __future__ import annotations

from deckbridge.client.surface import LocalSurfaceState
from deckbridge.protocol.envelope import encode, build_response, build_error_response


def test_get_state_response_overwrites_everything() -> None:
    state = LocalSurfaceState()
    state.optimistic_play()
    snapshot = {
        "connected": True,
        "audioState": "paused",
        "currentSong": {"id": "4"},
        "volume": 0.6,
        "position": 12.5,
        "duration": 200,
        "loopEnabled": True,
        "muteEnabled": False,
        "activeTab": 3,
    }

    assert state.apply_authoritative(build_response("getState", {"state": snapshot}))

    assert state.is_paused
    assert state.current_song == {"id": "4"}
    assert state.volume == 0.6
    assert state.duration == 200.0
    assert state.loop_enabled is True
    assert state.active_tab == 3


def test_failed_get_state_is_ignored() -> None:
    state = LocalSurfaceState(volume=0.2)
    assert not state.apply_authoritative(build_error_response("EXECUTION_ERROR", "nope", action="getState"))
    assert state.volume == 0.2


def test_audio_update_without_state_name_uses_is_playing() -> None:
    state = LocalSurfaceState()
    state.apply_authoritative(encode("audioStateUpdate", {"isPlaying": True}))
    assert state.is_playing


def test_position_update_carries_percentage() -> None:
    state = LocalSurfaceState()
    state.apply_authoritative(encode("positionUpdate", {"position": 30, "duration": 120, "percentage": 25.0}))
    assert (state.position, state.duration, state.percentage) == (30.0, 120.0, 25.0)


def test_hotkey_updates_track_active_tab_and_names() -> None:
    state = LocalSurfaceState()
    state.apply_authoritative(
        encode("hotkeyStateUpdate", {"changeAction": "tab-switched", "fromTab": 1, "toTab": 4, "tabName": "FX"})
    )
    assert state.active_tab == 4
    assert state.tab_names == {4: "FX"}

    state.apply_authoritative(encode("hotkeyStateUpdate", {"changeAction": "updated", "tabNumber": 2, "tabName": "Vox"}))
    assert state.active_tab == 4
    assert state.tab_names[2] == "Vox"


def test_responses_without_state_are_not_applied() -> None:
    state = LocalSurfaceState()
    assert not state.apply_authoritative(build_response("setVolume", {"volume": 0.1}))
    assert state.volume == 1.0

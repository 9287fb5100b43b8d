from __future__ import annotations

import math

import pytest

from deckbridge.errors import PayloadValidationError
from deckbridge.protocol.payloads import (
    PlayTrack,
    SetVolume,
    ToggleLoop,
    SeekToPosition,
    SwitchHotkeyTab,
    GetHotkeyTabContent,
)


@pytest.mark.parametrize("volume", [0, 0.0, 0.35, 1, 1.0])
def test_set_volume_accepts_unit_interval(volume: float) -> None:
    assert SetVolume.from_payload({"volume": volume}).volume == float(volume)


@pytest.mark.parametrize("volume", [-0.01, 1.01, 2, True, "0.5", None, math.nan, math.inf])
def test_set_volume_rejects_out_of_range(volume: object) -> None:
    with pytest.raises(PayloadValidationError) as exc:
        SetVolume.from_payload({"volume": volume})
    assert exc.value.code == "INVALID_VOLUME"


def test_seek_rejects_negative_position() -> None:
    assert SeekToPosition.from_payload({"position": 0}).position == 0.0
    with pytest.raises(PayloadValidationError) as exc:
        SeekToPosition.from_payload({"position": -1})
    assert exc.value.code == "INVALID_POSITION"


@pytest.mark.parametrize("tab", [0, 6, 2.5, "3", None, True])
def test_tab_number_must_be_one_to_five(tab: object) -> None:
    with pytest.raises(PayloadValidationError) as exc:
        SwitchHotkeyTab.from_payload({"tabNumber": tab})
    assert exc.value.code == "INVALID_TAB_NUMBER"


def test_tab_number_accepts_integral_values() -> None:
    assert SwitchHotkeyTab.from_payload({"tabNumber": 5}).tab_number == 5
    assert GetHotkeyTabContent.from_payload({"tabNumber": 1.0}).tab_number == 1


def test_toggle_flag_must_be_boolean_when_present() -> None:
    assert ToggleLoop.from_payload({}).enabled is None
    assert ToggleLoop.from_payload({"enabled": True}).enabled is True
    with pytest.raises(PayloadValidationError) as exc:
        ToggleLoop.from_payload({"enabled": "yes"})
    assert exc.value.code == "INVALID_PAYLOAD"


def test_play_track_normalises_identifiers() -> None:
    assert PlayTrack.from_payload({}) == PlayTrack()
    assert PlayTrack.from_payload({"songId": 42}).song_id == "42"
    assert PlayTrack.from_payload({"filePath": "/music/a.mp3"}).file_path == "/music/a.mp3"
    with pytest.raises(PayloadValidationError):
        PlayTrack.from_payload({"filePath": 3})

from __future__ import annotations

from pathlib import Path

from deckbridge.runtime.preferences import PreferencesStore


def test_missing_file_reads_as_empty(tmp_path: Path) -> None:
    store = PreferencesStore(tmp_path / "missing.json")
    assert store.load() == {}
    assert store.get("surface_port", 8888) == 8888


def test_corrupt_file_reads_as_empty(tmp_path: Path) -> None:
    path = tmp_path / "prefs.json"
    path.write_text("{not json")
    assert PreferencesStore(path).load() == {}


def test_update_merges_and_persists(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "prefs.json"
    store = PreferencesStore(path)

    store.set("surface_port", 9001)
    store.update({"surface_enabled": True})

    reopened = PreferencesStore(path)
    assert reopened.load() == {"surface_port": 9001, "surface_enabled": True}
    assert not path.with_name("prefs.json.tmp").exists()

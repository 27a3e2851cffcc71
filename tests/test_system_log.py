from __future__ import annotations

import json
from pathlib import Path

import pytest

from sysutils_wifi.system_log import SystemLog, SystemLogEntry


def test_record_and_tail() -> None:
    log = SystemLog(None, max_entries=3)
    for index in range(5):
        log.record("wifi", f"override.set.{index}", "applied", metadata={"interface": "wlan0", "extra": None})
    entries = log.tail()
    assert [entry.event for entry in entries] == [
        "override.set.2",
        "override.set.3",
        "override.set.4",
    ]
    assert entries[-1].metadata == {"interface": "wlan0"}
    assert [entry.event for entry in log.tail(1)] == ["override.set.4"]


def test_tail_filters_category() -> None:
    log = SystemLog(None)
    log.record("wifi", "override.clear", "cleared")
    log.record("link", "link.control", "applied")
    log.record("  ", "misc", "blank category")
    assert [entry.event for entry in log.tail(category="link")] == ["link.control"]
    assert log.tail(category="general")[0].event == "misc"


def test_persistence_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "events.jsonl"
    log = SystemLog(path)
    log.record("wifi", "override.set", "applied", metadata={"ok": True})
    path.write_text(path.read_text() + "not json\n\n" + json.dumps({"event": 5}) + "\n")

    restored = SystemLog(path)
    entries = restored.tail()
    assert len(entries) == 1
    assert entries[0].category == "wifi"
    assert entries[0].metadata == {"ok": True}


def test_entry_from_dict_defaults() -> None:
    entry = SystemLogEntry.from_dict({"event": "x", "message": "y", "timestamp": "bad"})
    assert entry is not None
    assert entry.category == "general"
    assert entry.metadata is None
    assert SystemLogEntry.from_dict(["x"]) is None
    assert "metadata" not in entry.to_dict()


def test_invalid_capacity() -> None:
    with pytest.raises(ValueError):
        SystemLog(None, max_entries=0)

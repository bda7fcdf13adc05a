from __future__ import annotations

import json
import os
from pathlib import Path

from codebase_rag.core.services.change_tracker import ChangeTracker, compute_file_hash


def _touch_forward(path: Path, seconds: int = 5) -> None:
    stat = path.stat()
    later = stat.st_mtime_ns + seconds * 1_000_000_000
    os.utime(path, ns=(later, later))


def test_new_file_is_changed(tmp_path: Path) -> None:
    source = tmp_path / "A.gs"
    source.write_text("class A {}", encoding="utf-8")
    tracker = ChangeTracker(str(tmp_path / "cache.json"))
    assert tracker.has_changed(str(source))


def test_update_makes_file_unchanged_until_touched(tmp_path: Path) -> None:
    source = tmp_path / "A.gs"
    source.write_text("class A {}", encoding="utf-8")
    tracker = ChangeTracker(str(tmp_path / "cache.json"))

    fingerprint = tracker.update(str(source), chunk_count=1)
    assert not tracker.has_changed(str(source))
    assert fingerprint.hash == compute_file_hash(str(source))

    _touch_forward(source)
    assert tracker.has_changed(str(source))


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    source = tmp_path / "A.gs"
    source.write_text("class A {}", encoding="utf-8")
    cache = tmp_path / "state" / "cache.json"

    tracker = ChangeTracker(str(cache))
    tracker.update(str(source), chunk_count=3)
    tracker.save()

    data = json.loads(cache.read_text(encoding="utf-8"))
    assert data["version"] == "1.0"
    record = data["files"][str(source)]
    assert set(record) == {"path", "hash", "lastModified", "chunkCount"}
    assert record["chunkCount"] == 3

    reloaded = ChangeTracker(str(cache))
    reloaded.load()
    assert len(reloaded) == 1
    assert not reloaded.has_changed(str(source))
    assert reloaded.get_record(str(source)).chunk_count == 3


def test_corrupt_cache_starts_empty(tmp_path: Path) -> None:
    cache = tmp_path / "cache.json"
    cache.write_text("{not json", encoding="utf-8")
    tracker = ChangeTracker(str(cache))
    tracker.load()
    assert len(tracker) == 0


def test_missing_cache_starts_empty(tmp_path: Path) -> None:
    tracker = ChangeTracker(str(tmp_path / "absent.json"))
    tracker.load()
    assert tracker.cached_paths() == []


def test_remove_forgets_file(tmp_path: Path) -> None:
    source = tmp_path / "A.gs"
    source.write_text("class A {}", encoding="utf-8")
    tracker = ChangeTracker(str(tmp_path / "cache.json"))
    tracker.update(str(source), chunk_count=1)

    assert tracker.remove(str(source))
    assert not tracker.remove(str(source))
    assert tracker.has_changed(str(source))

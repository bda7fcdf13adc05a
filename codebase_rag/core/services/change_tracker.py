"""Change tracker - per-file fingerprint cache."""

import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Optional

from ..models.ingestion import FileFingerprint

logger = logging.getLogger(__name__)

CACHE_VERSION = "1.0"


class ChangeTracker:
    """Decides whether a file needs reprocessing.

    The check is stat-based: a file is changed when it has no fingerprint or
    its mtime is newer than the cached one. A touched file with identical bytes
    is reprocessed; a modified file is never missed.
    """

    def __init__(self, cache_path: str = ".rag-cache.json"):
        """Initialize tracker.

        Args:
            cache_path: JSON file holding fingerprints between runs.
        """
        self._cache_path = Path(cache_path)
        self._version = CACHE_VERSION
        self._files: dict[str, FileFingerprint] = {}

    @property
    def cache_path(self) -> Path:
        return self._cache_path

    def load(self) -> None:
        """Load fingerprints from disk; a missing or unreadable cache starts empty."""
        self._files = {}
        if not self._cache_path.exists():
            logger.debug(f"No fingerprint cache at {self._cache_path}, starting fresh")
            return

        try:
            data = json.loads(self._cache_path.read_text(encoding="utf-8"))
            self._version = data.get("version", CACHE_VERSION)
            self._files = {
                path: FileFingerprint.from_dict(path, record)
                for path, record in data.get("files", {}).items()
            }
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning(f"Ignoring unreadable fingerprint cache {self._cache_path}: {e}")
            self._files = {}
            return

        logger.info(f"Loaded {len(self._files)} fingerprints from {self._cache_path}")

    def save(self) -> None:
        """Write fingerprints to disk."""
        data = {
            "version": self._version,
            "files": {path: fp.to_dict() for path, fp in self._files.items()},
        }
        if self._cache_path.parent != Path(""):
            self._cache_path.parent.mkdir(parents=True, exist_ok=True)

        tmp_path = self._cache_path.with_name(self._cache_path.name + ".tmp")
        tmp_path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._cache_path)
        logger.info(f"Saved {len(self._files)} fingerprints to {self._cache_path}")

    def has_changed(self, file_path: str) -> bool:
        """True if the file is new or modified since its last update."""
        record = self._files.get(file_path)
        if record is None:
            return True
        return file_mtime_ms(file_path) > record.last_modified

    def fingerprint(
        self, file_path: str, chunk_count: int, last_modified: Optional[float] = None
    ) -> FileFingerprint:
        """Compute a fresh fingerprint without storing it.

        Args:
            file_path: Absolute file path.
            chunk_count: Chunks produced from the file.
            last_modified: mtime observed before the file was read. Passing it
                keeps an edit made during processing visible to the next run.
        """
        if last_modified is None:
            last_modified = file_mtime_ms(file_path)
        return FileFingerprint(
            path=file_path,
            hash=compute_file_hash(file_path),
            last_modified=last_modified,
            chunk_count=chunk_count,
        )

    def record(self, fingerprint: FileFingerprint) -> None:
        """Store or replace a fingerprint."""
        self._files[fingerprint.path] = fingerprint

    def update(self, file_path: str, chunk_count: int) -> FileFingerprint:
        """Recompute and store the fingerprint of a file."""
        fingerprint = self.fingerprint(file_path, chunk_count)
        self.record(fingerprint)
        return fingerprint

    def remove(self, file_path: str) -> bool:
        """Forget a file. Returns whether it was tracked."""
        return self._files.pop(file_path, None) is not None

    def get_record(self, file_path: str) -> Optional[FileFingerprint]:
        return self._files.get(file_path)

    def cached_paths(self) -> list[str]:
        return list(self._files)

    def __len__(self) -> int:
        return len(self._files)


def compute_file_hash(file_path: str) -> str:
    """SHA-256 of file bytes."""
    digest = hashlib.sha256()
    with open(file_path, "rb") as f:
        for block in iter(lambda: f.read(65536), b""):
            digest.update(block)
    return digest.hexdigest()


def file_mtime_ms(file_path: str) -> float:
    """Modification time in milliseconds."""
    return os.stat(file_path).st_mtime_ns / 1_000_000

"""Ingestion domain models."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class IngestionStatus(Enum):
    """Per-file ingestion status taxonomy."""
    SUCCESS = "success"
    SKIPPED = "skipped"
    PARSE_ERROR = "parse_error"
    CHUNK_ERROR = "chunk_error"
    EMBEDDING_ERROR = "embedding_error"
    STORAGE_ERROR = "storage_error"
    RATE_LIMIT = "rate_limit"
    TOKEN_LIMIT = "token_limit"
    UNKNOWN_ERROR = "unknown_error"

    @property
    def is_error(self) -> bool:
        return self not in (IngestionStatus.SUCCESS, IngestionStatus.SKIPPED)


@dataclass(frozen=True)
class FileFingerprint:
    """Cached state of a previously ingested file."""
    path: str
    hash: str
    last_modified: float  # milliseconds since epoch
    chunk_count: int

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "hash": self.hash,
            "lastModified": self.last_modified,
            "chunkCount": self.chunk_count,
        }

    @classmethod
    def from_dict(cls, path: str, data: dict) -> "FileFingerprint":
        return cls(
            path=data.get("path", path),
            hash=data["hash"],
            last_modified=float(data["lastModified"]),
            chunk_count=int(data.get("chunkCount", 0)),
        )


@dataclass(frozen=True)
class ParseIssue:
    """ERROR or MISSING node found in a syntax tree."""
    kind: str
    start_line: int
    start_column: int
    end_line: int
    end_column: int
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.kind,
            "startLine": self.start_line,
            "startColumn": self.start_column,
            "endLine": self.end_line,
            "endColumn": self.end_column,
            "text": self.text,
        }


@dataclass
class IngestionOutcome:
    """Result of processing one file."""
    file_path: str
    relative_path: str
    status: IngestionStatus
    chunk_count: int = 0
    error_message: Optional[str] = None
    error_details: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    duration_ms: int = 0
    fingerprint: Optional[FileFingerprint] = None
    split_count: int = 0
    dropped_count: int = 0

    @property
    def is_error(self) -> bool:
        return self.status.is_error


@dataclass
class IngestionResult:
    """Aggregate counts for an ingestion run."""
    files_processed: int = 0
    files_skipped: int = 0
    chunks_created: int = 0
    errors: int = 0
    chunks_split: int = 0
    chunks_dropped: int = 0
    duration_ms: int = 0
    failed_files: list[str] = field(default_factory=list)

    def add(self, outcome: IngestionOutcome) -> None:
        """Accumulate a file outcome."""
        if outcome.status is IngestionStatus.SKIPPED:
            self.files_skipped += 1
        elif outcome.status is IngestionStatus.SUCCESS:
            self.files_processed += 1
            self.chunks_created += outcome.chunk_count
        else:
            self.errors += 1
            self.failed_files.append(outcome.file_path)
        self.chunks_split += outcome.split_count
        self.chunks_dropped += outcome.dropped_count


@dataclass
class IngestionLogEntry:
    """Structured per-file record handed to the reporter."""
    timestamp: str
    session_id: str
    file_path: str
    relative_path: str
    status: IngestionStatus
    chunk_count: Optional[int] = None
    error_message: Optional[str] = None
    error_details: Optional[str] = None
    line_number: Optional[int] = None
    column_number: Optional[int] = None
    duration: Optional[int] = None

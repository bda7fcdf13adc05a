"""Domain models."""
from .chunk import Chunk, ChunkKind, ChunkMetadata
from .ingestion import (
    FileFingerprint,
    IngestionLogEntry,
    IngestionOutcome,
    IngestionResult,
    IngestionStatus,
    ParseIssue,
)
from .parsing import ParseResult
from .query import QueryFilter, QueryResult

__all__ = [
    "Chunk",
    "ChunkKind",
    "ChunkMetadata",
    "FileFingerprint",
    "IngestionLogEntry",
    "IngestionOutcome",
    "IngestionResult",
    "IngestionStatus",
    "ParseIssue",
    "ParseResult",
    "QueryFilter",
    "QueryResult",
]

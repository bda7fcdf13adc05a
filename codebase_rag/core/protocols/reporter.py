"""Ingestion reporter protocol for dependency injection."""
from typing import Protocol, runtime_checkable

from ..models.ingestion import IngestionLogEntry


@runtime_checkable
class IngestionReporterProtocol(Protocol):
    """Protocol for per-file ingestion records."""

    @property
    def session_id(self) -> str:
        """Identifier of the current ingestion session."""
        ...

    def log(self, entry: IngestionLogEntry) -> None:
        """Record one file outcome."""
        ...

"""Core business services."""
from .change_tracker import ChangeTracker
from .error_classifier import classify_error
from .ingest_service import IngestService
from .query_service import QueryService

__all__ = [
    "ChangeTracker",
    "classify_error",
    "IngestService",
    "QueryService",
]

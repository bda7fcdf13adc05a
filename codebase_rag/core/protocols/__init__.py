"""Protocol interfaces for dependency injection."""
from .discovery import FileDiscoveryProtocol
from .embedder import EmbedderProtocol
from .parser import ParserProtocol
from .reporter import IngestionReporterProtocol
from .vector_store import VectorStoreProtocol

__all__ = [
    "EmbedderProtocol",
    "FileDiscoveryProtocol",
    "IngestionReporterProtocol",
    "ParserProtocol",
    "VectorStoreProtocol",
]

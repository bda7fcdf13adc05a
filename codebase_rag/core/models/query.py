"""Retrieval domain models."""
from dataclasses import dataclass
from typing import Optional

from .chunk import Chunk


@dataclass
class QueryFilter:
    """Metadata filters for vector store queries."""
    package: Optional[str] = None
    class_name: Optional[str] = None
    chunk_type: Optional[str] = None
    language: Optional[str] = None
    relative_path: Optional[str] = None

    def is_empty(self) -> bool:
        return not any(
            (self.package, self.class_name, self.chunk_type, self.language, self.relative_path)
        )


@dataclass
class QueryResult:
    """Chunk returned by a similarity query."""
    chunk: Chunk
    score: float
    distance: float

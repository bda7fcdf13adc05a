"""Vector store protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.chunk import Chunk
from ..models.query import QueryFilter, QueryResult


@runtime_checkable
class VectorStoreProtocol(Protocol):
    """Protocol for vector storage."""

    @property
    def collection_name(self) -> str:
        """Collection the store writes to."""
        ...

    def connect(self) -> None:
        """Get or create the collection."""
        ...

    def health_check(self) -> bool:
        """Return True if the store is reachable."""
        ...

    def upsert(self, chunks: list[Chunk], embeddings: list[list[float]]) -> None:
        """Insert or replace chunks keyed by chunk ID.

        Args:
            chunks: Chunks to store.
            embeddings: One embedding per chunk.
        """
        ...

    def query(
        self,
        query_embedding: list[float],
        top_k: int = 10,
        filters: Optional[QueryFilter] = None,
    ) -> list[QueryResult]:
        """Search by embedding.

        Args:
            query_embedding: Query vector.
            top_k: Number of results to return.
            filters: Optional metadata filters.

        Returns:
            Results ordered by similarity.
        """
        ...

    def get_ids(self, where: dict) -> list[str]:
        """IDs of stored chunks matching a metadata filter."""
        ...

    def delete(self, ids: Optional[list[str]] = None, where: Optional[dict] = None) -> None:
        """Delete chunks by ID and/or metadata filter."""
        ...

    def count(self) -> int:
        """Get chunk count."""
        ...

"""Embedder protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbedderProtocol(Protocol):
    """Protocol for embedding service."""

    @property
    def name(self) -> str:
        """Provider name."""
        ...

    @property
    def dimension(self) -> int:
        """Embedding vector size."""
        ...

    def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed document texts.

        Implementations batch internally and own their retry policy.

        Args:
            texts: Texts to embed.

        Returns:
            One vector per input text, in input order.
        """
        ...

    def embed_query(self, text: str) -> list[float]:
        """Embed a search query.

        Args:
            text: Query text.

        Returns:
            Query vector.
        """
        ...

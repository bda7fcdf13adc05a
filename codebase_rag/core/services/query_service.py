"""Query service - semantic search over indexed chunks."""

import logging
from typing import Optional

from ..models.query import QueryFilter, QueryResult
from ..protocols.embedder import EmbedderProtocol
from ..protocols.vector_store import VectorStoreProtocol

logger = logging.getLogger(__name__)

SNIPPET_LENGTH = 200


class QueryService:
    """Search service over the chunk store."""

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        top_k: int = 10,
        min_score: float = 0.0,
    ):
        """Initialize query service.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            top_k: Number of results to return.
            min_score: Minimum similarity score.
        """
        self._embedder = embedder
        self._vector_store = vector_store
        self._top_k = top_k
        self._min_score = min_score

    def query(
        self,
        text: str,
        top_k: Optional[int] = None,
        filters: Optional[QueryFilter] = None,
        min_score: Optional[float] = None,
    ) -> list[QueryResult]:
        """Search chunks by natural language.

        Args:
            text: Query text.
            top_k: Override number of results.
            filters: Metadata filters.
            min_score: Override minimum score.

        Returns:
            Results above the score threshold, best first.
        """
        top_k = top_k or self._top_k
        min_score = self._min_score if min_score is None else min_score
        if filters is not None and filters.is_empty():
            filters = None

        try:
            query_embedding = self._embedder.embed_query(text)
            results = self._vector_store.query(
                query_embedding=query_embedding, top_k=top_k, filters=filters
            )
        except Exception as e:
            logger.error(f"Query error: {e}")
            return []

        results = [r for r in results if r.score >= min_score]
        logger.info(f"Query: returned {len(results)}/{top_k} chunks for '{text[:50]}'")
        return results

    def format_for_human(self, results: list[QueryResult]) -> str:
        """Format results for console output."""
        if not results:
            return "No results found."

        lines = [f"Found {len(results)} results:", ""]
        for i, result in enumerate(results, 1):
            meta = result.chunk.metadata
            lines.append(f"{i}. Score: {result.score * 100:.1f}%")
            lines.append(f"   File: {meta.relative_path}")
            if meta.package:
                lines.append(f"   Package: {meta.package}")
            if meta.class_name:
                lines.append(f"   Class: {meta.class_name}")
            if meta.method_name:
                lines.append(f"   Method: {meta.method_name}")
            lines.append(f"   Type: {meta.chunk_type.value}")
            lines.append(f"   Lines: {meta.line_start}-{meta.line_end}")

            content = result.chunk.content
            snippet = content[:SNIPPET_LENGTH].replace("\n", " ")
            ellipsis = "..." if len(content) > SNIPPET_LENGTH else ""
            lines.append(f'   "{snippet}{ellipsis}"')
            lines.append("")

        return "\n".join(lines)

    def format_for_agent(self, results: list[QueryResult]) -> str:
        """Format results as markdown context for an LLM."""
        if not results:
            return "No relevant code found in the knowledge base."

        parts = [
            "# Retrieved Code Context",
            "",
            f"Found {len(results)} relevant code chunks:",
            "",
            "---",
            "",
        ]
        for i, result in enumerate(results, 1):
            meta = result.chunk.metadata
            fence = "gosu-template" if meta.language == "gosu_template" else meta.language

            parts.append(f"## Result {i}")
            parts.append("")
            parts.append("**Location:**")
            parts.append(f"- File: `{meta.relative_path}`")
            parts.append(f"- Lines: {meta.line_start}-{meta.line_end}")
            if meta.package:
                parts.append(f"- Package: `{meta.package}`")
            if meta.class_name:
                parts.append(f"- Class: `{meta.class_name}`")
            if meta.method_name:
                parts.append(f"- Method: `{meta.method_name}`")
            parts.append(f"- Type: {meta.chunk_type.value}")
            parts.append(f"- Language: {meta.language}")
            parts.append("")
            parts.append("**Code:**")
            parts.append(f"```{fence}")
            parts.append(result.chunk.content)
            parts.append("```")
            parts.append("")
            parts.append("---")
            parts.append("")

        return "\n".join(parts)

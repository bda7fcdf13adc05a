from __future__ import annotations

from pathlib import Path

import pytest

from codebase_rag.config.settings import Settings
from codebase_rag.container import configure_container, container, create_embedder
from codebase_rag.core.protocols.reporter import IngestionReporterProtocol
from codebase_rag.core.services.ingest_service import IngestService
from codebase_rag.core.services.query_service import QueryService
from codebase_rag.infrastructure.embeddings.ollama_embedder import OllamaEmbedder
from codebase_rag.infrastructure.embeddings.sentence_transformer import (
    SentenceTransformerEmbedder,
)


def test_default_provider_is_sentence_transformers() -> None:
    embedder = create_embedder(Settings(embedding_provider="sentence_transformers"))
    assert isinstance(embedder, SentenceTransformerEmbedder)
    assert embedder.name == "sentence_transformers"


def test_ollama_provider() -> None:
    embedder = create_embedder(
        Settings(embedding_provider="ollama", embedding_model="nomic-embed-text")
    )
    assert isinstance(embedder, OllamaEmbedder)
    assert embedder.dimension == 768


def test_openai_provider_requires_key() -> None:
    with pytest.raises(ValueError):
        create_embedder(Settings(embedding_provider="openai", openai_api_key=""))


def test_unknown_provider_is_rejected() -> None:
    with pytest.raises(ValueError, match="Unknown embedding provider"):
        create_embedder(Settings(embedding_provider="word2vec"))


def test_container_wires_services(tmp_path: Path) -> None:
    settings = Settings(
        ingestion_db_path=str(tmp_path / "ingestion.db"),
        hash_cache_path=str(tmp_path / "cache.json"),
    )
    container.reset()
    try:
        configure_container(settings)
        ingest_service = container.resolve(IngestService)
        assert container.resolve(IngestService) is ingest_service
        assert isinstance(container.resolve(QueryService), QueryService)
        assert isinstance(container.resolve(IngestionReporterProtocol), IngestionReporterProtocol)
    finally:
        container.resolve(IngestionReporterProtocol).close()
        container.reset()

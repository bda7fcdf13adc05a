import logging
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from .config.settings import Settings

logger = logging.getLogger(__name__)

T = TypeVar("T")

EMBEDDING_PROVIDERS = ("sentence_transformers", "openai", "ollama")


@dataclass
class Container:
    _factories: dict[type, Callable[[], Any]] = field(default_factory=dict)
    _singletons: dict[type, Any] = field(default_factory=dict)
    _singleton_flags: set[type] = field(default_factory=set)

    def register(
        self, interface: type[T], factory: Callable[[], T], singleton: bool = False
    ) -> None:
        """Register factory for interface.

        Args:
            interface: Interface type.
            factory: Factory function.
            singleton: Whether to cache instance.
        """
        self._factories[interface] = factory
        if singleton:
            self._singleton_flags.add(interface)

    def resolve(self, interface: type[T]) -> T:
        if interface in self._singletons:
            return self._singletons[interface]

        if interface not in self._factories:
            raise KeyError(f"No factory registered for {interface}")

        instance = self._factories[interface]()

        if interface in self._singleton_flags:
            self._singletons[interface] = instance

        return instance

    def reset(self) -> None:
        """Reset singletons (for testing)."""
        self._singletons.clear()


container = Container()


def create_embedder(settings: Settings):
    """Build the embedder selected by ``settings.embedding_provider``.

    Raises:
        ValueError: If the provider is unknown.
    """
    provider = settings.embedding_provider.lower()

    if provider == "sentence_transformers":
        from .infrastructure.embeddings.sentence_transformer import (
            SentenceTransformerEmbedder,
        )

        return SentenceTransformerEmbedder(
            model_name=settings.embedding_model,
            batch_size=settings.embedding_batch_size,
            document_prefix=settings.embedding_document_prefix,
            query_prefix=settings.embedding_query_prefix,
        )

    if provider == "openai":
        from .infrastructure.embeddings.openai_embedder import OpenAIEmbedder

        return OpenAIEmbedder(api_key=settings.openai_api_key, model=settings.embedding_model)

    if provider == "ollama":
        from .infrastructure.embeddings.ollama_embedder import OllamaEmbedder

        return OllamaEmbedder(host=settings.ollama_host, model=settings.embedding_model)

    raise ValueError(
        f"Unknown embedding provider '{settings.embedding_provider}' "
        f"(expected one of: {', '.join(EMBEDDING_PROVIDERS)})"
    )


def configure_container(settings: Settings) -> Container:
    """Configure container with all dependencies.

    Args:
        settings: Application settings.

    Returns:
        Configured container.
    """
    from .core.chunking.extractor import (
        SemanticExtractor,
        gosu_profile,
        gosu_template_profile,
    )
    from .core.protocols.discovery import FileDiscoveryProtocol
    from .core.protocols.embedder import EmbedderProtocol
    from .core.protocols.reporter import IngestionReporterProtocol
    from .core.protocols.vector_store import VectorStoreProtocol
    from .core.services.change_tracker import ChangeTracker
    from .core.services.ingest_service import IngestService
    from .core.services.query_service import QueryService
    from .infrastructure.discovery.file_discovery import FileDiscovery
    from .infrastructure.parsers.tree_sitter_parser import TreeSitterParser
    from .infrastructure.reporting.sqlalchemy_logger import SQLAlchemyIngestionLogger
    from .infrastructure.vector_stores.chroma_store import ChromaVectorStore

    container.register(EmbedderProtocol, lambda: create_embedder(settings), singleton=True)

    container.register(
        VectorStoreProtocol,
        lambda: ChromaVectorStore(
            host=settings.chroma_host,
            port=settings.chroma_port,
            collection_name=settings.chroma_collection,
        ),
        singleton=True,
    )

    container.register(
        ChangeTracker,
        lambda: ChangeTracker(settings.hash_cache_path),
        singleton=True,
    )

    container.register(FileDiscoveryProtocol, FileDiscovery, singleton=True)

    container.register(
        IngestionReporterProtocol,
        lambda: SQLAlchemyIngestionLogger(settings.ingestion_db_path),
        singleton=True,
    )

    container.register(
        IngestService,
        lambda: IngestService(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            change_tracker=container.resolve(ChangeTracker),
            parsers=[
                TreeSitterParser("gosu", settings.gosu_grammar_module, (".gs", ".gsx")),
                TreeSitterParser(
                    "gosu_template", settings.gosu_template_grammar_module, (".gst",)
                ),
            ],
            extractors=[
                SemanticExtractor(gosu_profile(settings.gosu_semantic_units)),
                SemanticExtractor(
                    gosu_template_profile(settings.gosu_template_semantic_units)
                ),
            ],
            discovery=container.resolve(FileDiscoveryProtocol),
            reporter=container.resolve(IngestionReporterProtocol),
            source_path=settings.source_path,
            extensions=tuple(settings.source_extensions),
            exclude_dirs=tuple(settings.exclude_dirs),
            max_depth=settings.max_depth,
            chunk_size=settings.chunk_size,
            chunk_overlap=settings.chunk_overlap,
            chunk_hard_limit=settings.chunk_hard_limit,
            file_batch_size=settings.file_batch_size,
            concurrency=settings.embedding_concurrency,
            evict_stale_chunks=settings.evict_stale_chunks,
        ),
        singleton=True,
    )

    container.register(
        QueryService,
        lambda: QueryService(
            embedder=container.resolve(EmbedderProtocol),
            vector_store=container.resolve(VectorStoreProtocol),
            top_k=settings.rag_top_k,
            min_score=settings.rag_min_score,
        ),
        singleton=True,
    )

    logger.info("Container configured")
    return container

from __future__ import annotations

from pathlib import Path

import pytest

from codebase_rag.core.chunking.extractor import SemanticExtractor, gosu_profile
from codebase_rag.core.services.change_tracker import ChangeTracker
from codebase_rag.core.services.ingest_service import IngestService
from codebase_rag.infrastructure.discovery.file_discovery import FileDiscovery
from tests.helpers import (
    GOSU_UNITS,
    FakeEmbedder,
    FakeParser,
    InMemoryVectorStore,
    RecordingReporter,
)


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    path = tmp_path / "src"
    path.mkdir()
    return path


@pytest.fixture
def embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore()


@pytest.fixture
def reporter() -> RecordingReporter:
    return RecordingReporter()


@pytest.fixture
def make_service(tmp_path: Path, source_dir: Path, embedder, store, reporter):
    def factory(parser: FakeParser | None = None, **overrides) -> IngestService:
        options = {
            "embedder": embedder,
            "vector_store": store,
            "change_tracker": ChangeTracker(str(tmp_path / ".rag-cache.json")),
            "parsers": [parser or FakeParser()],
            "extractors": [SemanticExtractor(gosu_profile(GOSU_UNITS))],
            "discovery": FileDiscovery(),
            "reporter": reporter,
            "source_path": str(source_dir),
        }
        options.update(overrides)
        return IngestService(**options)

    return factory

"""Ingest service - incremental source tree indexing."""

import asyncio
import json
import logging
import math
import os
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..chunking.extractor import SemanticExtractor, collect_parse_issues
from ..chunking.splitter import split_oversized_chunks, validate_window
from ..exceptions import (
    EmbeddingError,
    IngestError,
    UnsupportedFileError,
    VectorStoreUnavailableError,
)
from ..models.ingestion import (
    IngestionLogEntry,
    IngestionOutcome,
    IngestionResult,
    IngestionStatus,
)
from ..protocols.discovery import FileDiscoveryProtocol
from ..protocols.embedder import EmbedderProtocol
from ..protocols.parser import ParserProtocol
from ..protocols.reporter import IngestionReporterProtocol
from ..protocols.vector_store import VectorStoreProtocol
from .change_tracker import ChangeTracker, file_mtime_ms
from .error_classifier import classify_error

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS = (".gs", ".gsx", ".gst")
DEFAULT_EXCLUDE_DIRS = ("node_modules", ".git", "dist", "build", ".idea", ".vscode")


class IngestService:
    """Service for indexing a source tree into the vector store.

    Files are handled in fixed-size batches. Inside a batch every file runs as
    its own task, at most ``concurrency`` at a time, and the batch finishes
    only when every task has produced an outcome. A failing file becomes a
    classified outcome and never stops its siblings.

    Fingerprints, counters and the reporter are only touched from the
    coroutine driving the run.
    """

    def __init__(
        self,
        embedder: EmbedderProtocol,
        vector_store: VectorStoreProtocol,
        change_tracker: ChangeTracker,
        parsers: list[ParserProtocol],
        extractors: list[SemanticExtractor],
        discovery: FileDiscoveryProtocol,
        reporter: Optional[IngestionReporterProtocol] = None,
        source_path: str = "./gsrc",
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
        exclude_dirs: tuple[str, ...] = DEFAULT_EXCLUDE_DIRS,
        max_depth: int = -1,
        chunk_size: int = 4000,
        chunk_overlap: int = 200,
        chunk_hard_limit: int = 30000,
        file_batch_size: int = 50,
        concurrency: int = 5,
        evict_stale_chunks: bool = True,
    ):
        """Initialize ingest service.

        Args:
            embedder: Embedding service.
            vector_store: Vector store.
            change_tracker: Fingerprint cache.
            parsers: Parsers, selected by file extension.
            extractors: Chunk extractors, selected by parser language.
            discovery: Source file discovery.
            reporter: Sink for per-file outcome records.
            source_path: Default source tree root.
            extensions: File extensions to ingest.
            exclude_dirs: Directory names to skip.
            max_depth: Maximum directory depth, -1 for unlimited.
            chunk_size: Chunks above this many chars are split.
            chunk_overlap: Overlap between split windows.
            chunk_hard_limit: Chunks above this many chars are dropped.
            file_batch_size: Files per batch.
            concurrency: Files processed at once within a batch.
            evict_stale_chunks: Delete stored chunks a changed file no longer produces.
        """
        validate_window(chunk_size, chunk_overlap)
        if file_batch_size < 1:
            raise ValueError("file_batch_size must be >= 1")
        if concurrency < 1:
            raise ValueError("concurrency must be >= 1")

        self._embedder = embedder
        self._vector_store = vector_store
        self._tracker = change_tracker
        self._parsers = {ext: parser for parser in parsers for ext in parser.extensions}
        self._extractors = {extractor.language: extractor for extractor in extractors}
        self._discovery = discovery
        self._reporter = reporter
        self._source_path = source_path
        self._extensions = list(extensions)
        self._exclude_dirs = list(exclude_dirs)
        self._max_depth = max_depth
        self._chunk_size = chunk_size
        self._chunk_overlap = chunk_overlap
        self._chunk_hard_limit = chunk_hard_limit
        self._file_batch_size = file_batch_size
        self._concurrency = concurrency
        self._evict_stale_chunks = evict_stale_chunks

    def run(self, source_path: Optional[str] = None, force: bool = False) -> IngestionResult:
        """Index the source tree (blocking).

        Args:
            source_path: Directory or single file; defaults to the configured path.
            force: Reprocess files even if unchanged.

        Returns:
            Run totals.
        """
        return asyncio.run(self.ingest(source_path=source_path, force=force))

    async def ingest(
        self, source_path: Optional[str] = None, force: bool = False
    ) -> IngestionResult:
        """Index the source tree.

        Raises:
            VectorStoreUnavailableError: If the store cannot be reached. Nothing
                is processed in that case.
        """
        started = time.perf_counter()
        root = Path(source_path or self._source_path).resolve()
        source_root = root if root.is_dir() else root.parent

        logger.info(f"Starting ingestion from: {root}")
        self._preflight()
        self._tracker.load()

        files = await asyncio.to_thread(
            self._discovery.discover,
            str(root),
            self._extensions,
            self._exclude_dirs,
            self._max_depth,
        )
        logger.info(f"Found {len(files)} files, concurrency {self._concurrency}")

        result = IngestionResult()
        semaphore = asyncio.Semaphore(self._concurrency)
        total_batches = math.ceil(len(files) / self._file_batch_size)

        try:
            for batch_num, start in enumerate(
                range(0, len(files), self._file_batch_size), start=1
            ):
                batch = files[start : start + self._file_batch_size]
                logger.info(f"Batch {batch_num}/{total_batches} ({len(batch)} files)")

                tasks = [
                    asyncio.create_task(
                        self._process_file(file_path, source_root, semaphore, force)
                    )
                    for file_path in batch
                ]
                for next_done in asyncio.as_completed(tasks):
                    self._handle_outcome(await next_done, result)

                done = result.files_processed + result.files_skipped + result.errors
                logger.info(f"Progress: {done}/{len(files)}")
        finally:
            self._tracker.save()

        result.duration_ms = _elapsed_ms(started)
        logger.info(
            f"Ingestion complete in {result.duration_ms / 1000:.2f}s: "
            f"processed={result.files_processed} skipped={result.files_skipped} "
            f"chunks={result.chunks_created} errors={result.errors}"
        )
        return result

    def forget(self, file_path: str) -> bool:
        """Drop a deleted file from the fingerprint cache and the store.

        Returns:
            Whether the file was tracked.
        """
        path = str(Path(file_path).resolve())
        self._preflight()
        self._tracker.load()

        self._vector_store.delete(where={"absolute_path": path})
        removed = self._tracker.remove(path)
        self._tracker.save()

        logger.info(f"Forgot {path} (tracked: {removed})")
        return removed

    def _preflight(self) -> None:
        if not self._vector_store.health_check():
            raise VectorStoreUnavailableError(
                f"Vector store is not reachable (collection '{self._vector_store.collection_name}')"
            )
        try:
            self._vector_store.connect()
        except Exception as e:
            raise VectorStoreUnavailableError(f"Failed to connect to vector store: {e}") from e

    async def _process_file(
        self,
        file_path: str,
        source_root: Path,
        semaphore: asyncio.Semaphore,
        force: bool,
    ) -> IngestionOutcome:
        relative_path = _relative_path(file_path, source_root)

        async with semaphore:
            started = time.perf_counter()
            try:
                changed = force or await asyncio.to_thread(self._tracker.has_changed, file_path)
                if not changed:
                    outcome = IngestionOutcome(
                        file_path=file_path,
                        relative_path=relative_path,
                        status=IngestionStatus.SKIPPED,
                    )
                else:
                    previously_tracked = self._tracker.get_record(file_path) is not None
                    outcome = await asyncio.to_thread(
                        self._ingest_file, file_path, relative_path, previously_tracked
                    )
            except Exception as e:
                outcome = IngestionOutcome(
                    file_path=file_path,
                    relative_path=relative_path,
                    status=classify_error(e),
                    error_message=str(e) or type(e).__name__,
                )

            outcome.duration_ms = _elapsed_ms(started)
            return outcome

    def _ingest_file(
        self, file_path: str, relative_path: str, previously_tracked: bool
    ) -> IngestionOutcome:
        """Parse, chunk, embed and store one file (runs in a worker thread)."""
        parser = self._parser_for(file_path)
        extractor = self._extractors.get(parser.language)
        if extractor is None:
            raise IngestError(f"No extractor configured for language '{parser.language}'")

        last_modified = file_mtime_ms(file_path)
        source_code = Path(file_path).read_text(encoding="utf-8", errors="replace")

        parsed = parser.parse(file_path, source_code)
        if parsed.has_error:
            logger.warning(f"Parse errors in: {relative_path}")

        chunks = extractor.extract(parsed.root_node, file_path, relative_path, source_code)

        if not chunks and parsed.has_error:
            issues = collect_parse_issues(parsed.root_node)
            first = issues[0] if issues else None
            return IngestionOutcome(
                file_path=file_path,
                relative_path=relative_path,
                status=IngestionStatus.PARSE_ERROR,
                error_message=(
                    f"Parse error prevented chunk extraction ({len(issues)} issue(s) in AST)"
                ),
                error_details=json.dumps([issue.to_dict() for issue in issues], indent=2),
                line_number=first.start_line if first else None,
                column_number=first.start_column if first else None,
            )

        chunks, split_count = split_oversized_chunks(
            chunks, self._chunk_size, self._chunk_overlap
        )
        valid_chunks = [c for c in chunks if c.size <= self._chunk_hard_limit]
        dropped_count = len(chunks) - len(valid_chunks)
        if dropped_count:
            logger.warning(f"Skipped {dropped_count} oversized chunk(s) in {relative_path}")

        if valid_chunks:
            embeddings = self._embedder.embed([c.content for c in valid_chunks])
            if len(embeddings) != len(valid_chunks):
                raise EmbeddingError(
                    f"Embedding provider returned {len(embeddings)} vectors "
                    f"for {len(valid_chunks)} texts"
                )
            self._vector_store.upsert(valid_chunks, embeddings)

        if self._evict_stale_chunks and previously_tracked:
            self._evict_stale(file_path, {c.id for c in valid_chunks})

        return IngestionOutcome(
            file_path=file_path,
            relative_path=relative_path,
            status=IngestionStatus.SUCCESS,
            chunk_count=len(valid_chunks),
            fingerprint=self._tracker.fingerprint(
                file_path, len(valid_chunks), last_modified=last_modified
            ),
            split_count=split_count,
            dropped_count=dropped_count,
        )

    def _parser_for(self, file_path: str) -> ParserProtocol:
        extension = Path(file_path).suffix
        parser = self._parsers.get(extension)
        if parser is None:
            raise UnsupportedFileError(file_path, extension)
        return parser

    def _evict_stale(self, file_path: str, keep_ids: set[str]) -> None:
        stored_ids = self._vector_store.get_ids(where={"absolute_path": file_path})
        stale_ids = [chunk_id for chunk_id in stored_ids if chunk_id not in keep_ids]
        if stale_ids:
            self._vector_store.delete(ids=stale_ids)
            logger.info(f"Evicted {len(stale_ids)} stale chunk(s) for {file_path}")

    def _handle_outcome(self, outcome: IngestionOutcome, result: IngestionResult) -> None:
        result.add(outcome)
        if outcome.fingerprint is not None:
            self._tracker.record(outcome.fingerprint)

        if outcome.status is IngestionStatus.SKIPPED:
            logger.debug(f"Skip unchanged: {outcome.relative_path}")
        elif outcome.status is IngestionStatus.SUCCESS:
            logger.info(f"Indexed {outcome.relative_path} ({outcome.chunk_count} chunks)")
        else:
            logger.error(
                f"Failed {outcome.relative_path} [{outcome.status.value}]: "
                f"{outcome.error_message}"
            )

        self._report(outcome)

    def _report(self, outcome: IngestionOutcome) -> None:
        if self._reporter is None:
            return

        entry = IngestionLogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            session_id=self._reporter.session_id,
            file_path=outcome.file_path,
            relative_path=outcome.relative_path,
            status=outcome.status,
            chunk_count=outcome.chunk_count if outcome.status is IngestionStatus.SUCCESS else None,
            error_message=outcome.error_message,
            error_details=outcome.error_details,
            line_number=outcome.line_number,
            column_number=outcome.column_number,
            duration=outcome.duration_ms,
        )
        try:
            self._reporter.log(entry)
        except Exception as e:
            logger.warning(f"Failed to record outcome for {outcome.relative_path}: {e}")


def _relative_path(file_path: str, source_root: Path) -> str:
    return os.path.relpath(file_path, source_root).replace(os.sep, "/")


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)

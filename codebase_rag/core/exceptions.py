"""Domain exceptions."""


class IngestError(Exception):
    """Base class for ingestion errors."""


class ChunkConfigError(IngestError, ValueError):
    """Invalid chunk size settings (e.g. overlap not smaller than window)."""


class UnsupportedFileError(IngestError):
    """No language is registered for a file extension."""

    def __init__(self, file_path: str, extension: str):
        self.file_path = file_path
        self.extension = extension
        super().__init__(
            f"Unsupported file type '{extension}' (no language registered): {file_path}"
        )


class EmbeddingError(IngestError):
    """Embedding provider returned an unusable response."""


class VectorStoreUnavailableError(IngestError):
    """Vector store is not reachable; the run cannot start."""

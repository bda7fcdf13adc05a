"""Error classification for ingestion triage."""

from typing import Union

from ..models.ingestion import IngestionStatus

# First match wins.
ERROR_RULES: tuple[tuple[IngestionStatus, tuple[str, ...]], ...] = (
    (
        IngestionStatus.TOKEN_LIMIT,
        (
            "maximum context length",
            "context length",
            "context_length",
            "token limit",
            "too many tokens",
            "max_tokens",
        ),
    ),
    (
        IngestionStatus.RATE_LIMIT,
        ("rate limit", "rate_limit", "ratelimit", "429", "too many requests"),
    ),
    (IngestionStatus.PARSE_ERROR, ("parse", "syntax")),
    (IngestionStatus.CHUNK_ERROR, ("chunk",)),
    (IngestionStatus.EMBEDDING_ERROR, ("embed",)),
    (
        IngestionStatus.STORAGE_ERROR,
        ("chroma", "upsert", "vector store", "storage", "collection"),
    ),
)


def classify_error(error: Union[BaseException, str]) -> IngestionStatus:
    """Map an error or its message to an ingestion status.

    Advisory only: nothing in the pipeline retries based on the result.
    """
    if isinstance(error, str):
        message = error
    else:
        message = f"{type(error).__name__}: {error}"
    lower = message.lower()

    for status, keywords in ERROR_RULES:
        if any(keyword in lower for keyword in keywords):
            return status

    return IngestionStatus.UNKNOWN_ERROR

from __future__ import annotations

import pytest

from codebase_rag.core.exceptions import EmbeddingError, UnsupportedFileError
from codebase_rag.core.models.ingestion import IngestionStatus
from codebase_rag.core.services.error_classifier import classify_error


@pytest.mark.parametrize(
    "message, expected",
    [
        ("Error code: 429 - slow down", IngestionStatus.RATE_LIMIT),
        ("Rate limit reached for requests", IngestionStatus.RATE_LIMIT),
        (
            "This model's maximum context length is 8192 tokens",
            IngestionStatus.TOKEN_LIMIT,
        ),
        ("Unexpected syntax near 'class'", IngestionStatus.PARSE_ERROR),
        ("chunk too large", IngestionStatus.CHUNK_ERROR),
        ("failed to upsert into chroma", IngestionStatus.STORAGE_ERROR),
        ("something odd happened", IngestionStatus.UNKNOWN_ERROR),
    ],
)
def test_messages_are_classified(message: str, expected: IngestionStatus) -> None:
    assert classify_error(message) is expected


def test_token_limit_wins_over_rate_limit() -> None:
    assert classify_error("429: too many tokens in request") is IngestionStatus.TOKEN_LIMIT


def test_tokens_per_minute_limit_is_rate_limit() -> None:
    message = (
        "Error code: 429 - Rate limit reached for text-embedding-3-small on tokens per min "
        "(TPM): Limit 1000000, Used 999990, Requested 40. Please try again in 6ms."
    )
    assert classify_error(message) is IngestionStatus.RATE_LIMIT


def test_exception_type_name_takes_part() -> None:
    assert classify_error(EmbeddingError("bad response")) is IngestionStatus.EMBEDDING_ERROR


def test_unsupported_file_is_unknown_error() -> None:
    error = UnsupportedFileError("/repo/page.txt", ".txt")
    assert classify_error(error) is IngestionStatus.UNKNOWN_ERROR


def test_classification_never_marks_success() -> None:
    for message in ("", "ok", "success"):
        assert classify_error(message).is_error

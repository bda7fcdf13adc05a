"""Chunk identity, extraction and splitting."""
from .extractor import (
    ExtractorProfile,
    SemanticExtractor,
    collect_parse_issues,
    gosu_profile,
    gosu_template_profile,
)
from .identity import build_chunk_id, compute_content_hash, create_chunk
from .splitter import split_oversized_chunk, split_oversized_chunks, validate_window

__all__ = [
    "ExtractorProfile",
    "SemanticExtractor",
    "collect_parse_issues",
    "gosu_profile",
    "gosu_template_profile",
    "build_chunk_id",
    "compute_content_hash",
    "create_chunk",
    "split_oversized_chunk",
    "split_oversized_chunks",
    "validate_window",
]

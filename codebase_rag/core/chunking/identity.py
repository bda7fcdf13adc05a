"""Chunk identity: content hash and stable chunk ID."""

import hashlib
from dataclasses import replace
from typing import Optional

from ..models.chunk import Chunk, ChunkMetadata

CONTENT_HASH_PREFIX = 16


def compute_content_hash(content: str) -> str:
    """SHA-256 hex digest of chunk content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def build_chunk_id(metadata: ChunkMetadata, ordinal: Optional[int] = None) -> str:
    """Build a stable chunk ID.

    Path, structural coordinates and the ordinal within the file all take part,
    so two identical chunks in one file, or identical content in two files,
    never share an ID.

    Args:
        metadata: Chunk metadata (content hash included).
        ordinal: Position of the chunk in the file's extraction order.

    Returns:
        MD5 hex digest.
    """
    parts = [
        metadata.relative_path,
        metadata.package,
        metadata.class_name,
        metadata.method_name,
        metadata.chunk_type.value,
        str(metadata.line_start),
        str(metadata.line_end),
        metadata.content_hash[:CONTENT_HASH_PREFIX],
        str(ordinal) if ordinal is not None else None,
    ]
    joined = ":".join(p for p in parts if p)
    return hashlib.md5(joined.encode("utf-8")).hexdigest()


def create_chunk(
    content: str, metadata: ChunkMetadata, ordinal: Optional[int] = None
) -> Chunk:
    """Create a chunk, filling in its content hash and ID.

    Any ``content_hash`` already present on ``metadata`` is replaced.
    """
    full_metadata = replace(metadata, content_hash=compute_content_hash(content))
    return Chunk(
        id=build_chunk_id(full_metadata, ordinal),
        content=content,
        metadata=full_metadata,
    )

"""Oversize chunk splitting."""

from dataclasses import replace

from ..exceptions import ChunkConfigError
from ..models.chunk import Chunk


def validate_window(max_size: int, overlap_size: int) -> None:
    """Reject window settings that would not advance."""
    if max_size < 1:
        raise ChunkConfigError(f"chunk max size must be >= 1, got {max_size}")
    if overlap_size < 0:
        raise ChunkConfigError(f"chunk overlap must be >= 0, got {overlap_size}")
    if overlap_size >= max_size:
        raise ChunkConfigError(
            f"chunk overlap ({overlap_size}) must be less than max size ({max_size})"
        )


def split_oversized_chunk(chunk: Chunk, max_size: int, overlap_size: int) -> list[Chunk]:
    """Split a chunk into overlapping windows of at most ``max_size`` chars.

    Sub-chunk IDs are ``<parent id>_sub<n>``. Line ranges are re-derived from
    newline positions inside the parent content.

    Args:
        chunk: Chunk to split.
        max_size: Window width in characters.
        overlap_size: Characters shared by consecutive windows.

    Returns:
        ``[chunk]`` if it already fits, otherwise the sub-chunks in order.
    """
    validate_window(max_size, overlap_size)

    content = chunk.content
    if len(content) <= max_size:
        return [chunk]

    step = max_size - overlap_size
    line_start = chunk.metadata.line_start
    sub_chunks = []
    start = 0

    while True:
        end = min(start + max_size, len(content))
        sub_chunks.append(
            Chunk(
                id=f"{chunk.id}_sub{len(sub_chunks)}",
                content=content[start:end],
                metadata=replace(
                    chunk.metadata,
                    line_start=line_start + content.count("\n", 0, start),
                    line_end=line_start + content.count("\n", 0, max(start, end - 1)),
                ),
            )
        )
        if end >= len(content):
            break
        start += step

    return sub_chunks


def split_oversized_chunks(
    chunks: list[Chunk], max_size: int, overlap_size: int
) -> tuple[list[Chunk], int]:
    """Split every oversized chunk.

    Returns:
        Resulting chunks and the number of extra chunks created.
    """
    validate_window(max_size, overlap_size)

    result: list[Chunk] = []
    split_count = 0
    for chunk in chunks:
        parts = split_oversized_chunk(chunk, max_size, overlap_size)
        split_count += len(parts) - 1
        result.extend(parts)
    return result, split_count

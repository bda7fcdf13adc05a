from __future__ import annotations

import math
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

from codebase_rag.core.models.chunk import Chunk
from codebase_rag.core.models.ingestion import IngestionLogEntry
from codebase_rag.core.models.parsing import ParseResult
from codebase_rag.core.models.query import QueryFilter, QueryResult
from codebase_rag.infrastructure.vector_stores.chroma_store import build_where

GOSU_UNITS = [
    "class_declaration",
    "interface_declaration",
    "enum_declaration",
    "function_declaration",
    "method_declaration",
    "property_declaration",
]

CLASS_WITH_METHOD = """package acme.billing

class Invoice {
  function total() {
    return 1
  }
}
"""


@dataclass
class FakeNode:
    """Stand-in for a tree-sitter node."""

    type: str
    start_byte: int
    end_byte: int
    start_point: tuple[int, int]
    end_point: tuple[int, int]
    children: list[FakeNode] = field(default_factory=list)
    is_missing: bool = False
    text: bytes = b""


def _point(data: bytes, offset: int) -> tuple[int, int]:
    row = data.count(b"\n", 0, offset)
    column = offset - (data.rfind(b"\n", 0, offset) + 1)
    return row, column


def make_node(
    node_type: str, data: bytes, start: int, end: int, children: list[FakeNode] | None = None
) -> FakeNode:
    return FakeNode(
        type=node_type,
        start_byte=start,
        end_byte=end,
        start_point=_point(data, start),
        end_point=_point(data, end),
        children=children or [],
        text=data[start:end],
    )


def _identifier(data: bytes, line_offset: int, line: bytes, keyword: bytes) -> FakeNode:
    name_start = line.index(keyword) + len(keyword)
    name_end = name_start
    while name_end < len(line) and line[name_end : name_end + 1] not in (b"(", b" ", b"{"):
        name_end += 1
    return make_node("identifier", data, line_offset + name_start, line_offset + name_end)


def build_tree(source: str) -> FakeNode:
    """Parse a toy Gosu subset into fake nodes.

    Recognised lines: ``package x``, ``class Name {`` closed by a ``}`` in
    column 0, ``function name() {`` inside a class closed by an indented
    ``}``, and ``!!!`` which becomes an ERROR node.
    """
    data = source.encode("utf-8")
    lines = data.split(b"\n")
    offsets = []
    position = 0
    for line in lines:
        offsets.append(position)
        position += len(line) + 1

    children: list[FakeNode] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        stripped = line.strip()
        if stripped.startswith(b"package "):
            children.append(
                make_node("package_declaration", data, offsets[i], offsets[i] + len(line))
            )
        elif stripped.startswith(b"class "):
            close = next((j for j in range(i + 1, len(lines)) if lines[j] == b"}"), None)
            if close is None:
                children.append(make_node("ERROR", data, offsets[i], len(data)))
                break
            members = [_identifier(data, offsets[i], line, b"class ")]
            k = i + 1
            while k < close:
                member_line = lines[k]
                if member_line.strip().startswith(b"function "):
                    end = next(m for m in range(k + 1, close) if lines[m].strip() == b"}")
                    members.append(
                        make_node(
                            "method_declaration",
                            data,
                            offsets[k] + member_line.index(b"function"),
                            offsets[end] + len(lines[end]),
                            [_identifier(data, offsets[k], member_line, b"function ")],
                        )
                    )
                    k = end
                k += 1
            children.append(
                make_node("class_declaration", data, offsets[i], offsets[close] + 1, members)
            )
            i = close
        elif stripped == b"!!!":
            children.append(make_node("ERROR", data, offsets[i], offsets[i] + len(line)))
        i += 1

    return make_node("source_file", data, 0, len(data), children)


def has_error(node: FakeNode) -> bool:
    return node.type == "ERROR" or node.is_missing or any(has_error(c) for c in node.children)


class FakeParser:
    """Parser over the toy grammar of :func:`build_tree`."""

    def __init__(
        self,
        language: str = "gosu",
        extensions: tuple[str, ...] = (".gs", ".gsx"),
        fail_on: set[str] | None = None,
    ):
        self._language = language
        self._extensions = extensions
        self._fail_on = fail_on or set()

    @property
    def language(self) -> str:
        return self._language

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    def parse(self, file_path: str, source_code: str | None = None) -> ParseResult:
        if Path(file_path).name in self._fail_on:
            raise RuntimeError("parser crashed")
        if source_code is None:
            source_code = Path(file_path).read_text(encoding="utf-8")
        root = build_tree(source_code)
        return ParseResult(tree=root, root_node=root, has_error=has_error(root))


class FakeEmbedder:
    """Deterministic embedder: vector built from text length and vowels."""

    def __init__(self):
        self.calls = 0
        self._lock = threading.Lock()

    @property
    def name(self) -> str:
        return "fake"

    @property
    def dimension(self) -> int:
        return 3

    def embed(self, texts: list[str]) -> list[list[float]]:
        with self._lock:
            self.calls += 1
        return [self._vector(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        return self._vector(text)

    def _vector(self, text: str) -> list[float]:
        vowels = sum(text.count(v) for v in "aeiou")
        return [float(len(text)), float(vowels), 1.0]


class InMemoryVectorStore:
    """Vector store keeping everything in a dict."""

    def __init__(self, healthy: bool = True):
        self.healthy = healthy
        self.connected = False
        self.records: dict[str, tuple[Chunk, list[float]]] = {}
        self._lock = threading.Lock()

    @property
    def collection_name(self) -> str:
        return "test-collection"

    def connect(self) -> None:
        self.connected = True

    def health_check(self) -> bool:
        return self.healthy

    def upsert(self, chunks: list[Chunk], embeddings: list[list[float]]) -> None:
        with self._lock:
            for chunk, embedding in zip(chunks, embeddings):
                self.records[chunk.id] = (chunk, embedding)

    def query(
        self, query_embedding: list[float], top_k: int = 10, filters: QueryFilter | None = None
    ) -> list[QueryResult]:
        where = build_where(filters)
        results = []
        for chunk, embedding in self.records.values():
            if where and not _matches(chunk, where):
                continue
            score = _cosine(query_embedding, embedding)
            results.append(QueryResult(chunk=chunk, score=score, distance=1.0 - score))
        results.sort(key=lambda r: r.score, reverse=True)
        return results[:top_k]

    def get_ids(self, where: dict) -> list[str]:
        return [cid for cid, (chunk, _) in self.records.items() if _matches(chunk, where)]

    def delete(self, ids: list[str] | None = None, where: dict | None = None) -> None:
        with self._lock:
            for chunk_id in ids or []:
                self.records.pop(chunk_id, None)
            if where:
                for chunk_id in self.get_ids(where):
                    self.records.pop(chunk_id, None)

    def count(self) -> int:
        return len(self.records)

    def all_chunks(self) -> list[Chunk]:
        return [c for c, _ in self.records.values()]

    def chunks_for(self, absolute_path: str) -> list[Chunk]:
        return [c for c, _ in self.records.values() if c.metadata.absolute_path == absolute_path]


class RecordingReporter:
    def __init__(self, session_id: str = "test-session"):
        self._session_id = session_id
        self.entries: list[IngestionLogEntry] = []

    @property
    def session_id(self) -> str:
        return self._session_id

    def log(self, entry: IngestionLogEntry) -> None:
        self.entries.append(entry)


class FailingReporter(RecordingReporter):
    def log(self, entry: IngestionLogEntry) -> None:
        raise OSError("disk full")


def _matches(chunk: Chunk, where: dict) -> bool:
    conditions = where.get("$and", [where])
    stored = chunk.metadata.to_store_dict()
    return all(stored.get(key) == value for cond in conditions for key, value in cond.items())


def _cosine(a: list[float], b: list[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class SlowEmbedder(FakeEmbedder):
    """Embedder that sleeps and records how many calls overlap."""

    def __init__(self, delay: float = 0.05):
        super().__init__()
        self._delay = delay
        self._active = 0
        self.peak = 0

    def embed(self, texts: list[str]) -> list[list[float]]:
        with self._lock:
            self._active += 1
            self.peak = max(self.peak, self._active)
        try:
            time.sleep(self._delay)
            return super().embed(texts)
        finally:
            with self._lock:
                self._active -= 1

"""Chunk domain models."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ChunkKind(Enum):
    """Structural role of a chunk."""
    PACKAGE = "package"
    CLASS = "class"
    INTERFACE = "interface"
    ENUM = "enum"
    FUNCTION = "function"
    METHOD = "method"
    PROPERTY = "property"
    TEMPLATE_DIRECTIVE = "template_directive"
    TEMPLATE_BLOCK = "template_block"
    FILE = "file"

    @classmethod
    def from_node_type(cls, node_type: str) -> "ChunkKind":
        """Map a syntax node type to a kind, falling back to FILE."""
        return NODE_TYPE_KINDS.get(node_type, cls.FILE)


NODE_TYPE_KINDS: dict[str, ChunkKind] = {
    "package_declaration": ChunkKind.PACKAGE,
    "class_declaration": ChunkKind.CLASS,
    "enhancement_declaration": ChunkKind.CLASS,
    "interface_declaration": ChunkKind.INTERFACE,
    "enum_declaration": ChunkKind.ENUM,
    "function_declaration": ChunkKind.FUNCTION,
    "method_declaration": ChunkKind.METHOD,
    "constructor_declaration": ChunkKind.METHOD,
    "property_declaration": ChunkKind.PROPERTY,
    "directive": ChunkKind.TEMPLATE_DIRECTIVE,
    "scriptlet": ChunkKind.TEMPLATE_BLOCK,
    "expression": ChunkKind.TEMPLATE_BLOCK,
    "declaration": ChunkKind.TEMPLATE_BLOCK,
}


@dataclass(frozen=True)
class ChunkMetadata:
    """Location and structural metadata of a chunk."""
    absolute_path: str
    relative_path: str
    chunk_type: ChunkKind
    language: str
    line_start: int
    line_end: int
    content_hash: str
    package: Optional[str] = None
    class_name: Optional[str] = None
    method_name: Optional[str] = None

    def to_store_dict(self) -> dict:
        """Flatten for vector store metadata (no None values)."""
        return {
            "absolute_path": self.absolute_path,
            "relative_path": self.relative_path,
            "package": self.package or "",
            "class_name": self.class_name or "",
            "method_name": self.method_name or "",
            "chunk_type": self.chunk_type.value,
            "language": self.language,
            "line_start": self.line_start,
            "line_end": self.line_end,
            "content_hash": self.content_hash,
        }

    @classmethod
    def from_store_dict(cls, data: dict) -> "ChunkMetadata":
        try:
            chunk_type = ChunkKind(data.get("chunk_type", "file"))
        except ValueError:
            chunk_type = ChunkKind.FILE
        return cls(
            absolute_path=data.get("absolute_path", ""),
            relative_path=data.get("relative_path", ""),
            chunk_type=chunk_type,
            language=data.get("language", ""),
            line_start=int(data.get("line_start") or 0),
            line_end=int(data.get("line_end") or 0),
            content_hash=data.get("content_hash", ""),
            package=data.get("package") or None,
            class_name=data.get("class_name") or None,
            method_name=data.get("method_name") or None,
        )


@dataclass(frozen=True)
class Chunk:
    """Content-addressed fragment of source code."""
    id: str
    content: str
    metadata: ChunkMetadata

    @property
    def size(self) -> int:
        return len(self.content)

"""Semantic chunk extraction from syntax trees."""

from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from ..models.chunk import Chunk, ChunkKind, ChunkMetadata
from ..models.ingestion import ParseIssue
from .identity import create_chunk


ISSUE_TEXT_LIMIT = 200


@dataclass(frozen=True)
class ExtractorProfile:
    """Per-language extraction settings.

    Attributes:
        language: Language tag stored on every chunk.
        semantic_units: Node types that become chunks.
        scope_node_type: Root-level node holding the package/namespace.
        scope_keyword: Leading keyword stripped from the scope declaration.
        container_node_types: Node types whose identifier is the class name.
        member_node_types: Node types whose identifier is the method name.
        identifier_node_type: Node type carrying a declaration's name.
    """
    language: str
    semantic_units: frozenset[str]
    scope_node_type: Optional[str] = None
    scope_keyword: str = "package"
    container_node_types: frozenset[str] = field(default_factory=frozenset)
    member_node_types: frozenset[str] = field(default_factory=frozenset)
    identifier_node_type: str = "identifier"


GOSU_CONTAINER_TYPES = frozenset(
    {
        "class_declaration",
        "interface_declaration",
        "enum_declaration",
        "enhancement_declaration",
    }
)
GOSU_MEMBER_TYPES = frozenset(
    {
        "function_declaration",
        "method_declaration",
        "constructor_declaration",
        "property_declaration",
    }
)


def gosu_profile(semantic_units: list[str]) -> ExtractorProfile:
    return ExtractorProfile(
        language="gosu",
        semantic_units=frozenset(semantic_units),
        scope_node_type="package_declaration",
        container_node_types=GOSU_CONTAINER_TYPES,
        member_node_types=GOSU_MEMBER_TYPES,
    )


def gosu_template_profile(semantic_units: list[str]) -> ExtractorProfile:
    return ExtractorProfile(
        language="gosu_template",
        semantic_units=frozenset(semantic_units),
    )


class SemanticExtractor:
    """Walks a syntax tree and emits chunks at semantic-unit boundaries."""

    def __init__(self, profile: ExtractorProfile):
        self._profile = profile

    @property
    def language(self) -> str:
        return self._profile.language

    def extract(
        self,
        root_node: Any,
        absolute_path: str,
        relative_path: str,
        source_code: str,
    ) -> list[Chunk]:
        """Extract chunks in document order.

        Nested units (a method inside a class) each yield their own chunk.
        Partial trees are walked as they are; this never raises on parse errors.

        Args:
            root_node: Root of the syntax tree.
            absolute_path: Absolute file path.
            relative_path: Path relative to the source root.
            source_code: File text the tree was parsed from.

        Returns:
            Chunks with IDs assigned from their position in the output.
        """
        source_bytes = source_code.encode("utf-8")
        package = self._scope_name(root_node, source_bytes)

        chunks: list[Chunk] = []
        for node in _walk(root_node):
            if node.type not in self._profile.semantic_units:
                continue

            content = _node_text(node, source_bytes)
            if not content.strip():
                continue

            name = self._declared_name(node, source_bytes)
            metadata = ChunkMetadata(
                absolute_path=absolute_path,
                relative_path=relative_path,
                chunk_type=ChunkKind.from_node_type(node.type),
                language=self._profile.language,
                line_start=node.start_point[0] + 1,
                line_end=node.end_point[0] + 1,
                content_hash="",
                package=package,
                class_name=name if node.type in self._profile.container_node_types else None,
                method_name=name if node.type in self._profile.member_node_types else None,
            )
            chunks.append(create_chunk(content, metadata, ordinal=len(chunks)))

        return chunks

    def _scope_name(self, root_node: Any, source_bytes: bytes) -> Optional[str]:
        if not self._profile.scope_node_type:
            return None

        scope_node = _find_child(root_node, self._profile.scope_node_type)
        if scope_node is None:
            return None

        text = _node_text(scope_node, source_bytes).strip()
        keyword = self._profile.scope_keyword
        if keyword and text.startswith(keyword):
            text = text[len(keyword):]
        return text.strip().rstrip(";").strip() or None

    def _declared_name(self, node: Any, source_bytes: bytes) -> Optional[str]:
        identifier = _find_child(node, self._profile.identifier_node_type)
        if identifier is None:
            return None
        return _node_text(identifier, source_bytes) or None


def collect_parse_issues(root_node: Any) -> list[ParseIssue]:
    """List ERROR and MISSING nodes in document order."""
    issues = []
    for node in _walk(root_node):
        is_missing = bool(getattr(node, "is_missing", False))
        if node.type != "ERROR" and not is_missing:
            continue

        raw_text = getattr(node, "text", b"") or b""
        if isinstance(raw_text, bytes):
            raw_text = raw_text.decode("utf-8", errors="replace")

        issues.append(
            ParseIssue(
                kind="MISSING" if is_missing else node.type,
                start_line=node.start_point[0] + 1,
                start_column=node.start_point[1] + 1,
                end_line=node.end_point[0] + 1,
                end_column=node.end_point[1] + 1,
                text=raw_text[:ISSUE_TEXT_LIMIT],
            )
        )
    return issues


def _walk(root_node: Any) -> Iterator[Any]:
    """Depth-first pre-order traversal."""
    stack = [root_node]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def _find_child(node: Any, node_type: str) -> Optional[Any]:
    for child in node.children:
        if child.type == node_type:
            return child
    return None


def _node_text(node: Any, source_bytes: bytes) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

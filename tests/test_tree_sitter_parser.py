from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from codebase_rag.infrastructure.parsers.tree_sitter_parser import TreeSitterParser


def _parser_with_tree(has_error: bool) -> tuple[TreeSitterParser, MagicMock]:
    parser = TreeSitterParser("gosu", "tree_sitter_gosu", (".gs", ".gsx"))
    backend = MagicMock()
    backend.parse.return_value.root_node.has_error = has_error
    parser.__dict__["parser"] = backend
    return parser, backend


def test_parse_encodes_source_as_utf8() -> None:
    parser, backend = _parser_with_tree(has_error=False)

    result = parser.parse("/repo/A.gs", "class Crème {}")

    backend.parse.assert_called_once_with("class Crème {}".encode("utf-8"))
    assert result.root_node is backend.parse.return_value.root_node
    assert not result.has_error


def test_parse_reads_file_when_no_source_given(tmp_path: Path) -> None:
    source = tmp_path / "A.gs"
    source.write_text("class A {}", encoding="utf-8")
    parser, backend = _parser_with_tree(has_error=True)

    result = parser.parse(str(source))

    backend.parse.assert_called_once_with(b"class A {}")
    assert result.has_error


def test_language_and_extensions() -> None:
    parser = TreeSitterParser("gosu_template", "tree_sitter_gosu_template", [".gst"])
    assert parser.language == "gosu_template"
    assert parser.extensions == (".gst",)

"""Parsing domain models."""
from dataclasses import dataclass
from typing import Any


@dataclass
class ParseResult:
    """Syntax tree produced by a parser.

    ``tree`` and ``root_node`` are tree-sitter objects (or anything exposing
    the same node attributes: ``type``, ``children``, ``start_byte``,
    ``end_byte``, ``start_point``, ``end_point``).
    """
    tree: Any
    root_node: Any
    has_error: bool

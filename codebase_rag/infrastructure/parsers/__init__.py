"""Parser implementations."""
from .tree_sitter_parser import TreeSitterParser

__all__ = ["TreeSitterParser"]

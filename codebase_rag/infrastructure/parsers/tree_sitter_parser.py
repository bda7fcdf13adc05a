import importlib
import logging
import threading
from functools import cached_property
from pathlib import Path
from typing import Optional

from tree_sitter import Language, Parser

from codebase_rag.core.models.parsing import ParseResult

logger = logging.getLogger(__name__)


class TreeSitterParser:
    """Parser backed by a tree-sitter grammar package."""

    def __init__(
        self,
        language: str,
        grammar_module: str,
        extensions: tuple[str, ...],
        language_function: str = "language",
    ):
        """Initialize parser.

        Args:
            language: Language tag (matches an extractor profile).
            grammar_module: Importable grammar package, e.g. ``tree_sitter_gosu``.
            extensions: File extensions handled.
            language_function: Callable in the grammar package returning the
                language pointer.
        """
        self._language = language
        self._grammar_module = grammar_module
        self._extensions = tuple(extensions)
        self._language_function = language_function
        self._lock = threading.Lock()

    @property
    def language(self) -> str:
        return self._language

    @property
    def extensions(self) -> tuple[str, ...]:
        return self._extensions

    @cached_property
    def parser(self) -> Parser:
        logger.info(f"Loading tree-sitter grammar: {self._grammar_module}")
        module = importlib.import_module(self._grammar_module)
        raw_language = getattr(module, self._language_function)()
        language = raw_language if isinstance(raw_language, Language) else Language(raw_language)
        return Parser(language)

    def parse(self, file_path: str, source_code: Optional[str] = None) -> ParseResult:
        if source_code is None:
            source_code = Path(file_path).read_text(encoding="utf-8", errors="replace")

        # Parser objects are not re-entrant.
        with self._lock:
            tree = self.parser.parse(source_code.encode("utf-8"))

        return ParseResult(
            tree=tree,
            root_node=tree.root_node,
            has_error=tree.root_node.has_error,
        )

"""Parser protocol for dependency injection."""
from typing import Optional, Protocol, runtime_checkable

from ..models.parsing import ParseResult


@runtime_checkable
class ParserProtocol(Protocol):
    """Protocol for language parsers."""

    @property
    def language(self) -> str:
        """Language tag, used to pick the chunk extractor."""
        ...

    @property
    def extensions(self) -> tuple[str, ...]:
        """File extensions handled, with leading dot."""
        ...

    def parse(self, file_path: str, source_code: Optional[str] = None) -> ParseResult:
        """Parse a source file.

        Args:
            file_path: Absolute path to the file.
            source_code: Pre-read file text; read from ``file_path`` if None.

        Returns:
            Parse result with tree and error flag.
        """
        ...

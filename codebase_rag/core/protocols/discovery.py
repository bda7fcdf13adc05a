"""File discovery protocol for dependency injection."""
from typing import Protocol, runtime_checkable


@runtime_checkable
class FileDiscoveryProtocol(Protocol):
    """Protocol for source file discovery."""

    def discover(
        self,
        root: str,
        extensions: list[str],
        exclude_dirs: list[str],
        max_depth: int = -1,
    ) -> list[str]:
        """Find source files under a root.

        Args:
            root: Directory (or single file) to scan.
            extensions: Extensions to include, with leading dot.
            exclude_dirs: Directory names to skip.
            max_depth: Maximum recursion depth, -1 for unlimited.

        Returns:
            Absolute file paths.
        """
        ...

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class FileDiscovery:
    """Recursive source file discovery."""

    def discover(
        self,
        root: str,
        extensions: list[str],
        exclude_dirs: list[str],
        max_depth: int = -1,
    ) -> list[str]:
        """Find files with matching extensions.

        Args:
            root: Directory to walk, or a single file.
            extensions: Extensions to include, with leading dot.
            exclude_dirs: Directory names never descended into.
            max_depth: Maximum depth below root, -1 for unlimited.

        Returns:
            Sorted absolute paths.
        """
        root_path = Path(root).resolve()
        wanted = set(extensions)

        if root_path.is_file():
            return [str(root_path)] if root_path.suffix in wanted else []

        if not root_path.is_dir():
            logger.error(f"Source path not found: {root_path}")
            return []

        excluded = set(exclude_dirs)
        files = []
        for dir_path, dir_names, file_names in os.walk(root_path):
            depth = len(Path(dir_path).relative_to(root_path).parts)
            if max_depth >= 0 and depth >= max_depth:
                dir_names[:] = []
            else:
                dir_names[:] = [d for d in dir_names if d not in excluded]

            for name in file_names:
                if os.path.splitext(name)[1] in wanted:
                    files.append(os.path.join(dir_path, name))

        files.sort()
        return files

"""Source file discovery."""
from .file_discovery import FileDiscovery

__all__ = ["FileDiscovery"]

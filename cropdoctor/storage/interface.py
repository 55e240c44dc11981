"""
Storage Interface - Abstract base class for all storage implementations.
Paths are slash-separated and relative to the storage root, which lets the
document layer address ``users/{uid}/chats/{sid}/messages/{mid}.json``
the same way on any backend.
"""

from abc import ABC, abstractmethod
from typing import Optional, List


class StorageError(Exception):
    """An I/O failure in a storage backend."""

    def __init__(self, operation: str, path: str, cause: Optional[BaseException] = None):
        self.operation = operation
        self.path = path
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Storage {operation} failed for {path}{detail}")


class StorageInterface(ABC):
    """
    Abstract storage interface that defines the contract for all storage implementations.
    Implementations raise ``StorageError`` on I/O failure; a missing file is
    not a failure.
    """

    @abstractmethod
    async def save(self, path: str, content: bytes | str) -> bool:
        """
        Save content to the specified path, creating parents as needed.

        Args:
            path: Relative path (e.g., "users/123/chats/abc.json")
            content: Content to save (bytes or str)

        Returns:
            bool: True once written
        """
        pass

    @abstractmethod
    async def load(self, path: str) -> Optional[bytes]:
        """
        Load content from the specified path.

        Returns:
            Optional[bytes]: File content, or None if the file doesn't exist
        """
        pass

    @abstractmethod
    async def delete(self, path: str) -> bool:
        """
        Delete the file at the specified path.

        Returns:
            bool: True if a file was deleted, False if there was none
        """
        pass

    @abstractmethod
    async def list(self, path: str, pattern: Optional[str] = None) -> List[str]:
        """
        List files directly inside a directory.

        Args:
            path: Directory path to list
            pattern: Optional glob pattern to filter files (e.g., "*.json")

        Returns:
            List[str]: Sorted relative file paths, empty if the directory is missing
        """
        pass

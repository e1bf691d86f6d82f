"""Storage root capability interface.

This module defines the minimal capability set a backing store must
implement to be addressable through Tree and Blob nodes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import BinaryIO

from core.errors import ReadOnlyError
from core.paths import RelPath


class StorageRoot(ABC):
    """Abstract base class for storage drivers.

    Paths are always relative to the root. Every mutating method must call
    ``require_writeable`` before touching the backing store.
    """

    @abstractmethod
    def is_directory(self, path: RelPath) -> bool:
        """Return whether ``path`` names a directory-like node."""

    @abstractmethod
    def is_file(self, path: RelPath) -> bool:
        """Return whether ``path`` names a single byte-stream node."""

    @abstractmethod
    def path_exists(self, path: RelPath) -> bool:
        """Return whether anything at all exists at ``path``."""

    @abstractmethod
    def list_names(self, path: RelPath) -> list[str]:
        """List child names under a directory path.

        Args:
            path: Directory path relative to the root.

        Returns:
            Child names in the backing store's enumeration order.
        """

    @abstractmethod
    def open_read(self, path: RelPath) -> BinaryIO:
        """Open a file for binary reading. The caller must close the stream."""

    @abstractmethod
    def open_write(self, path: RelPath) -> BinaryIO:
        """Create or truncate a file for binary writing.

        Raises:
            ReadOnlyError: If the root is not writeable.
        """

    @abstractmethod
    def remove_node(self, path: RelPath, recursive: bool = False) -> None:
        """Remove a file or directory.

        Args:
            path: Path to remove.
            recursive: Remove non-empty directories with their contents.

        Raises:
            ReadOnlyError: If the root is not writeable.
        """

    @abstractmethod
    def make_directory(self, path: RelPath) -> None:
        """Create one directory whose parent already exists.

        Raises:
            ReadOnlyError: If the root is not writeable.
        """

    @abstractmethod
    def is_writeable(self) -> bool:
        """Return whether mutating operations are permitted."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable location of the root, for messages and rendering."""

    def require_writeable(self, action: str, path: RelPath) -> None:
        """Fail closed when a mutation targets a read-only root.

        Args:
            action: Short description of the attempted mutation.
            path: Target path relative to the root.

        Raises:
            ReadOnlyError: If ``is_writeable`` is false.
        """
        if not self.is_writeable():
            raise ReadOnlyError(
                f"Cannot {action} '{path}' in read-only root {self.describe()}. "
                "Open the root with write permission to modify it."
            )

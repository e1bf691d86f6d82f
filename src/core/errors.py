"""Blobtree exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each layer raises a specific error type so misuse is never silent.
"""

from __future__ import annotations

from pathlib import Path


class BlobTreeError(Exception):
    """Base exception for all blobtree failures."""


class InvalidPathError(BlobTreeError, ValueError):
    """Raised for malformed relative path components."""


class NotFoundError(BlobTreeError, LookupError):
    """Raised when indexing a path that does not exist under a root."""


class ReadOnlyError(BlobTreeError):
    """Raised when a mutation targets a root without write permission."""


class AlreadyMovedError(BlobTreeError):
    """Raised when using a temporary handle whose data was transferred away."""


class InvalidTargetError(BlobTreeError):
    """Raised when an ownership transfer targets an unsupported position."""


class StorageIOError(BlobTreeError, OSError):
    """Raised for native storage failures, with the affected path in context."""


class DriverConfigError(BlobTreeError, ValueError):
    """Raised for invalid driver names or driver connection config."""


class ConfigError(BlobTreeError):
    """Raised for invalid runtime configuration."""


class DependencyError(BlobTreeError):
    """Raised when an optional runtime dependency is missing."""


class RollbackError(BlobTreeError):
    """Raised when a destination update failed and restoring it failed too.

    The pre-existing destination content is still intact at ``held_path``
    and must be recovered manually.

    Attributes:
        destination: Path that was being replaced.
        original_error: Failure that triggered the rollback attempt.
        held_path: Location still holding the original destination content.
    """

    def __init__(
        self,
        destination: Path,
        original_error: BaseException,
        held_path: Path,
    ) -> None:
        self.destination = destination
        self.original_error = original_error
        self.held_path = held_path
        super().__init__(
            f"Failed to move data to {destination}: {original_error}. "
            f"Restoring the original data also failed; it is preserved at {held_path}. "
            "Move it back manually before retrying."
        )

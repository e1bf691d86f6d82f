"""Temporary trees and blobs.

This module allocates fresh temporary locations wrapped in owning roots,
offers scoped variants that clean up on exit, and sweeps locations left
behind by processes that died before cleaning up.
"""

from __future__ import annotations

from contextlib import contextmanager
import os
from pathlib import Path
import tempfile
import time
from typing import BinaryIO, Callable, Iterator, Union, cast

from core.config import BlobTreeConfig
from core.constants import ORPHAN_PREFIXES, TEMP_DIR_PREFIX, TEMP_FILE_PREFIX
from core.errors import InvalidTargetError, StorageIOError
from core.logging_config import get_logger
from core.paths import RelPath
from core.types import SweepResult
from store.filesystem_root import LocalRoot, TempFileSystemRoot, force_remove, storage_error
from tree.node import Blob, Tree

_LOGGER = get_logger(__name__)

TempParent = Union[LocalRoot, Tree, str, Path, None]


def new_dir(parent: TempParent = None) -> Tree:
    """Allocate an empty temporary directory owned by a new temp root.

    Args:
        parent: Where to allocate. A filesystem root or tree on one, a
            native directory, or ``None`` for the configured temp dir.

    Returns:
        Tree at the top of the new temporary root.
    """
    parent_dir = _resolve_parent(parent)
    try:
        location = Path(tempfile.mkdtemp(dir=parent_dir, prefix=TEMP_DIR_PREFIX))
    except OSError as error:
        raise storage_error("allocate a temporary directory in", parent_dir, error) from error
    _LOGGER.debug("temp_root_created", location=str(location), kind="tree")
    return Tree(TempFileSystemRoot(location))


def new_file(
    parent: TempParent = None,
    writer: Callable[[BinaryIO], None] | None = None,
) -> Blob:
    """Allocate a temporary file owned by a new temp root.

    Args:
        parent: Where to allocate, as for ``new_dir``.
        writer: Optional callback that fills the file through a binary
            stream. If it raises, the file is removed and the error
            propagates.

    Returns:
        Blob at the top of the new temporary root.
    """
    parent_dir = _resolve_parent(parent)
    try:
        descriptor, raw_path = tempfile.mkstemp(dir=parent_dir, prefix=TEMP_FILE_PREFIX)
    except OSError as error:
        raise storage_error("allocate a temporary file in", parent_dir, error) from error
    location = Path(raw_path)
    try:
        with os.fdopen(descriptor, "wb") as stream:
            if writer is not None:
                writer(stream)
    except BaseException:
        location.unlink()
        raise
    _LOGGER.debug("temp_root_created", location=str(location), kind="blob")
    return Blob(TempFileSystemRoot(location))


@contextmanager
def temp_dir(parent: TempParent = None) -> Iterator[Tree]:
    """Scoped ``new_dir``: the directory is removed on exit unless transferred."""
    tree = new_dir(parent)
    with cast(TempFileSystemRoot, tree.root):
        yield tree


@contextmanager
def temp_file(
    parent: TempParent = None,
    writer: Callable[[BinaryIO], None] | None = None,
) -> Iterator[Blob]:
    """Scoped ``new_file``: the file is removed on exit unless transferred."""
    blob = new_file(parent, writer)
    with cast(TempFileSystemRoot, blob.root):
        yield blob


def sweep_orphans(
    parent: str | Path | None = None,
    max_age_seconds: int | None = None,
    now: float | None = None,
) -> SweepResult:
    """Remove stale temporary and holding locations under ``parent``.

    Only entries carrying this library's prefixes are considered. Entries
    younger than ``max_age_seconds`` are kept, since a live handle in some
    process may still own them.

    Args:
        parent: Directory to scan; defaults to the configured temp dir.
        max_age_seconds: Minimum age to remove; defaults to config.
        now: Reference timestamp, defaults to the current time.

    Returns:
        Scanned directory and removed paths.

    Raises:
        StorageIOError: If the directory cannot be scanned or an entry
            cannot be removed.
    """
    if parent is None or max_age_seconds is None:
        config = BlobTreeConfig.from_env()
        parent = config.temp_dir if parent is None else parent
        max_age_seconds = config.sweep_max_age_seconds if max_age_seconds is None else max_age_seconds
    parent_dir = Path(parent)
    reference_time = time.time() if now is None else now
    removed: list[Path] = []
    for entry in sorted(_orphan_candidates(parent_dir)):
        try:
            age_seconds = reference_time - entry.lstat().st_mtime
            if age_seconds < max_age_seconds:
                continue
            force_remove(entry)
        except FileNotFoundError:
            continue
        except OSError as error:
            raise StorageIOError(
                f"Failed to sweep orphaned temporary location {entry}: {error}"
            ) from error
        removed.append(entry)
        _LOGGER.info("orphan_swept", location=str(entry), age_seconds=int(age_seconds))
    return SweepResult(parent=parent_dir, removed=tuple(removed))


def _orphan_candidates(parent_dir: Path) -> list[Path]:
    try:
        entries = list(parent_dir.iterdir())
    except OSError as error:
        raise StorageIOError(f"Failed to scan {parent_dir} for orphans: {error}") from error
    return [entry for entry in entries if entry.name.startswith(ORPHAN_PREFIXES)]


def _resolve_parent(parent: TempParent) -> Path:
    """Turn a parent argument into a native directory, checking write access.

    Raises:
        ReadOnlyError: If a root or tree parent is read-only.
        InvalidTargetError: If a tree parent is not filesystem-backed.
    """
    if parent is None:
        return BlobTreeConfig.from_env().temp_dir
    if isinstance(parent, Tree):
        if not isinstance(parent.root, LocalRoot):
            raise InvalidTargetError(
                f"Temporary data needs a filesystem-backed parent, got root {parent.root.describe()}."
            )
        parent.root.require_writeable("allocate temporary data in", parent.path)
        return parent.root.native_path(parent.path)
    if isinstance(parent, LocalRoot):
        parent.require_writeable("allocate temporary data in", RelPath())
        return parent.base_location()
    return Path(parent)

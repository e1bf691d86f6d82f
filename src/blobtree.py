"""Public SDK surface for blobtree.

This module provides a stable import path for library users.
It re-exports node types, storage roots, and transfer helpers.
"""

from __future__ import annotations

from core.config import BlobTreeConfig
from core.errors import (
    AlreadyMovedError,
    BlobTreeError,
    InvalidPathError,
    InvalidTargetError,
    NotFoundError,
    ReadOnlyError,
    RollbackError,
    StorageIOError,
)
from core.paths import AbsPath, RelPath, components, join
from store.driver_registry import DriverRegistry, build_default_registry
from store.filesystem_root import FileSystemRoot, TempFileSystemRoot
from store.root import StorageRoot
from store.s3_root import S3Root
from store.temp_storage import new_dir, new_file, sweep_orphans, temp_dir, temp_file
from store.transfer import move_with_rollback, transfer_into
from tree.node import Blob, Node, Tree, classify, index
from tree.render import render_tree
from tree.traversal import copy_blob, copy_into, walk

__all__ = [
    "AbsPath",
    "AlreadyMovedError",
    "Blob",
    "BlobTreeConfig",
    "BlobTreeError",
    "DriverRegistry",
    "FileSystemRoot",
    "InvalidPathError",
    "InvalidTargetError",
    "Node",
    "NotFoundError",
    "ReadOnlyError",
    "RelPath",
    "RollbackError",
    "S3Root",
    "StorageIOError",
    "StorageRoot",
    "TempFileSystemRoot",
    "Tree",
    "build_default_registry",
    "classify",
    "components",
    "copy_blob",
    "copy_into",
    "index",
    "join",
    "move_with_rollback",
    "new_dir",
    "new_file",
    "render_tree",
    "sweep_orphans",
    "temp_dir",
    "temp_file",
    "transfer_into",
    "walk",
]

"""Generic traversal and copy over tree nodes.

These helpers only use the node contract, so they work for any pair
of storage roots, including copies between different drivers.
"""

from __future__ import annotations

import shutil
from typing import Iterator, Union

from core.constants import COPY_CHUNK_SIZE
from core.logging_config import get_logger
from core.paths import AbsPath
from tree.node import Blob, Tree

_LOGGER = get_logger(__name__)


def walk(tree: Tree) -> Iterator[Union[Tree, Blob, AbsPath]]:
    """Yield every descendant of ``tree`` depth-first, parents before children."""
    for child in tree.children():
        yield child
        if isinstance(child, Tree):
            yield from walk(child)


def copy_into(dst: Tree, src: Tree) -> None:
    """Mirror every descendant of ``src`` into ``dst``.

    Missing directories are created, existing ones are reused, and leaves
    are copied as full byte streams. The first failure aborts the copy and
    leaves already copied siblings in place.

    Args:
        dst: Destination tree on a writeable root.
        src: Source tree.

    Raises:
        ReadOnlyError: If ``dst`` is on a read-only root.
        StorageIOError: If reading or writing a node fails.
    """
    for child in src.children():
        if isinstance(child, Tree):
            copy_into(_child_tree(dst, child.name), child)
        elif isinstance(child, Blob):
            copy_blob(Blob(dst.root, dst.joinpath(child.name).path), child)
        else:
            _LOGGER.warning(
                "copy_skipped_other",
                path=str(child.path),
                root=child.root.describe(),
            )


def copy_blob(dst: Blob, src: Blob) -> None:
    """Copy the full byte stream of ``src`` into a fresh ``dst`` leaf."""
    with src.open("rb") as source_stream, dst.open("wb") as destination_stream:
        shutil.copyfileobj(source_stream, destination_stream, COPY_CHUNK_SIZE)


def _child_tree(parent: Tree, name: str) -> Tree:
    child = parent.joinpath(name)
    if parent.root.is_directory(child.path):
        return Tree(parent.root, child.path)
    return parent.mkdir(name)

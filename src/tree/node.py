"""Tree and Blob node types.

This module defines the two node variants and the classification and
indexing rules that map a root path onto one of them. Node kinds are
resolved against the root on every access and never cached.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
import io
from typing import IO, Iterator, Union

from core.constants import DEFAULT_TEXT_ENCODING, RENDER_BLOB_ICON, RENDER_TREE_ICON
from core.errors import NotFoundError
from core.paths import AbsPath, PathLike, RelPath, join
from core.types import NodeKind
from store.root import StorageRoot

_OPEN_MODES = ("rb", "wb", "r", "w")


@dataclass(frozen=True)
class Blob:
    """Leaf node holding one opaque byte stream."""

    root: StorageRoot
    path: RelPath = field(default_factory=RelPath)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def abspath(self) -> AbsPath:
        return AbsPath(self.root, self.path)

    @contextmanager
    def open(self, mode: str = "rb", encoding: str = DEFAULT_TEXT_ENCODING) -> Iterator[IO]:
        """Open the blob for the duration of a ``with`` block.

        The stream is closed on every exit path, including when the
        block raises.

        Args:
            mode: One of ``rb``, ``wb``, ``r`` or ``w``.
            encoding: Text encoding for ``r`` and ``w``.

        Yields:
            Binary or text stream.

        Raises:
            ValueError: For unsupported modes.
            ReadOnlyError: When writing to a read-only root.
        """
        if mode not in _OPEN_MODES:
            raise ValueError(f"Unsupported blob open mode '{mode}': expected one of {_OPEN_MODES}.")
        if "w" in mode:
            stream = self.root.open_write(self.path)
        else:
            stream = self.root.open_read(self.path)
        try:
            if "b" in mode:
                yield stream
            else:
                with io.TextIOWrapper(stream, encoding=encoding) as text_stream:
                    yield text_stream
        finally:
            stream.close()

    def read_bytes(self) -> bytes:
        with self.open("rb") as stream:
            return stream.read()

    def read_text(self, encoding: str = DEFAULT_TEXT_ENCODING) -> str:
        with self.open("r", encoding=encoding) as stream:
            return stream.read()

    def write_bytes(self, data: bytes) -> None:
        with self.open("wb") as stream:
            stream.write(data)

    def write_text(self, text: str, encoding: str = DEFAULT_TEXT_ENCODING) -> None:
        with self.open("w", encoding=encoding) as stream:
            stream.write(text)

    def remove(self) -> None:
        self.root.remove_node(self.path)

    def __str__(self) -> str:
        return f"{RENDER_BLOB_ICON} {self.path} @ {self.root.describe()}"


@dataclass(frozen=True)
class Tree:
    """Directory-like node whose children are listed lazily from its root."""

    root: StorageRoot
    path: RelPath = field(default_factory=RelPath)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def abspath(self) -> AbsPath:
        return AbsPath(self.root, self.path)

    def joinpath(self, extra: PathLike) -> AbsPath:
        """Build a child path without checking that it exists."""
        return AbsPath(self.root, join(self.path, extra))

    def listdir(self) -> list[str]:
        return self.root.list_names(self.path)

    def children(self) -> Iterator[Union["Tree", Blob, AbsPath]]:
        """Yield each child node in the root's listing order.

        The number of children is not known in advance; each name is
        classified only when the iterator reaches it.
        """
        for name in self.root.list_names(self.path):
            yield index(self, name)

    def mkdir(self, name: PathLike) -> "Tree":
        """Create a child directory and return it as a tree.

        Raises:
            ReadOnlyError: If the root is not writeable.
        """
        child_path = join(self.path, name)
        self.root.make_directory(child_path)
        return Tree(self.root, child_path)

    def remove(self, recursive: bool = True) -> None:
        self.root.remove_node(self.path, recursive=recursive)

    def __getitem__(self, key: PathLike) -> Union["Tree", Blob, AbsPath]:
        return index(self, key)

    def __contains__(self, key: PathLike) -> bool:
        return self.root.path_exists(join(self.path, key))

    def __iter__(self) -> Iterator[Union["Tree", Blob, AbsPath]]:
        return self.children()

    def __str__(self) -> str:
        return f"{RENDER_TREE_ICON} {self.path or '.'} @ {self.root.describe()}"


Node = Union[Tree, Blob]


def classify(root: StorageRoot, path: RelPath) -> NodeKind:
    """Ask the root what kind of node lives at ``path``.

    Directory wins over file; anything else that exists is ``other``.
    """
    if root.is_directory(path):
        return "tree"
    if root.is_file(path):
        return "blob"
    if root.path_exists(path):
        return "other"
    return "not_found"


def index(tree: Tree, key: PathLike) -> Union[Tree, Blob, AbsPath]:
    """Resolve a child of ``tree`` into a node.

    Args:
        tree: Parent tree.
        key: Child name or relative path.

    Returns:
        ``Tree`` or ``Blob`` for classified nodes, ``AbsPath`` for other
        existing entries.

    Raises:
        NotFoundError: If nothing exists at the joined path.
        InvalidPathError: If ``key`` is a malformed name.
    """
    child_path = join(tree.path, key)
    kind = classify(tree.root, child_path)
    if kind == "tree":
        return Tree(tree.root, child_path)
    if kind == "blob":
        return Blob(tree.root, child_path)
    if kind == "other":
        return AbsPath(tree.root, child_path)
    raise NotFoundError(f"Path '{child_path}' does not exist in root {tree.root.describe()}.")

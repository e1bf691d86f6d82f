"""Unit tests for tree/blob classification and indexing."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from core.errors import InvalidPathError, NotFoundError, ReadOnlyError
from core.paths import AbsPath, RelPath
from store.filesystem_root import FileSystemRoot
from tree.node import Blob, Tree, classify, index


def test_classify_detects_tree_blob_and_missing(sample_dir: Path) -> None:
    """Classification should follow directory, file, missing priority."""
    root = FileSystemRoot(sample_dir)

    kinds = [
        classify(root, RelPath()),
        classify(root, RelPath(("1.csv",))),
        classify(root, RelPath(("missing",))),
    ]

    assert kinds == ["tree", "blob", "not_found"]


def test_classify_is_idempotent(sample_dir: Path) -> None:
    """Repeated classification without mutation should agree."""
    root = FileSystemRoot(sample_dir)
    path = RelPath(("nested",))

    assert classify(root, path) == classify(root, path) == "tree"


def test_classify_is_not_cached(sample_dir: Path) -> None:
    """Classification should reflect changes made after an earlier query."""
    root = FileSystemRoot(sample_dir)
    path = RelPath(("later",))
    before = classify(root, path)
    (sample_dir / "later").mkdir()

    after = classify(root, path)

    assert (before, after) == ("not_found", "tree")


def test_classify_reports_other_for_dangling_symlink(tmp_path: Path) -> None:
    """Existing entries that are neither file nor directory should be other."""
    os.symlink(tmp_path / "nowhere", tmp_path / "dangling")
    root = FileSystemRoot(tmp_path)

    node = index(Tree(root), "dangling")

    assert classify(root, RelPath(("dangling",))) == "other"
    assert isinstance(node, AbsPath)


def test_index_returns_typed_nodes(sample_dir: Path) -> None:
    """Indexing should build Tree and Blob nodes from the root's answers."""
    tree = Tree(FileSystemRoot(sample_dir))

    nested = tree["nested"]
    leaf = tree[RelPath.parse("nested/deeper/leaf.bin")]

    assert isinstance(nested, Tree) and nested.path == RelPath(("nested",))
    assert isinstance(leaf, Blob) and leaf.name == "leaf.bin"


def test_index_missing_name_raises_not_found(sample_dir: Path) -> None:
    """Indexing a missing child should fail rather than return a node."""
    tree = Tree(FileSystemRoot(sample_dir))

    with pytest.raises(NotFoundError):
        tree["does-not-exist.csv"]


def test_index_rejects_names_with_separator(sample_dir: Path) -> None:
    """Names containing a separator should be rejected before any lookup."""
    tree = Tree(FileSystemRoot(sample_dir))

    with pytest.raises(InvalidPathError):
        tree["nested/inner.txt"]


def test_children_lists_every_entry(sample_dir: Path) -> None:
    """Children should cover exactly the listed names."""
    tree = Tree(FileSystemRoot(sample_dir))

    names = {child.name for child in tree.children()}

    assert names == {"1.csv", "2.csv", "nested"}


def test_children_is_lazy(sample_dir: Path) -> None:
    """Children should be a generator, not a precomputed list."""
    tree = Tree(FileSystemRoot(sample_dir))

    children = tree.children()

    assert not isinstance(children, list)
    assert next(children).name in {"1.csv", "2.csv", "nested"}


def test_contains_and_joinpath(sample_dir: Path) -> None:
    """Membership should test existence while joinpath never does."""
    tree = Tree(FileSystemRoot(sample_dir))

    missing = tree.joinpath("ghost")

    assert "1.csv" in tree and "ghost" not in tree
    assert isinstance(missing, AbsPath) and missing.path == RelPath(("ghost",))


def test_blob_reads_text_and_bytes(sample_dir: Path) -> None:
    """Blob helpers should return the stored bytes and text."""
    tree = Tree(FileSystemRoot(sample_dir))
    blob = tree[RelPath.parse("nested/inner.txt")]

    assert isinstance(blob, Blob)
    assert blob.read_text() == "inner\n" and blob.read_bytes() == b"inner\n"


def test_blob_open_closes_stream_when_body_raises(sample_dir: Path) -> None:
    """The stream should be closed even if the with-block fails."""
    blob = Blob(FileSystemRoot(sample_dir), RelPath(("1.csv",)))
    opened = []

    with pytest.raises(RuntimeError):
        with blob.open("rb") as stream:
            opened.append(stream)
            raise RuntimeError("boom")

    assert opened[0].closed


def test_blob_open_rejects_unknown_mode(sample_dir: Path) -> None:
    """Unsupported open modes should raise ValueError."""
    blob = Blob(FileSystemRoot(sample_dir), RelPath(("1.csv",)))

    with pytest.raises(ValueError):
        with blob.open("a"):
            pass


def test_writes_on_read_only_root_fail_closed(sample_dir: Path) -> None:
    """Every mutation on a read-only root should raise ReadOnlyError."""
    tree = Tree(FileSystemRoot(sample_dir))
    blob = Blob(tree.root, RelPath(("1.csv",)))

    with pytest.raises(ReadOnlyError):
        blob.write_text("changed")
    with pytest.raises(ReadOnlyError):
        tree.mkdir("new")
    with pytest.raises(ReadOnlyError):
        blob.remove()

    assert (sample_dir / "1.csv").read_bytes() == b"a,b\n1,2\n"


def test_mkdir_and_write_on_writeable_root(writeable_dir: Path) -> None:
    """Writeable roots should allow creating directories and blobs."""
    tree = Tree(FileSystemRoot(writeable_dir, write=True))

    subtree = tree.mkdir("sub")
    Blob(tree.root, subtree.joinpath("note.txt").path).write_text("hi")

    assert (writeable_dir / "sub" / "note.txt").read_text(encoding="utf-8") == "hi"

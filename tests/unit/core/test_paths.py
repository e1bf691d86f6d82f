"""Unit tests for the relative/absolute path model."""

from __future__ import annotations

import pytest

from core.errors import InvalidPathError
from core.paths import AbsPath, RelPath, components, join
from store.filesystem_root import FileSystemRoot


def test_join_with_empty_path_is_identity() -> None:
    """Empty path should be the identity element on both sides of join."""
    path = RelPath(("a", "b"))

    assert join(path, RelPath()) == path and join(RelPath(), path) == path


def test_join_appends_single_name() -> None:
    """Joining a name should append exactly one component."""
    path = join(RelPath(("data",)), "1.csv")

    assert components(path) == ("data", "1.csv")


def test_join_concatenates_paths() -> None:
    """Joining two paths should concatenate their components."""
    path = RelPath(("a",)).join(RelPath(("b", "c")), "d")

    assert path == RelPath(("a", "b", "c", "d"))


@pytest.mark.parametrize("bad_name", ["", ".", "..", "a/b"])
def test_join_rejects_malformed_names(bad_name: str) -> None:
    """Malformed component names should raise InvalidPathError."""
    with pytest.raises(InvalidPathError):
        join(RelPath(), bad_name)


def test_constructor_rejects_plain_string() -> None:
    """A bare string must not be split into characters silently."""
    with pytest.raises(InvalidPathError):
        RelPath("abc")  # type: ignore[arg-type]


def test_parse_drops_empty_segments() -> None:
    """Parsing should ignore leading, trailing and repeated separators."""
    path = RelPath.parse("/a//b/")

    assert path.components == ("a", "b")


def test_ordering_is_componentwise() -> None:
    """Paths should sort by comparing components pairwise."""
    paths = [RelPath(("b",)), RelPath(("a", "z")), RelPath(("a",))]

    assert sorted(paths) == [RelPath(("a",)), RelPath(("a", "z")), RelPath(("b",))]


def test_name_parent_and_root_properties() -> None:
    """Accessors should expose last component, parent and root flag."""
    path = RelPath.parse("x/y/z")

    assert path.name == "z"
    assert path.parent == RelPath.parse("x/y")
    assert RelPath().is_root and RelPath().name == ""
    assert str(path) == "x/y/z"


def test_abspath_join_keeps_root(tmp_path) -> None:
    """AbsPath join should keep the root and extend the relative path."""
    root = FileSystemRoot(tmp_path)
    base = AbsPath(root, RelPath(("a",)))

    joined = base.join("b")

    assert joined.root is root and joined.path == RelPath(("a", "b")) and joined.name == "b"

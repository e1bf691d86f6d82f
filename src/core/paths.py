"""Relative and absolute path model.

This module names nodes independently of any backing store.
A RelPath is a validated component tuple; an AbsPath binds it to a root.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterator, Union

from core.errors import InvalidPathError

if TYPE_CHECKING:
    from store.root import StorageRoot

_SEPARATORS = tuple({"/", os.sep} | ({os.altsep} if os.altsep else set()))
_RESERVED_COMPONENTS = ("", ".", "..")


@dataclass(frozen=True, order=True)
class RelPath:
    """Immutable path relative to a storage root.

    The empty path denotes the root itself. Equality and ordering
    compare components pairwise.

    Attributes:
        components: Validated path components.
    """

    components: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if isinstance(self.components, str):
            raise InvalidPathError(
                f"Invalid path components {self.components!r}: expected a sequence of names. "
                "Use RelPath.parse for '/'-separated strings."
            )
        components = tuple(self.components)
        for component in components:
            _validate_component(component)
        object.__setattr__(self, "components", components)

    @classmethod
    def parse(cls, text: str) -> "RelPath":
        """Build a path from a ``/``-separated string.

        Args:
            text: String such as ``"a/b/c"``. Empty segments are dropped.

        Returns:
            Parsed relative path.

        Raises:
            InvalidPathError: If any segment is ``.`` or ``..``.
        """
        return cls(tuple(part for part in text.split("/") if part))

    @property
    def name(self) -> str:
        """Last component, or an empty string for the root path."""
        return self.components[-1] if self.components else ""

    @property
    def parent(self) -> "RelPath":
        """Path without its last component; the root is its own parent."""
        return RelPath(self.components[:-1])

    @property
    def is_root(self) -> bool:
        return not self.components

    def join(self, *parts: "RelPath | str") -> "RelPath":
        """Return this path extended with further paths or names."""
        result = self
        for part in parts:
            result = join(result, part)
        return result

    def __len__(self) -> int:
        return len(self.components)

    def __iter__(self) -> Iterator[str]:
        return iter(self.components)

    def __str__(self) -> str:
        return "/".join(self.components)


PathLike = Union[RelPath, str]


@dataclass(frozen=True)
class AbsPath:
    """A relative path bound to one storage root.

    Existence is not implied; use the root predicates to check.

    Attributes:
        root: Storage root the path lives under.
        path: Location relative to the root.
    """

    root: "StorageRoot"
    path: RelPath

    @property
    def name(self) -> str:
        return self.path.name

    def join(self, extra: PathLike) -> "AbsPath":
        return AbsPath(self.root, join(self.path, extra))

    def __str__(self) -> str:
        return f"{self.path} @ {self.root.describe()}"


def join(base: RelPath, extra: PathLike) -> RelPath:
    """Concatenate a path with another path or a single component name.

    Args:
        base: Leading path.
        extra: Trailing ``RelPath`` or one component name.

    Returns:
        Combined path.

    Raises:
        InvalidPathError: If ``extra`` is a malformed component.
    """
    if isinstance(extra, RelPath):
        return RelPath(base.components + extra.components)
    _validate_component(extra)
    return RelPath(base.components + (extra,))


def components(path: RelPath) -> tuple[str, ...]:
    """Return the component names of a relative path."""
    return path.components


def _validate_component(component: object) -> None:
    """Reject components that cannot name a single child.

    Args:
        component: Candidate component value.

    Raises:
        InvalidPathError: If the component is not a plain child name.
    """
    if not isinstance(component, str):
        raise InvalidPathError(
            f"Invalid path component {component!r}: expected a string name."
        )
    if component in _RESERVED_COMPONENTS:
        raise InvalidPathError(
            f"Invalid path component {component!r}: empty, '.' and '..' are not allowed."
        )
    if any(separator in component for separator in _SEPARATORS):
        raise InvalidPathError(
            f"Invalid path component {component!r}: names must not contain a path separator. "
            "Use RelPath.parse for '/'-separated strings."
        )

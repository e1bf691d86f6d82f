"""Plain-text rendering of trees in the spirit of the unix ``tree`` tool."""

from __future__ import annotations

from typing import Iterator, TypeVar, Union

from core.constants import (
    DEFAULT_RENDER_MAX_DEPTH,
    RENDER_BLOB_ICON,
    RENDER_ELIDED_MARKER,
    RENDER_TREE_ICON,
)
from tree.node import Blob, Tree

_Item = TypeVar("_Item")


def render_tree(node: Union[Tree, Blob], max_depth: int = DEFAULT_RENDER_MAX_DEPTH) -> str:
    """Render a node and its descendants as an indented listing.

    Args:
        node: Tree or blob to render.
        max_depth: Number of directory levels to expand; deeper subtrees
            are replaced with an elision marker.

    Returns:
        Multi-line listing without a trailing newline.

    Raises:
        ValueError: If ``max_depth`` is below 1.
    """
    if max_depth < 1:
        raise ValueError(f"max_depth must be at least 1, got {max_depth}.")
    lines = [str(node)]
    if isinstance(node, Tree):
        _render_children(node, "", max_depth, lines)
    return "\n".join(lines)


def _render_children(tree: Tree, prefix: str, depth: int, lines: list[str]) -> None:
    for child, is_last in _mark_last(tree.children()):
        branch = prefix + ("└──" if is_last else "├──")
        continuation = prefix + ("   " if is_last else "│  ")
        if isinstance(child, Tree):
            lines.append(f"{branch} {RENDER_TREE_ICON} {child.name}")
            if depth > 1:
                _render_children(child, continuation, depth - 1, lines)
            else:
                lines.append(f"{continuation}{RENDER_ELIDED_MARKER}")
        elif isinstance(child, Blob):
            lines.append(f"{branch} {RENDER_BLOB_ICON} {child.name}")
        else:
            lines.append(f"{branch} {child.name}")


def _mark_last(items: Iterator[_Item]) -> Iterator[tuple[_Item, bool]]:
    """Pair each item with whether it is the final one, using one-item lookahead."""
    iterator = iter(items)
    try:
        previous = next(iterator)
    except StopIteration:
        return
    for item in iterator:
        yield previous, False
        previous = item
    yield previous, True

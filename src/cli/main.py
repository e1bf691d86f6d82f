"""Blobtree CLI entry points.
This module exposes commands for inspecting, copying and publishing trees.
It maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from functools import partial
import os
from pathlib import Path
import shutil
from typing import Any, Sequence

from core.config import BlobTreeConfig
from core.errors import BlobTreeError, InvalidTargetError
from core.paths import RelPath
from store.filesystem_root import FileSystemRoot
from store.temp_storage import sweep_orphans, temp_dir, temp_file
from store.transfer import transfer_into
from tree.node import Blob, Tree
from tree.render import render_tree
from tree.traversal import copy_into, walk


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="blobtree", description="Blobtree storage CLI")
    parser.add_argument("--temp-dir", help="Override BLOBTREE_TEMP_DIR for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_show_command(subparsers)
    _add_copy_command(subparsers)
    _add_publish_command(subparsers)
    _add_sweep_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the blobtree CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args.temp_dir)
    try:
        if args.command == "show":
            return _run_show_command(config, args)
        if args.command == "copy":
            return _run_copy_command(args)
        if args.command == "publish":
            return _run_publish_command(args)
        if args.command == "sweep":
            return _run_sweep_command(config, args)
    except BlobTreeError as error:
        print(f"error={error}")
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(temp_dir_override: str | None) -> BlobTreeConfig:
    """Build runtime config with optional temp-dir override."""
    config = BlobTreeConfig.from_env()
    if temp_dir_override:
        config = replace(config, temp_dir=Path(temp_dir_override).expanduser().resolve())
    return config


def _run_show_command(config: BlobTreeConfig, args: argparse.Namespace) -> int:
    """Handle show command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    root = FileSystemRoot(args.path)
    node: Tree | Blob = Blob(root) if os.path.isfile(args.path) else Tree(root)
    if args.flat:
        if isinstance(node, Tree):
            for descendant in walk(node):
                print(descendant.path)
        return 0
    max_depth = config.render_max_depth if args.max_depth is None else args.max_depth
    print(render_tree(node, max_depth=max_depth))
    return 0


def _run_copy_command(args: argparse.Namespace) -> int:
    """Handle copy command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    destination = Path(args.destination)
    _reject_nested_destination(args.source, destination)
    destination.mkdir(parents=True, exist_ok=True)
    copy_into(Tree(FileSystemRoot(destination, write=True)), Tree(FileSystemRoot(args.source)))
    print(destination.resolve())
    return 0


def _run_publish_command(args: argparse.Namespace) -> int:
    """Handle publish command.

    The source is staged in a temporary location inside the destination
    directory, then moved into place with rollback protection.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    destination_root = FileSystemRoot(args.destination, write=True)
    destination = Tree(destination_root)
    if os.path.isfile(args.source):
        with temp_file(destination, writer=partial(_copy_file, args.source)) as staged_blob:
            transfer_into(destination, args.name, staged_blob)
    else:
        _reject_nested_destination(args.source, Path(args.destination))
        with temp_dir(destination) as staged_tree:
            copy_into(staged_tree, Tree(FileSystemRoot(args.source)))
            transfer_into(destination, args.name, staged_tree)
    print(destination_root.native_path(RelPath((args.name,))))
    return 0


def _run_sweep_command(config: BlobTreeConfig, args: argparse.Namespace) -> int:
    """Handle sweep command.

    Args:
        config: Runtime config.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    max_age = config.sweep_max_age_seconds if args.max_age is None else args.max_age
    result = sweep_orphans(args.parent or config.temp_dir, max_age_seconds=max_age)
    for removed_path in result.removed:
        print(removed_path)
    print(f"removed={len(result.removed)}")
    return 0


def _reject_nested_destination(source: str, destination: Path) -> None:
    """Refuse destinations inside the source tree, which a copy would recurse into."""
    source_dir = Path(source).resolve()
    destination_dir = destination.resolve()
    if destination_dir == source_dir or source_dir in destination_dir.parents:
        raise InvalidTargetError(
            f"Destination {destination_dir} is inside source {source_dir}. "
            "Choose a destination outside the source directory."
        )


def _positive_int(raw_value: str) -> int:
    try:
        value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected an integer, got '{raw_value}'") from error
    if value < 1:
        raise argparse.ArgumentTypeError(f"expected at least 1, got {value}")
    return value


def _copy_file(source: str, stream: Any) -> None:
    with open(source, "rb") as source_stream:
        shutil.copyfileobj(source_stream, stream)


def _add_show_command(subparsers: Any) -> None:
    """Register show subcommand."""
    parser = subparsers.add_parser("show", help="Render a directory or file as a tree")
    parser.add_argument("path", help="Local file or directory")
    parser.add_argument("--max-depth", type=_positive_int, help="Directory levels to expand")
    parser.add_argument("--flat", action="store_true", help="Print one relative path per line")


def _add_copy_command(subparsers: Any) -> None:
    """Register copy subcommand."""
    parser = subparsers.add_parser("copy", help="Recursively copy a directory into another")
    parser.add_argument("source", help="Source directory")
    parser.add_argument("destination", help="Destination directory, created if missing")


def _add_publish_command(subparsers: Any) -> None:
    """Register publish subcommand."""
    parser = subparsers.add_parser(
        "publish",
        help="Replace DESTINATION/NAME with a copy of SOURCE, restoring it on failure",
    )
    parser.add_argument("source", help="Source file or directory")
    parser.add_argument("destination", help="Existing destination directory")
    parser.add_argument("name", help="Entry name inside the destination directory")


def _add_sweep_command(subparsers: Any) -> None:
    """Register sweep subcommand."""
    parser = subparsers.add_parser(
        "sweep",
        help="Remove orphaned temporary data left by crashed processes",
    )
    parser.add_argument("--parent", help="Directory to scan; defaults to the temp dir")
    parser.add_argument("--max-age", type=int, help="Minimum age in seconds to remove")

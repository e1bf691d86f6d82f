"""Unit tests for temporary storage allocation and orphan sweeping."""

from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO

import pytest

from core.constants import HOLDING_AREA_PREFIX, TEMP_DIR_PREFIX
from core.errors import ReadOnlyError, StorageIOError
from store.filesystem_root import FileSystemRoot, TempFileSystemRoot
from store.temp_storage import new_dir, new_file, sweep_orphans, temp_dir, temp_file
from tree.node import Blob, Tree


def test_new_dir_allocates_empty_directory_under_parent(tmp_path: Path) -> None:
    """New temp trees should be empty directories inside the parent."""
    tree = new_dir(tmp_path)
    root = tree.root

    assert isinstance(root, TempFileSystemRoot)
    assert root.location.parent == tmp_path and root.location.name.startswith(TEMP_DIR_PREFIX)
    assert tree.listdir() == []


def test_new_dir_defaults_to_configured_temp_dir(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """Without a parent the configured temp directory should be used."""
    monkeypatch.setenv("BLOBTREE_TEMP_DIR", str(tmp_path))

    tree = new_dir()

    assert isinstance(tree.root, TempFileSystemRoot) and tree.root.location.parent == tmp_path


def test_new_dir_in_read_only_parent_fails(tmp_path: Path) -> None:
    """Allocating inside a read-only root should fail closed."""
    with pytest.raises(ReadOnlyError):
        new_dir(Tree(FileSystemRoot(tmp_path)))

    assert os.listdir(tmp_path) == []


def test_new_file_runs_writer(tmp_path: Path) -> None:
    """The writer callback should fill the new temporary file."""

    def writer(stream: BinaryIO) -> None:
        stream.write(b"payload")

    blob = new_file(tmp_path, writer=writer)

    assert isinstance(blob, Blob) and blob.read_bytes() == b"payload"


def test_new_file_removes_file_when_writer_fails(tmp_path: Path) -> None:
    """A failing writer should leave nothing behind and propagate."""

    def writer(stream: BinaryIO) -> None:
        stream.write(b"partial")
        raise RuntimeError("writer failed")

    with pytest.raises(RuntimeError):
        new_file(tmp_path, writer=writer)

    assert os.listdir(tmp_path) == []


def test_temp_dir_scope_removes_untransferred_data(tmp_path: Path) -> None:
    """Leaving the scope should delete the temporary directory."""
    with temp_dir(tmp_path) as tree:
        Blob(tree.root, tree.joinpath("a.txt").path).write_text("a")
        location = tree.root.location  # type: ignore[attr-defined]

    assert not location.exists()


def test_temp_file_scope_removes_file_on_error(tmp_path: Path) -> None:
    """The scoped blob should be removed even when the block raises."""
    with pytest.raises(RuntimeError):
        with temp_file(tmp_path):
            raise RuntimeError("boom")

    assert os.listdir(tmp_path) == []


def test_sweep_removes_only_stale_prefixed_entries(tmp_path: Path) -> None:
    """Sweeping should delete old prefixed entries and keep everything else."""
    stale_dir = tmp_path / f"{TEMP_DIR_PREFIX}old"
    stale_dir.mkdir()
    (stale_dir / "data.bin").write_bytes(b"x")
    stale_hold = tmp_path / f"{HOLDING_AREA_PREFIX}old"
    stale_hold.mkdir()
    fresh_dir = tmp_path / f"{TEMP_DIR_PREFIX}fresh"
    fresh_dir.mkdir()
    unrelated = tmp_path / "user-data"
    unrelated.mkdir()
    os.utime(stale_dir, (1_000, 1_000))
    os.utime(stale_hold, (1_000, 1_000))
    os.utime(unrelated, (1_000, 1_000))
    now = fresh_dir.stat().st_mtime

    result = sweep_orphans(tmp_path, max_age_seconds=3600, now=now)

    assert set(result.removed) == {stale_dir, stale_hold}
    assert fresh_dir.exists() and unrelated.exists()


def test_allocation_in_missing_parent_raises_storage_error(tmp_path: Path) -> None:
    """A missing parent directory should be reported as StorageIOError."""
    missing = tmp_path / "missing"

    with pytest.raises(StorageIOError) as excinfo:
        new_file(missing)
    with pytest.raises(StorageIOError):
        new_dir(missing)

    assert "missing" in str(excinfo.value) and not missing.exists()

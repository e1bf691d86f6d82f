"""Pytest configuration and shared fixtures for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture
def sample_dir(tmp_path: Path) -> Path:
    """Directory with two CSV files and a nested directory."""
    root_dir = tmp_path / "sample"
    (root_dir / "nested" / "deeper").mkdir(parents=True)
    (root_dir / "1.csv").write_bytes(b"a,b\n1,2\n")
    (root_dir / "2.csv").write_bytes(b"a,b\n3,4\n")
    (root_dir / "nested" / "inner.txt").write_text("inner\n", encoding="utf-8")
    (root_dir / "nested" / "deeper" / "leaf.bin").write_bytes(b"\x00\x01\x02")
    return root_dir


@pytest.fixture
def writeable_dir(tmp_path: Path) -> Path:
    """Empty directory for use as a writeable permanent root."""
    target = tmp_path / "permanent"
    target.mkdir()
    return target

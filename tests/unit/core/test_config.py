"""Unit tests for core config parsing."""

from __future__ import annotations

import os

import pytest

from core.config import BlobTreeConfig
from core.constants import DEFAULT_RENDER_MAX_DEPTH
from core.errors import ConfigError


def test_from_env_reads_temp_dir(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should resolve temp dir from environment."""
    monkeypatch.setenv("BLOBTREE_TEMP_DIR", "./.tmp-blobtree")

    config = BlobTreeConfig.from_env()

    assert config.temp_dir.name == ".tmp-blobtree" and config.temp_dir.is_absolute()


def test_from_env_uses_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fall back to defaults when variables are unset."""
    monkeypatch.delenv("BLOBTREE_RENDER_MAX_DEPTH", raising=False)
    monkeypatch.delenv("BLOBTREE_S3_REGION", raising=False)

    config = BlobTreeConfig.from_env()

    assert config.render_max_depth == DEFAULT_RENDER_MAX_DEPTH and config.s3_region is None


def test_from_env_raises_for_invalid_depth(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should fail for non-numeric render depth."""
    monkeypatch.setenv("BLOBTREE_RENDER_MAX_DEPTH", "deep")

    with pytest.raises(ConfigError):
        BlobTreeConfig.from_env()

    assert os.getenv("BLOBTREE_RENDER_MAX_DEPTH") == "deep"


def test_from_env_raises_for_negative_sweep_age(monkeypatch: pytest.MonkeyPatch) -> None:
    """Config should reject ages below zero."""
    monkeypatch.setenv("BLOBTREE_SWEEP_MAX_AGE", "-1")

    with pytest.raises(ConfigError):
        BlobTreeConfig.from_env()

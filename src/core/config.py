"""Runtime configuration model for blobtree.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
import tempfile

from core.constants import DEFAULT_RENDER_MAX_DEPTH, DEFAULT_SWEEP_MAX_AGE_SECONDS
from core.errors import ConfigError


@dataclass(frozen=True)
class BlobTreeConfig:
    """Validated runtime configuration.

    Attributes:
        temp_dir: Parent directory for temporary trees and blobs.
        render_max_depth: Default depth bound for tree rendering.
        sweep_max_age_seconds: Age after which orphaned temp data is swept.
        s3_region: Optional default AWS region for S3 roots.
        s3_profile: Optional AWS profile for boto3 session initialization.
    """

    temp_dir: Path
    render_max_depth: int
    sweep_max_age_seconds: int
    s3_region: str | None
    s3_profile: str | None

    @classmethod
    def from_env(cls) -> "BlobTreeConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            ConfigError: If environment values are invalid.
        """
        temp_dir_value = os.getenv("BLOBTREE_TEMP_DIR", tempfile.gettempdir())
        render_max_depth = _parse_int(
            "BLOBTREE_RENDER_MAX_DEPTH",
            os.getenv("BLOBTREE_RENDER_MAX_DEPTH", str(DEFAULT_RENDER_MAX_DEPTH)),
            minimum=1,
        )
        sweep_max_age_seconds = _parse_int(
            "BLOBTREE_SWEEP_MAX_AGE",
            os.getenv("BLOBTREE_SWEEP_MAX_AGE", str(DEFAULT_SWEEP_MAX_AGE_SECONDS)),
            minimum=0,
        )
        return cls(
            temp_dir=Path(temp_dir_value).expanduser().resolve(),
            render_max_depth=render_max_depth,
            sweep_max_age_seconds=sweep_max_age_seconds,
            s3_region=os.getenv("BLOBTREE_S3_REGION"),
            s3_profile=os.getenv("BLOBTREE_S3_PROFILE"),
        )


def _parse_int(variable: str, raw_value: str, minimum: int) -> int:
    """Parse a bounded integer environment value.

    Args:
        variable: Environment variable name, for error messages.
        raw_value: Raw string from environment.
        minimum: Smallest accepted value.

    Returns:
        Parsed integer.

    Raises:
        ConfigError: If value is not an integer or is below ``minimum``.
    """
    try:
        value = int(raw_value)
    except ValueError as error:
        raise ConfigError(
            f"Invalid {variable} value: expected integer, got '{raw_value}'. "
            f"Set {variable} to a numeric value."
        ) from error
    if value < minimum:
        raise ConfigError(
            f"Invalid {variable} value: expected at least {minimum}, got {value}."
        )
    return value

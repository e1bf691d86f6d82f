"""Shared typed models.

This module defines immutable models used by the path, tree, and
store layers to keep state transitions explicit and observable.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal, Union

NodeKind = Literal["tree", "blob", "other", "not_found"]
MoveState = Literal["idle", "holding_old", "committed", "rolled_back", "unrecoverable"]


@dataclass(frozen=True)
class Active:
    """Temporary root state while it still owns its on-disk location.

    Attributes:
        location: Native path of the owned directory or file.
    """

    location: Path


@dataclass(frozen=True)
class Consumed:
    """Temporary root state after its location was transferred or removed.

    Attributes:
        moved_to: Destination the data was moved to, or ``None`` when the
            location was deleted instead.
    """

    moved_to: Path | None


TempRootState = Union[Active, Consumed]


@dataclass(frozen=True)
class SweepResult:
    """Outcome of an orphaned temporary location sweep.

    Attributes:
        parent: Directory that was scanned.
        removed: Paths that were deleted.
    """

    parent: Path
    removed: tuple[Path, ...]

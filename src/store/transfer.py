"""Move-with-rollback and ownership transfer of temporary data.

This module commits a temporary tree or blob into a permanent tree. The
native filesystem has no multi-step transactions, so any existing data at
the destination is first moved into a holding area and restored if the
move of the new data fails.
"""

from __future__ import annotations

import os
from pathlib import Path
import shutil
import tempfile
from typing import Callable, Union

from core.constants import HOLDING_AREA_PREFIX
from core.errors import (
    AlreadyMovedError,
    InvalidTargetError,
    ReadOnlyError,
    RollbackError,
)
from core.logging_config import get_logger
from core.paths import join
from core.types import MoveState
from store.filesystem_root import LocalRoot, TempFileSystemRoot, force_remove, storage_error
from tree.node import Blob, Tree

_LOGGER = get_logger(__name__)

Mover = Callable[[str, str], object]


class RollbackMove:
    """One move of ``source`` onto ``destination`` that protects old data.

    States progress ``idle`` -> ``holding_old`` (only when the destination
    existed) -> ``committed``, ``rolled_back`` or ``unrecoverable``. A crash
    between steps can leave the holding area behind; ``sweep_orphans``
    removes such leftovers.
    """

    def __init__(
        self,
        source: Path,
        destination: Path,
        scratch_parent: Path,
        mover: Mover = shutil.move,
    ) -> None:
        self.source = source
        self.destination = destination
        self.scratch_parent = scratch_parent
        self.state: MoveState = "idle"
        self.holding_area: Path | None = None
        self.held_path: Path | None = None
        self._mover = mover

    def run(self) -> MoveState:
        """Perform the move.

        Returns:
            ``committed`` on success.

        Raises:
            RollbackError: If the move failed and the old data could not be
                restored. It remains at ``held_path``.
            StorageIOError: If the old data could not be moved aside, or the
                move failed and the old data was restored.
        """
        if self.state != "idle":
            raise AlreadyMovedError(
                f"Move to {self.destination} already ran and ended in state '{self.state}'."
            )
        if os.path.lexists(self.destination):
            self._hold_existing()
        try:
            self._mover(str(self.source), str(self.destination))
        except Exception as error:
            self._roll_back(error)
            if isinstance(error, OSError):
                raise storage_error(
                    f"move {self.source} to", self.destination, error
                ) from error
            raise
        self.state = "committed"
        _LOGGER.info("move_committed", destination=str(self.destination))
        self._discard_holding_area()
        return self.state

    def _hold_existing(self) -> None:
        try:
            holding_area = Path(
                tempfile.mkdtemp(dir=self.scratch_parent, prefix=HOLDING_AREA_PREFIX)
            )
        except OSError as error:
            raise storage_error(
                "create a holding area in", self.scratch_parent, error
            ) from error
        held_path = holding_area / self.destination.name
        try:
            self._mover(str(self.destination), str(held_path))
        except Exception as error:
            holding_area.rmdir()
            if isinstance(error, OSError):
                raise storage_error("move aside", self.destination, error) from error
            raise
        self.holding_area = holding_area
        self.held_path = held_path
        self.state = "holding_old"
        _LOGGER.debug(
            "holding_area_created",
            destination=str(self.destination),
            held_path=str(held_path),
        )

    def _roll_back(self, error: Exception) -> None:
        """Put held data back at the destination after a failed move."""
        if self.held_path is None:
            self.state = "rolled_back"
            return
        try:
            # A failed cross-device move can leave a partial copy behind.
            if os.path.lexists(self.destination):
                force_remove(self.destination)
            self._mover(str(self.held_path), str(self.destination))
        except Exception as restore_error:
            self.state = "unrecoverable"
            _LOGGER.error(
                "move_unrecoverable",
                destination=str(self.destination),
                held_path=str(self.held_path),
                error=str(error),
                restore_error=str(restore_error),
            )
            raise RollbackError(self.destination, error, self.held_path) from restore_error
        self.state = "rolled_back"
        _LOGGER.warning("move_rolled_back", destination=str(self.destination), error=str(error))
        self._discard_holding_area()

    def _discard_holding_area(self) -> None:
        """Remove the holding area; leftovers are reclaimed by ``sweep_orphans``."""
        if self.holding_area is None:
            return
        try:
            shutil.rmtree(self.holding_area)
        except OSError as error:
            _LOGGER.warning(
                "holding_area_cleanup_failed",
                holding_area=str(self.holding_area),
                error=str(error),
            )


def move_with_rollback(
    source: Path,
    destination: Path,
    scratch_parent: Path,
    mover: Mover = shutil.move,
) -> MoveState:
    """Move ``source`` to ``destination``, restoring old data on failure.

    ``source`` is assumed to be temporary content that needs no protection.

    Args:
        source: Native path of the new data.
        destination: Native path to replace.
        scratch_parent: Directory for the holding area.
        mover: Function moving one native path to another.

    Returns:
        Final move state, ``committed`` on success.
    """
    return RollbackMove(source, destination, scratch_parent, mover).run()


def transfer_into(
    tree: Tree,
    name: str,
    tmpdata: Union[Tree, Blob],
    mover: Mover = shutil.move,
) -> Tree:
    """Promote temporary data to ``tree[name]`` and consume its handle.

    The data is moved rather than copied. Afterwards ``tmpdata`` is
    unusable; open and transfer attempts raise ``AlreadyMovedError``.

    Args:
        tree: Destination tree; must be the top of a writeable filesystem root.
        name: Child name to store the data under. Existing content is replaced.
        tmpdata: Tree or blob at the top of a temporary root.
        mover: Function moving one native path to another.

    Returns:
        The destination tree.

    Raises:
        ReadOnlyError: If the destination root is read-only.
        AlreadyMovedError: If ``tmpdata`` was already transferred or cleaned up.
        InvalidTargetError: If either side is not at the top of its root, or
            the roots are of the wrong kind.
        RollbackError: If the move failed and the old data could not be restored.
    """
    if not tree.root.is_writeable():
        raise ReadOnlyError(f"Cannot move data into read-only tree {tree}.")
    source_root = tmpdata.root
    if not isinstance(source_root, TempFileSystemRoot):
        raise InvalidTargetError(
            f"Only temporary trees and blobs can be transferred, got {tmpdata}."
        )
    source = source_root.location
    if not tree.path.is_root:
        raise InvalidTargetError(
            f"Temporary data can only be moved into the top of a tree; got path '{tree.path}'."
        )
    if not tmpdata.path.is_root:
        raise InvalidTargetError(
            f"Temporary data must be moved in full; got sub-path '{tmpdata.path}'."
        )
    destination_root = tree.root
    if not isinstance(destination_root, LocalRoot):
        raise InvalidTargetError(
            f"Destination root {destination_root.describe()} is not filesystem-backed."
        )
    destination = destination_root.native_path(join(tree.path, name))
    scratch_parent = destination_root.native_path(tree.path)
    move_with_rollback(source, destination, scratch_parent, mover)
    source_root.consume(destination)
    _LOGGER.info(
        "ownership_transferred",
        source=str(source),
        destination=str(destination),
        kind="tree" if isinstance(tmpdata, Tree) else "blob",
    )
    return tree

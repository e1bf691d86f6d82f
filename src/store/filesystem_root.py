"""Storage roots backed by the local filesystem.

This module maps relative paths onto native locations for a permanent
root with fixed permissions and for temporary roots that own their
location until it is transferred away or cleaned up.
"""

from __future__ import annotations

from abc import abstractmethod
import os
from pathlib import Path
import shutil
from types import TracebackType
from typing import BinaryIO, cast
import weakref

from core.errors import AlreadyMovedError, StorageIOError
from core.logging_config import get_logger
from core.paths import RelPath
from core.types import Active, Consumed, TempRootState
from store.root import StorageRoot

_LOGGER = get_logger(__name__)


class LocalRoot(StorageRoot):
    """Shared native-filesystem behaviour for permanent and temporary roots."""

    @abstractmethod
    def base_location(self) -> Path:
        """Return the native location that ``RelPath()`` maps to."""

    def native_path(self, path: RelPath) -> Path:
        """Join the base location with the path components."""
        return self.base_location().joinpath(*path.components)

    def is_directory(self, path: RelPath) -> bool:
        return os.path.isdir(self.native_path(path))

    def is_file(self, path: RelPath) -> bool:
        return os.path.isfile(self.native_path(path))

    def path_exists(self, path: RelPath) -> bool:
        return os.path.lexists(self.native_path(path))

    def list_names(self, path: RelPath) -> list[str]:
        native = self.native_path(path)
        try:
            return os.listdir(native)
        except OSError as error:
            raise storage_error("list", native, error) from error

    def open_read(self, path: RelPath) -> BinaryIO:
        native = self.native_path(path)
        try:
            return cast(BinaryIO, open(native, "rb"))
        except OSError as error:
            raise storage_error("open for reading", native, error) from error

    def open_write(self, path: RelPath) -> BinaryIO:
        self.require_writeable("write", path)
        native = self.native_path(path)
        try:
            return cast(BinaryIO, open(native, "wb"))
        except OSError as error:
            raise storage_error("open for writing", native, error) from error

    def remove_node(self, path: RelPath, recursive: bool = False) -> None:
        self.require_writeable("remove", path)
        native = self.native_path(path)
        try:
            if native.is_dir() and not native.is_symlink():
                if recursive:
                    shutil.rmtree(native)
                else:
                    native.rmdir()
            else:
                native.unlink()
        except OSError as error:
            raise storage_error("remove", native, error) from error

    def make_directory(self, path: RelPath) -> None:
        self.require_writeable("create directory", path)
        native = self.native_path(path)
        try:
            native.mkdir()
        except OSError as error:
            raise storage_error("create directory", native, error) from error


class FileSystemRoot(LocalRoot):
    """Permanent root fixed to one native location.

    Read and write permissions are set at construction and never change.
    """

    def __init__(self, location: str | Path, read: bool = True, write: bool = False) -> None:
        self._location = Path(os.path.abspath(os.path.expanduser(str(location))))
        self._read = read
        self._write = write

    @property
    def location(self) -> Path:
        return self._location

    @property
    def readable(self) -> bool:
        return self._read

    def base_location(self) -> Path:
        return self._location

    def is_writeable(self) -> bool:
        return self._write

    def open_read(self, path: RelPath) -> BinaryIO:
        if not self._read:
            raise StorageIOError(
                f"Cannot read '{path}' from root {self.describe()}: reading is disabled."
            )
        return super().open_read(path)

    def describe(self) -> str:
        return str(self._location)

    def __repr__(self) -> str:
        return f"FileSystemRoot({str(self._location)!r}, read={self._read}, write={self._write})"


class TempFileSystemRoot(LocalRoot):
    """Root owning a freshly allocated temporary directory or file.

    The location is removed when the handle is cleaned up, when it leaves a
    ``with`` block, or (best-effort) when it is garbage collected. A transfer
    consumes the handle instead, handing the location to its new owner.
    """

    def __init__(self, location: str | Path) -> None:
        native = Path(location)
        self._state: TempRootState = Active(native)
        self._finalizer = weakref.finalize(self, _finalize_location, native)
        self._finalizer.atexit = False

    @property
    def state(self) -> TempRootState:
        return self._state

    @property
    def consumed(self) -> bool:
        return isinstance(self._state, Consumed)

    @property
    def location(self) -> Path:
        """Owned native location.

        Raises:
            AlreadyMovedError: If the handle was consumed.
        """
        state = self._state
        if isinstance(state, Consumed):
            raise AlreadyMovedError(_consumed_message(state))
        return state.location

    def base_location(self) -> Path:
        return self.location

    def is_writeable(self) -> bool:
        return True

    def is_directory(self, path: RelPath) -> bool:
        return not self.consumed and super().is_directory(path)

    def is_file(self, path: RelPath) -> bool:
        return not self.consumed and super().is_file(path)

    def path_exists(self, path: RelPath) -> bool:
        return not self.consumed and super().path_exists(path)

    def list_names(self, path: RelPath) -> list[str]:
        if self.consumed:
            return []
        return super().list_names(path)

    def consume(self, moved_to: Path | None) -> None:
        """Give up ownership of the location.

        Args:
            moved_to: New home of the data, or ``None`` if it was deleted.

        Raises:
            AlreadyMovedError: If the handle was already consumed.
        """
        state = self._state
        if isinstance(state, Consumed):
            raise AlreadyMovedError(_consumed_message(state))
        self._finalizer.detach()
        self._state = Consumed(moved_to)

    def cleanup(self) -> None:
        """Delete the owned location now. A consumed handle is left alone."""
        state = self._state
        if isinstance(state, Consumed):
            return
        try:
            force_remove(state.location)
        except OSError as error:
            raise storage_error("remove temporary location", state.location, error) from error
        self.consume(None)
        _LOGGER.info("temp_root_cleaned", location=str(state.location))

    def describe(self) -> str:
        state = self._state
        if isinstance(state, Consumed):
            return "<consumed temporary root>"
        return str(state.location)

    def __enter__(self) -> "TempFileSystemRoot":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.cleanup()

    def __repr__(self) -> str:
        return f"TempFileSystemRoot({self._state!r})"


def force_remove(location: Path) -> None:
    """Remove a file, symlink, or directory tree if it exists."""
    if location.is_dir() and not location.is_symlink():
        shutil.rmtree(location)
    elif os.path.lexists(location):
        location.unlink()


def _finalize_location(location: Path) -> None:
    """Best-effort removal of a temporary location nobody owns anymore."""
    try:
        force_remove(location)
    except OSError as error:
        _LOGGER.warning("temp_cleanup_failed", location=str(location), error=str(error))
        return
    _LOGGER.info("temp_root_finalized", location=str(location))


def _consumed_message(state: Consumed) -> str:
    if state.moved_to is None:
        return "Temporary data was already cleaned up and can no longer be used."
    return (
        f"Temporary data was already moved to {state.moved_to}. "
        "Open the destination tree to access it."
    )


def storage_error(action: str, native: Path, error: OSError) -> StorageIOError:
    """Wrap a native failure with the path that was being operated on."""
    wrapped = StorageIOError(f"Failed to {action} {native}: {error.strerror or error}")
    wrapped.errno = error.errno
    return wrapped

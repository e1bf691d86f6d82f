"""Storage driver registry.

This module maps driver names to connect functions. A registry is an
explicit object built once at startup and handed to whatever resolves
dataset configuration, rather than module-level mutable state.
"""

from __future__ import annotations

import os
from typing import Any, Callable, Mapping, TypeVar, Union

from core.config import BlobTreeConfig
from core.constants import (
    BLOB_TYPE_NAME,
    FILESYSTEM_DRIVER_NAME,
    S3_DRIVER_NAME,
    TREE_TYPE_NAME,
)
from core.errors import DriverConfigError
from core.logging_config import get_logger
from core.paths import RelPath
from store.filesystem_root import FileSystemRoot
from store.s3_root import S3Root, parse_s3_uri
from tree.node import Blob, Tree

_LOGGER = get_logger(__name__)

_Result = TypeVar("_Result")
Continuation = Callable[[Union[Tree, Blob]], Any]
ConnectFunction = Callable[[Continuation, Mapping[str, Any]], Any]


class DriverRegistry:
    """Name to connect-function table for storage drivers."""

    def __init__(self) -> None:
        self._drivers: dict[str, ConnectFunction] = {}

    def register(self, name: str, connect: ConnectFunction) -> None:
        """Register or replace a driver.

        Args:
            name: Driver name used in dataset config.
            connect: Function called as ``connect(continuation, config)``.
        """
        self._drivers[name] = connect

    def names(self) -> list[str]:
        return sorted(self._drivers)

    def connect(
        self,
        name: str,
        config: Mapping[str, Any],
        continuation: Callable[[Union[Tree, Blob]], _Result],
    ) -> _Result:
        """Open storage with a named driver and pass it to ``continuation``.

        The opened node is only valid inside the continuation.

        Raises:
            DriverConfigError: If the driver is unknown or rejects the config.
        """
        connect = self._drivers.get(name)
        if connect is None:
            raise DriverConfigError(
                f"Unknown storage driver '{name}'. Registered drivers: {', '.join(self.names()) or 'none'}."
            )
        _LOGGER.debug("driver_connected", driver=name, dataset_type=config.get("type"))
        return connect(continuation, config)


def build_default_registry(config: BlobTreeConfig | None = None) -> DriverRegistry:
    """Create a registry holding the built-in filesystem and S3 drivers."""
    runtime_config = config or BlobTreeConfig.from_env()
    registry = DriverRegistry()
    registry.register(FILESYSTEM_DRIVER_NAME, connect_filesystem)
    registry.register(
        S3_DRIVER_NAME,
        lambda continuation, driver_config: connect_s3(
            continuation, driver_config, runtime_config
        ),
    )
    return registry


def connect_filesystem(continuation: Continuation, config: Mapping[str, Any]) -> Any:
    """Connect a local file or directory declared in dataset config.

    Args:
        continuation: Receives the Blob or Tree.
        config: Mapping with ``path``, ``type`` (``Blob`` or ``BlobTree``)
            and optional boolean ``writeable``.

    Returns:
        Whatever ``continuation`` returns.

    Raises:
        DriverConfigError: If keys are missing or the path does not match
            the declared type.
    """
    path = _require_key(config, "path")
    dataset_type = _require_key(config, "type")
    root = FileSystemRoot(path, write=bool(config.get("writeable", False)))
    if dataset_type == BLOB_TYPE_NAME:
        if not os.path.isfile(path):
            raise DriverConfigError(f"{path!r} should be a file for dataset type {BLOB_TYPE_NAME}.")
        return continuation(Blob(root))
    if dataset_type == TREE_TYPE_NAME:
        if not os.path.isdir(path):
            raise DriverConfigError(f"{path!r} should be a directory for dataset type {TREE_TYPE_NAME}.")
        return continuation(Tree(root))
    raise DriverConfigError(f"Dataset type {dataset_type!r} is not supported on the filesystem.")


def connect_s3(
    continuation: Continuation,
    config: Mapping[str, Any],
    runtime_config: BlobTreeConfig,
    client: Any | None = None,
) -> Any:
    """Connect an S3 object or prefix declared in dataset config.

    Args:
        continuation: Receives the Blob or Tree.
        config: Mapping with ``path`` (``s3://bucket/prefix``) and ``type``.
        runtime_config: Session settings for the boto3 client.
        client: Optional preconfigured S3 client.

    Raises:
        DriverConfigError: If the URI is invalid or does not match the type.
    """
    uri = _require_key(config, "path")
    dataset_type = _require_key(config, "type")
    try:
        bucket, prefix = parse_s3_uri(uri)
    except ValueError as error:
        raise DriverConfigError(str(error)) from error
    root = S3Root(bucket, prefix, client=client, config=runtime_config)
    if dataset_type == BLOB_TYPE_NAME:
        if not root.is_file(RelPath()):
            raise DriverConfigError(f"{uri!r} should be an object for dataset type {BLOB_TYPE_NAME}.")
        return continuation(Blob(root))
    if dataset_type == TREE_TYPE_NAME:
        if not root.is_directory(RelPath()):
            raise DriverConfigError(f"{uri!r} should be a prefix for dataset type {TREE_TYPE_NAME}.")
        return continuation(Tree(root))
    raise DriverConfigError(f"Dataset type {dataset_type!r} is not supported on S3.")


def _require_key(config: Mapping[str, Any], key: str) -> str:
    value = config.get(key)
    if not isinstance(value, str) or not value:
        raise DriverConfigError(f"Driver config is missing string key '{key}'.")
    return value

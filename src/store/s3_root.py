"""Read-only storage root over an S3 bucket prefix.

This module encapsulates boto3 client creation and maps relative paths
onto object keys. Directories are key prefixes holding at least one
object; every classification is a live listing call.
"""

from __future__ import annotations

import io
from typing import Any, BinaryIO, Iterator

from core.config import BlobTreeConfig
from core.constants import S3_KEY_SEPARATOR
from core.errors import DependencyError, ReadOnlyError, StorageIOError
from core.paths import RelPath
from store.root import StorageRoot


def create_s3_client(config: BlobTreeConfig) -> Any:
    """Create a boto3 S3 client.

    Args:
        config: Runtime config with optional session settings.

    Returns:
        Boto3 S3 client.

    Raises:
        DependencyError: If boto3 is missing.
    """
    try:
        import boto3
    except ImportError as error:
        raise DependencyError(
            "S3 roots require boto3, but it is not installed. "
            "Install boto3 to read from s3:// locations."
        ) from error
    session_kwargs: dict[str, str] = {}
    if config.s3_profile:
        session_kwargs["profile_name"] = config.s3_profile
    if config.s3_region:
        session_kwargs["region_name"] = config.s3_region
    session = boto3.session.Session(**session_kwargs)
    return session.client("s3")


def parse_s3_uri(uri: str) -> tuple[str, str]:
    """Split ``s3://bucket/prefix`` into bucket and prefix.

    The prefix may be empty to address the whole bucket.

    Raises:
        ValueError: If the URI has no bucket.
    """
    if not uri.startswith("s3://"):
        raise ValueError(f"Invalid S3 URI '{uri}': expected s3://bucket/prefix.")
    bucket, _, prefix = uri.removeprefix("s3://").partition("/")
    if not bucket:
        raise ValueError(f"Invalid S3 URI '{uri}': missing bucket name.")
    return bucket, prefix.strip("/")


class S3Root(StorageRoot):
    """Read-only root for objects under ``s3://bucket/prefix``."""

    def __init__(
        self,
        bucket: str,
        prefix: str = "",
        client: Any | None = None,
        config: BlobTreeConfig | None = None,
    ) -> None:
        self._bucket = bucket
        self._prefix = prefix.strip(S3_KEY_SEPARATOR)
        if client is None:
            client = create_s3_client(config or BlobTreeConfig.from_env())
        self._client = client

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def prefix(self) -> str:
        return self._prefix

    def object_key(self, path: RelPath) -> str:
        """Return the object key addressed by ``path``."""
        parts = ([self._prefix] if self._prefix else []) + list(path.components)
        return S3_KEY_SEPARATOR.join(parts)

    def is_directory(self, path: RelPath) -> bool:
        if path.is_root and not self._prefix:
            return True
        return self._first_key(self._directory_prefix(path)) is not None

    def is_file(self, path: RelPath) -> bool:
        if path.is_root and not self._prefix:
            return False
        key = self.object_key(path)
        # Keys sharing a prefix sort after the exact key, so it comes first if present.
        return self._first_key(key) == key

    def path_exists(self, path: RelPath) -> bool:
        return self.is_directory(path) or self.is_file(path)

    def list_names(self, path: RelPath) -> list[str]:
        directory_prefix = self._directory_prefix(path)
        names: list[str] = []
        for page in self._list_pages(directory_prefix, delimiter=S3_KEY_SEPARATOR):
            for common_prefix in page.get("CommonPrefixes", []):
                name = common_prefix["Prefix"][len(directory_prefix):].rstrip(S3_KEY_SEPARATOR)
                if name:
                    names.append(name)
            for item in page.get("Contents", []):
                name = item["Key"][len(directory_prefix):]
                if name:
                    names.append(name)
        return names

    def open_read(self, path: RelPath) -> BinaryIO:
        key = self.object_key(path)
        try:
            response = self._client.get_object(Bucket=self._bucket, Key=key)
            body = response["Body"]
            try:
                payload = body.read()
            finally:
                body.close()
        except Exception as error:
            raise StorageIOError(
                f"Failed to read s3://{self._bucket}/{key}: {error}. "
                "Check AWS credentials and that the object exists."
            ) from error
        return io.BytesIO(payload)

    def open_write(self, path: RelPath) -> BinaryIO:
        self.require_writeable("write", path)
        raise ReadOnlyError(f"S3 root {self.describe()} does not support writes.")

    def remove_node(self, path: RelPath, recursive: bool = False) -> None:
        self.require_writeable("remove", path)

    def make_directory(self, path: RelPath) -> None:
        self.require_writeable("create directory", path)

    def is_writeable(self) -> bool:
        return False

    def describe(self) -> str:
        return f"s3://{self._bucket}/{self._prefix}"

    def __repr__(self) -> str:
        return f"S3Root({self._bucket!r}, prefix={self._prefix!r})"

    def _directory_prefix(self, path: RelPath) -> str:
        key = self.object_key(path)
        return f"{key}{S3_KEY_SEPARATOR}" if key else ""

    def _first_key(self, key_prefix: str) -> str | None:
        for page in self._list_pages(key_prefix, max_keys=1):
            contents = page.get("Contents", [])
            if contents:
                return str(contents[0]["Key"])
            return None
        return None

    def _list_pages(
        self,
        key_prefix: str,
        delimiter: str | None = None,
        max_keys: int | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Yield ``list_objects_v2`` response pages, following continuation tokens."""
        request: dict[str, Any] = {"Bucket": self._bucket, "Prefix": key_prefix}
        if delimiter is not None:
            request["Delimiter"] = delimiter
        if max_keys is not None:
            request["MaxKeys"] = max_keys
        while True:
            try:
                page = self._client.list_objects_v2(**request)
            except Exception as error:
                raise StorageIOError(
                    f"Failed to list s3://{self._bucket}/{key_prefix}: {error}. "
                    "Check AWS credentials and bucket permissions."
                ) from error
            yield page
            if not page.get("IsTruncated"):
                return
            request["ContinuationToken"] = page["NextContinuationToken"]

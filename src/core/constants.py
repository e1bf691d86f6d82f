"""Core constants used across blobtree modules.

This module centralizes non-domain-specific constants.
Keeping values here avoids magic literals in storage logic.
"""

from __future__ import annotations

TEMP_DIR_PREFIX = "blobtree_tmp_"
TEMP_FILE_PREFIX = "blobtree_tmpfile_"
HOLDING_AREA_PREFIX = "blobtree_to_remove_"
ORPHAN_PREFIXES = (TEMP_DIR_PREFIX, TEMP_FILE_PREFIX, HOLDING_AREA_PREFIX)
DEFAULT_RENDER_MAX_DEPTH = 5
DEFAULT_SWEEP_MAX_AGE_SECONDS = 24 * 60 * 60
DEFAULT_TEXT_ENCODING = "utf-8"
COPY_CHUNK_SIZE = 1024 * 1024
S3_KEY_SEPARATOR = "/"
FILESYSTEM_DRIVER_NAME = "FileSystem"
S3_DRIVER_NAME = "S3"
BLOB_TYPE_NAME = "Blob"
TREE_TYPE_NAME = "BlobTree"
RENDER_TREE_ICON = "📂"
RENDER_BLOB_ICON = "📄"
RENDER_ELIDED_MARKER = "⋮"

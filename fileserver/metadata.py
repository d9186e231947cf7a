"""Metadata lookup for stored files."""

import os
from datetime import datetime

from common.protocol import FileMetadata
from fileserver.storage import FileStorage


def format_timestamp(timestamp: float) -> str:
    """
    Render a POSIX timestamp as a timezone-aware RFC 3339 string.

    Args:
        timestamp: Seconds since the epoch

    Returns:
        Local time with UTC offset, second precision (e.g. "2026-10-19T12:30:00+02:00")
    """
    return datetime.fromtimestamp(timestamp).astimezone().isoformat(timespec='seconds')


def creation_time(stat_result: os.stat_result) -> float:
    """
    Get creation time where the filesystem tracks it.

    Falls back to the modification time, so both reported timestamps are
    equal on platforms without a birth time.
    """
    return getattr(stat_result, 'st_birthtime', stat_result.st_mtime)


def lookup_metadata(storage: FileStorage, file_name: str) -> FileMetadata:
    """
    Resolve a stored file's size and timestamps.

    Args:
        storage: Storage root to resolve the name under
        file_name: Name of the stored file

    Returns:
        FileMetadata derived from the filesystem, never cached

    Raises:
        StoredFileNotFoundError: If the file does not exist
        InvalidFileNameError: If the name is not a flat entry name
    """
    stat_result = storage.stat(file_name)
    return FileMetadata(
        file_name=file_name,
        size=stat_result.st_size,
        created_at=format_timestamp(creation_time(stat_result)),
        modified_at=format_timestamp(stat_result.st_mtime),
    )

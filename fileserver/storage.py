"""Manages stored files under a single flat storage root."""

import logging
import os
from pathlib import Path
from typing import BinaryIO

from common.exceptions import InvalidFileNameError, StoredFileNotFoundError

logger = logging.getLogger(__name__)

_FORBIDDEN_NAMES = {"", ".", ".."}


def validate_file_name(file_name: str) -> str:
    """
    Check that a name denotes a single flat entry under the storage root.

    Args:
        file_name: Name as received on the wire

    Returns:
        The same name, unchanged

    Raises:
        InvalidFileNameError: If the name is empty, a dot entry, or contains a separator or NUL
    """
    if not isinstance(file_name, str) or file_name in _FORBIDDEN_NAMES:
        raise InvalidFileNameError(f"Invalid file name: {file_name!r}")
    separators = {"/", "\0", os.sep}
    if os.altsep:
        separators.add(os.altsep)
    if any(sep in file_name for sep in separators):
        raise InvalidFileNameError(f"File name must not contain path separators: {file_name!r}")
    return file_name


class FileStorage:
    """
    Flat directory of stored files, addressed by name.
    
    Each caller owns the handles it opens; nothing is cached here.
    """

    def __init__(self, root: Path):
        """
        Initialize storage with its root directory.

        Args:
            root: Directory holding every stored file
        """
        self.root = Path(root)

    def ensure_root(self) -> None:
        """Ensure storage root exists."""
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_name: str) -> Path:
        """
        Get on-disk path for a stored file.

        Raises:
            InvalidFileNameError: If the name is not a flat entry name
        """
        return self.root / validate_file_name(file_name)

    def open_for_write(self, file_name: str) -> BinaryIO:
        """
        Create or truncate a stored file for writing.

        Args:
            file_name: Name of the stored file

        Returns:
            Binary file handle owned by the caller

        Raises:
            InvalidFileNameError: If the name is not a flat entry name
            OSError: If the file cannot be created
        """
        return open(self.path_for(file_name), 'wb')

    def open_for_read(self, file_name: str) -> BinaryIO:
        """
        Open an existing stored file for reading.

        Args:
            file_name: Name of the stored file

        Returns:
            Binary file handle owned by the caller

        Raises:
            StoredFileNotFoundError: If no such regular file exists
            InvalidFileNameError: If the name is not a flat entry name
            OSError: If the file exists but cannot be opened
        """
        path = self.path_for(file_name)
        if not path.is_file():
            raise StoredFileNotFoundError(f"File not found: {file_name}")
        try:
            return open(path, 'rb')
        except FileNotFoundError as e:
            raise StoredFileNotFoundError(f"File not found: {file_name}") from e

    def stat(self, file_name: str) -> os.stat_result:
        """
        Get filesystem status of a stored file.

        Raises:
            StoredFileNotFoundError: If no such regular file exists
            InvalidFileNameError: If the name is not a flat entry name
        """
        path = self.path_for(file_name)
        try:
            result = path.stat()
        except FileNotFoundError as e:
            raise StoredFileNotFoundError(f"File not found: {file_name}") from e
        if not path.is_file():
            raise StoredFileNotFoundError(f"File not found: {file_name}")
        return result

    def discard(self, file_name: str) -> bool:
        """
        Delete a stored file if present.

        Returns:
            True if file was deleted, False if it didn't exist
        """
        path = self.path_for(file_name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Discarded stored file {file_name}")
        return True

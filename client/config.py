"""Configuration for the transfer client."""

import os
from dataclasses import dataclass
from pathlib import Path

from common.constants import CHUNK_SIZE_BYTES, DEFAULT_SERVER_ADDRESS


@dataclass(frozen=True)
class ClientConfig:
    """Client settings read once per invocation."""

    server_address: str = DEFAULT_SERVER_ADDRESS
    downloads_dir: Path = Path("downloads")
    chunk_size: int = CHUNK_SIZE_BYTES

    @classmethod
    def from_env(cls) -> 'ClientConfig':
        """
        Build configuration from FILESERVER_* environment variables.

        Returns:
            ClientConfig with defaults for unset variables

        Raises:
            ValueError: If FILESERVER_CHUNK_SIZE is not a positive integer
        """
        chunk_size = int(os.environ.get("FILESERVER_CHUNK_SIZE", str(CHUNK_SIZE_BYTES)))
        if chunk_size <= 0:
            raise ValueError(f"FILESERVER_CHUNK_SIZE must be positive, got {chunk_size}")
        return cls(
            server_address=os.environ.get("FILESERVER_ADDRESS", DEFAULT_SERVER_ADDRESS),
            downloads_dir=Path(os.environ.get("FILESERVER_DOWNLOADS_DIR", "downloads")),
            chunk_size=chunk_size,
        )

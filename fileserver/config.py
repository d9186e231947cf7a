"""Configuration settings for the file server."""

import os
from dataclasses import dataclass
from pathlib import Path

from common.constants import CHUNK_SIZE_BYTES, DEFAULT_SERVER_HOST, DEFAULT_SERVER_PORT


@dataclass(frozen=True)
class ServerConfig:
    """Settings injected into the server at construction time."""

    storage_path: Path
    host: str = DEFAULT_SERVER_HOST
    port: int = DEFAULT_SERVER_PORT
    chunk_size: int = CHUNK_SIZE_BYTES
    shutdown_grace: float = 5.0

    @property
    def listen_address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_env(cls) -> 'ServerConfig':
        """
        Build configuration from FILESERVER_* environment variables.

        Raises:
            ValueError: If a numeric variable is not a valid number or chunk size is not positive
        """
        chunk_size = int(os.environ.get("FILESERVER_CHUNK_SIZE", str(CHUNK_SIZE_BYTES)))
        if chunk_size <= 0:
            raise ValueError(f"FILESERVER_CHUNK_SIZE must be positive, got {chunk_size}")
        return cls(
            storage_path=Path(os.environ.get("FILESERVER_STORAGE_PATH", "./storage")),
            host=os.environ.get("FILESERVER_HOST", DEFAULT_SERVER_HOST),
            port=int(os.environ.get("FILESERVER_PORT", str(DEFAULT_SERVER_PORT))),
            chunk_size=chunk_size,
            shutdown_grace=float(os.environ.get("FILESERVER_SHUTDOWN_GRACE", "5")),
        )

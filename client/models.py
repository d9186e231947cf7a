"""Command data types for the transfer client."""

from dataclasses import dataclass
from typing import Literal, Union


@dataclass(frozen=True)
class UploadCommand:
    """Upload a local file to the server."""

    path: str
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a stored file into the downloads directory."""

    file_name: str
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class MetadataCommand:
    """Show size and timestamps of a stored file."""

    file_name: str
    command: Literal["metadata"] = "metadata"


TransferCommand = Union[UploadCommand, DownloadCommand, MetadataCommand]

"""Command handler functions for the transfer client."""

import os
from pathlib import Path

from common.constants import PARTIAL_DOWNLOAD_SUFFIX
from common.exceptions import LocalIOError, UsageError
from common.logging_config import get_logger
from client.config import ClientConfig
from client.file_client import FileServiceClient
from client.models import DownloadCommand, MetadataCommand, TransferCommand, UploadCommand
from client.utils import format_file_size

logger = get_logger(__name__)


async def handle_upload(cmd: UploadCommand, client: FileServiceClient, config: ClientConfig) -> str:
    """
    Handle 'upload' command.

    Args:
        cmd: UploadCommand with the local path
        client: FileServiceClient to send chunks through
        config: Client configuration (chunk size)

    Returns:
        Upload status line
    """
    logger.info(f"Executing upload command: path={cmd.path}")
    status = await client.upload(Path(cmd.path), config.chunk_size)
    return f"Upload Status: {status.message}"


async def handle_download(cmd: DownloadCommand, client: FileServiceClient, config: ClientConfig) -> str:
    """
    Handle 'download' command.

    Chunks are written to '<name>.part' in the downloads directory and the
    file is renamed into place only when the stream ends cleanly. On any
    failure, Not-Found included, the partial file is removed and an
    existing destination is left untouched.

    Args:
        cmd: DownloadCommand with the stored file name
        client: FileServiceClient to receive chunks from
        config: Client configuration (downloads directory)

    Returns:
        Completion message
    """
    logger.info(f"Executing download command: file_name={cmd.file_name}")
    destination = config.downloads_dir / cmd.file_name
    partial = destination.with_name(destination.name + PARTIAL_DOWNLOAD_SUFFIX)

    try:
        config.downloads_dir.mkdir(parents=True, exist_ok=True)
        out = open(partial, 'wb')
    except OSError as e:
        raise LocalIOError(f"Could not create {partial}: {e}") from e

    received = 0
    completed = False
    try:
        with out:
            async for chunk in client.download(cmd.file_name):
                try:
                    out.write(chunk.content)
                except OSError as e:
                    raise LocalIOError(f"Error writing {partial}: {e}") from e
                received += len(chunk.content)
        try:
            os.replace(partial, destination)
        except OSError as e:
            raise LocalIOError(f"Could not move {partial} to {destination}: {e}") from e
        completed = True
    finally:
        if not completed:
            partial.unlink(missing_ok=True)
            logger.debug(f"Removed partial download {partial}")

    logger.info(f"Downloaded {cmd.file_name} to {destination} ({format_file_size(received)})")
    return "Download completed"


async def handle_metadata(cmd: MetadataCommand, client: FileServiceClient, config: ClientConfig) -> str:
    """
    Handle 'metadata' command.

    Args:
        cmd: MetadataCommand with the stored file name
        client: FileServiceClient to query
        config: Client configuration (unused)

    Returns:
        Formatted metadata block
    """
    logger.info(f"Executing metadata command: file_name={cmd.file_name}")
    metadata = await client.get_metadata(cmd.file_name)
    return (
        f"Metadata for {metadata.file_name}:\n"
        f"Size: {metadata.size} bytes\n"
        f"Created: {metadata.created_at}\n"
        f"Modified: {metadata.modified_at}"
    )


HANDLERS = {
    "upload": handle_upload,
    "download": handle_download,
    "metadata": handle_metadata,
}


async def execute_command(cmd: TransferCommand, client: FileServiceClient, config: ClientConfig) -> str:
    """
    Run the handler registered for a parsed command.

    Raises:
        UsageError: If no handler exists for the command
    """
    handler = HANDLERS.get(cmd.command)
    if handler is None:
        raise UsageError(f"Unknown command: {cmd.command}")
    return await handler(cmd, client, config)

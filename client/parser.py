"""Command parser for the transfer client."""

from common.exceptions import UsageError
from client.constants import COMMANDS
from client.models import DownloadCommand, MetadataCommand, TransferCommand, UploadCommand


def parse_command(args: list[str]) -> TransferCommand:
    """Parse command-line arguments into a command object.

    Args:
        args: Arguments after the program name, e.g. ["upload", "notes.txt"]

    Returns:
        UploadCommand, DownloadCommand or MetadataCommand

    Raises:
        UsageError: If the command is unknown or the argument count is wrong
    """
    if not args:
        raise UsageError("Missing command")

    command_name = args[0]

    if command_name not in COMMANDS:
        raise UsageError(f"Unknown command: {command_name}")
    if len(args) != 2:
        raise UsageError(f"{command_name} requires exactly one filename")

    target = args[1]
    if not target:
        raise UsageError(f"{command_name} requires a non-empty filename")
    if command_name != "upload" and target in (".", ".."):
        raise UsageError(f"{command_name} takes a stored file name, not a directory: {target}")
    if command_name != "upload" and ("/" in target or "\\" in target):
        raise UsageError(f"{command_name} takes a stored file name, not a path: {target}")

    if command_name == "upload":
        return UploadCommand(path=target)
    elif command_name == "download":
        return DownloadCommand(file_name=target)
    else:
        return MetadataCommand(file_name=target)

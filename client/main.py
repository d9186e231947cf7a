"""Transfer client entry point: one operation per invocation."""

import asyncio
import os
import sys
from typing import Optional

from common.exceptions import FileServiceError, UsageError
from common.logging_config import setup_logging
from client.commands import execute_command
from client.config import ClientConfig
from client.constants import EXIT_SUCCESS, USAGE
from client.file_client import FileServiceClient
from client.models import TransferCommand
from client.parser import parse_command


async def run_command(cmd: TransferCommand, config: ClientConfig) -> str:
    """
    Connect to the server and run one command.

    Args:
        cmd: Parsed command
        config: Client configuration

    Returns:
        Text to print on success
    """
    async with FileServiceClient(config.server_address) as client:
        return await execute_command(cmd, client, config)


def main(argv: Optional[list[str]] = None) -> int:
    """
    Entry point for the transfer client.

    Args:
        argv: Arguments without the program name (defaults to sys.argv[1:])

    Returns:
        Process exit code: 0 on success, otherwise the exit code of the error kind
    """
    args = list(sys.argv[1:] if argv is None else argv)
    debug = '--debug' in args
    if debug:
        args.remove('--debug')

    log_level = 'DEBUG' if debug else os.getenv('LOG_LEVEL', 'WARNING')
    logger = setup_logging('client', log_level=log_level, stream=sys.stderr)
    if debug:
        logger.info("Debug logging enabled")

    try:
        cmd = parse_command(args)
        config = ClientConfig.from_env()
    except UsageError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(USAGE, file=sys.stderr)
        return e.exit_code
    except ValueError as e:
        print(f"Error: invalid configuration: {e}", file=sys.stderr)
        return UsageError.exit_code

    try:
        output = asyncio.run(run_command(cmd, config))
    except FileServiceError as e:
        logger.error(f"{cmd.command} failed: {e}", exc_info=debug)
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code

    print(output)
    return EXIT_SUCCESS


if __name__ == "__main__":
    sys.exit(main())

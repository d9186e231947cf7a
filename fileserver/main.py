"""Entry point for the file server.
Provisions the storage root, starts the RPC server and serves until signalled.
"""

import asyncio
import signal
import sys

from common.logging_config import setup_logging
from fileserver.config import ServerConfig
from fileserver.grpc_server import create_server
from fileserver.storage import FileStorage

logger = setup_logging('fileserver')


async def serve(config: ServerConfig) -> None:
    """
    Start and run gRPC server.

    Args:
        config: Server configuration
    """
    storage = FileStorage(config.storage_path)
    storage.ensure_root()

    server = create_server(storage, config.chunk_size)
    server.add_insecure_port(config.listen_address)

    logger.info(f"Starting file server on {config.listen_address}, storage={config.storage_path}")
    await server.start()

    async def shutdown(sig=None):
        if sig:
            logger.info(f"Received signal {sig}, shutting down...")
        else:
            logger.info("Shutting down...")
        await server.stop(config.shutdown_grace)
        logger.info("File server stopped")

    if sys.platform != 'win32':
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda s=sig: asyncio.create_task(shutdown(s)))

    try:
        await server.wait_for_termination()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        await shutdown()


def main() -> None:
    """Bootstrap file server."""
    logger.info("Initializing file server...")

    try:
        config = ServerConfig.from_env()
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(2)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("File server shutdown complete")
    except Exception as e:
        logger.error(f"Server error: {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()

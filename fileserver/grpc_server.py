"""gRPC server implementation for the file service."""

import grpc
from grpc import aio
import logging
from typing import AsyncIterator

from common.channel import receive_chunks
from common.constants import CHUNK_SIZE_BYTES, SERVICE_NAME
from common.exceptions import (
    ChannelError,
    InvalidFileNameError,
    StoredFileNotFoundError
)
from common.protocol import FileRequest
from fileserver.download_emitter import DownloadEmitter
from fileserver.metadata import lookup_metadata
from fileserver.storage import FileStorage
from fileserver.upload_session import UploadSession

logger = logging.getLogger(__name__)


class FileServiceServicer:
    """
    gRPC service implementation for file transfer operations.
    """

    def __init__(self, storage: FileStorage, chunk_size: int = CHUNK_SIZE_BYTES):
        """
        Initialize servicer with its storage root.

        Args:
            storage: FileStorage every call resolves names under
            chunk_size: Segment size used when streaming downloads
        """
        self.storage = storage
        self.chunk_size = chunk_size

    async def Upload(
        self,
        request_iterator: AsyncIterator[bytes],
        context: grpc.aio.ServicerContext
    ) -> bytes:
        """
        Handle Upload RPC (client streaming).
        Appends chunks to one stored file in arrival order.

        Args:
            request_iterator: Stream of Chunk messages (serialized)
            context: gRPC context

        Returns:
            Serialized UploadStatus
        """
        session = UploadSession(self.storage)
        logger.info(f"[session {session.session_id}] Upload started from {context.peer()}")

        try:
            status = await session.run(receive_chunks(request_iterator))
        except InvalidFileNameError as e:
            logger.error(f"[session {session.session_id}] Rejected upload: {e}")
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))
        except (ChannelError, OSError) as e:
            logger.error(f"[session {session.session_id}] Upload failed: {e}", exc_info=True)
            await context.abort(grpc.StatusCode.INTERNAL, f"Upload failed: {e}")

        return status.to_json()

    async def Download(
        self,
        request_bytes: bytes,
        context: grpc.aio.ServicerContext
    ) -> AsyncIterator[bytes]:
        """
        Handle Download RPC (server streaming).
        Fails before the first chunk if the file is missing.

        Args:
            request_bytes: Serialized FileRequest
            context: gRPC context

        Yields:
            Serialized Chunk messages
        """
        request = await self._parse_request(request_bytes, context)
        emitter = DownloadEmitter(self.storage, request.file_name, self.chunk_size)

        try:
            emitter.open()
        except StoredFileNotFoundError as e:
            logger.warning(f"Download of missing file {request.file_name}")
            await context.abort(grpc.StatusCode.NOT_FOUND, str(e))
        except InvalidFileNameError as e:
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))
        except OSError as e:
            logger.error(f"Cannot open {request.file_name}: {e}")
            await context.abort(grpc.StatusCode.INTERNAL, f"Error opening file: {e}")

        try:
            for chunk in emitter.chunks():
                yield chunk.to_json()
        except OSError as e:
            logger.error(
                f"Read failed for {request.file_name} after {emitter.chunks_sent} chunks: {e}",
                exc_info=True
            )
            await context.abort(grpc.StatusCode.INTERNAL, f"Error reading file: {e}")
        finally:
            emitter.close()

        logger.info(
            f"Streamed {request.file_name}: {emitter.chunks_sent} chunks, {emitter.bytes_sent} bytes"
        )

    async def GetMetadata(
        self,
        request_bytes: bytes,
        context: grpc.aio.ServicerContext
    ) -> bytes:
        """
        Handle GetMetadata RPC (unary).

        Args:
            request_bytes: Serialized FileRequest
            context: gRPC context

        Returns:
            Serialized FileMetadata
        """
        request = await self._parse_request(request_bytes, context)

        try:
            metadata = lookup_metadata(self.storage, request.file_name)
        except StoredFileNotFoundError as e:
            logger.warning(f"Metadata requested for missing file {request.file_name}")
            await context.abort(grpc.StatusCode.NOT_FOUND, str(e))
        except InvalidFileNameError as e:
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, str(e))
        except OSError as e:
            logger.error(f"Cannot stat {request.file_name}: {e}")
            await context.abort(grpc.StatusCode.INTERNAL, f"Error reading metadata: {e}")

        return metadata.to_json()

    async def _parse_request(
        self,
        request_bytes: bytes,
        context: grpc.aio.ServicerContext
    ) -> FileRequest:
        try:
            return FileRequest.from_json(request_bytes)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed FileRequest: {e}")
            await context.abort(grpc.StatusCode.INVALID_ARGUMENT, f"Malformed request: {e}")


def create_server(storage: FileStorage, chunk_size: int = CHUNK_SIZE_BYTES) -> aio.Server:
    """
    Create and configure gRPC server.

    Args:
        storage: FileStorage instance
        chunk_size: Segment size for downloads

    Returns:
        Configured gRPC server
    """
    server = aio.server()
    servicer = FileServiceServicer(storage, chunk_size)

    server.add_generic_rpc_handlers((
        grpc.method_handlers_generic_handler(
            SERVICE_NAME,
            {
                'Upload': grpc.stream_unary_rpc_method_handler(
                    servicer.Upload,
                    request_deserializer=lambda x: x,
                    response_serializer=lambda x: x,
                ),
                'Download': grpc.unary_stream_rpc_method_handler(
                    servicer.Download,
                    request_deserializer=lambda x: x,
                    response_serializer=lambda x: x,
                ),
                'GetMetadata': grpc.unary_unary_rpc_method_handler(
                    servicer.GetMetadata,
                    request_deserializer=lambda x: x,
                    response_serializer=lambda x: x,
                ),
            }
        ),
    ))

    return server

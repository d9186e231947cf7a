"""RPC client for the file service: upload, download and metadata calls."""

import grpc
import logging
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Iterator, Optional

from common.channel import read_segments, receive_chunks
from common.constants import (
    CHUNK_SIZE_BYTES,
    DOWNLOAD_METHOD,
    GET_METADATA_METHOD,
    GRPC_KEEPALIVE_TIME_MS,
    GRPC_KEEPALIVE_TIMEOUT_MS,
    UPLOAD_METHOD
)
from common.exceptions import (
    ChannelError,
    FileServiceError,
    InvalidFileNameError,
    LocalIOError,
    StoredFileNotFoundError
)
from common.protocol import Chunk, FileMetadata, FileRequest, UploadStatus

logger = logging.getLogger(__name__)


def iter_upload_chunks(handle: BinaryIO, file_name: str, chunk_size: int = CHUNK_SIZE_BYTES) -> Iterator[Chunk]:
    """
    Split an open local file into upload chunks.

    An empty file yields one empty chunk so the server still learns the
    name and stores a zero-length file.

    Args:
        handle: Local file opened in binary read mode
        file_name: Name tag carried by every chunk
        chunk_size: Maximum content length per chunk

    Yields:
        Chunks in file offset order

    Raises:
        OSError: If reading the local file fails
    """
    empty = True
    for segment in read_segments(handle, chunk_size):
        empty = False
        yield Chunk(content=segment, file_name=file_name)
    if empty:
        yield Chunk(content=b'', file_name=file_name)


def translate_rpc_error(error: grpc.RpcError, file_name: str) -> FileServiceError:
    """
    Map a failed RPC to the matching file service exception.

    Args:
        error: Error raised by the gRPC call
        file_name: File the call was about, for the message

    Returns:
        StoredFileNotFoundError, InvalidFileNameError or ChannelError
    """
    code = error.code()
    details = error.details()
    if code == grpc.StatusCode.NOT_FOUND:
        return StoredFileNotFoundError(f"File not found on server: {file_name}")
    if code == grpc.StatusCode.INVALID_ARGUMENT:
        return InvalidFileNameError(details or f"Invalid file name: {file_name}")
    return ChannelError(f"RPC failed ({code.name if code else 'UNKNOWN'}): {details}")


class FileServiceClient:
    """
    gRPC client for file service operations.
    Each operation is a single attempt; failures are never retried.
    """

    def __init__(self, server_address: str):
        """Initialize client with lazy connection."""
        self._channel: Optional[grpc.aio.Channel] = None
        self._target = server_address

    def _ensure_channel(self):
        """Ensure gRPC channel is established."""
        if self._channel is None:
            options = [
                ('grpc.keepalive_time_ms', GRPC_KEEPALIVE_TIME_MS),
                ('grpc.keepalive_timeout_ms', GRPC_KEEPALIVE_TIMEOUT_MS),
                ('grpc.keepalive_permit_without_calls', 1),
            ]
            self._channel = grpc.aio.insecure_channel(self._target, options=options)
            logger.debug(f"Opened gRPC channel to {self._target}")

    async def close(self):
        """Close gRPC channel."""
        if self._channel:
            await self._channel.close()
            self._channel = None

    async def __aenter__(self) -> 'FileServiceClient':
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def upload(self, path: Path, chunk_size: int = CHUNK_SIZE_BYTES) -> UploadStatus:
        """
        Stream a local file to the server under its base name.

        Args:
            path: Local file to upload
            chunk_size: Maximum content length per chunk

        Returns:
            UploadStatus sent by the server when the stream closed

        Raises:
            LocalIOError: If the local file cannot be opened or read
            InvalidFileNameError: If the server rejects the name
            ChannelError: If sending or receiving fails
        """
        path = Path(path)
        file_name = path.name
        try:
            handle = open(path, 'rb')
        except OSError as e:
            raise LocalIOError(f"Could not open file {path}: {e}") from e

        self._ensure_channel()
        call = self._channel.stream_unary(
            UPLOAD_METHOD,
            request_serializer=lambda x: x,
            response_deserializer=lambda x: x,
        )()

        chunks_sent = 0
        with handle:
            try:
                for chunk in iter_upload_chunks(handle, file_name, chunk_size):
                    await call.write(chunk.to_json())
                    chunks_sent += 1
                await call.done_writing()
                response_bytes = await call
            except OSError as e:
                call.cancel()
                raise LocalIOError(f"Error reading file {path}: {e}") from e
            except grpc.RpcError as e:
                logger.error(f"Upload of {file_name} failed after {chunks_sent} chunks: {e.details()}")
                raise translate_rpc_error(e, file_name) from e

        logger.info(f"Uploaded {file_name} in {chunks_sent} chunks")
        return _decode(UploadStatus, response_bytes)

    async def download(self, file_name: str) -> AsyncIterator[Chunk]:
        """
        Stream a stored file from the server.

        Args:
            file_name: Name of the stored file

        Yields:
            Chunks in file offset order

        Raises:
            StoredFileNotFoundError: If the server has no such file
            InvalidFileNameError: If the server rejects the name
            ChannelError: If the stream fails or a message cannot be decoded
        """
        self._ensure_channel()
        call = self._channel.unary_stream(
            DOWNLOAD_METHOD,
            request_serializer=lambda x: x,
            response_deserializer=lambda x: x,
        )(FileRequest(file_name=file_name).to_json())

        try:
            async for chunk in receive_chunks(call):
                yield chunk
        except grpc.RpcError as e:
            raise translate_rpc_error(e, file_name) from e
        finally:
            call.cancel()

    async def get_metadata(self, file_name: str) -> FileMetadata:
        """
        Fetch size and timestamps of a stored file.

        Raises:
            StoredFileNotFoundError: If the server has no such file
            InvalidFileNameError: If the server rejects the name
            ChannelError: If the call fails
        """
        self._ensure_channel()
        multi_callable = self._channel.unary_unary(
            GET_METADATA_METHOD,
            request_serializer=lambda x: x,
            response_deserializer=lambda x: x,
        )

        try:
            response_bytes = await multi_callable(FileRequest(file_name=file_name).to_json())
        except grpc.RpcError as e:
            raise translate_rpc_error(e, file_name) from e

        return _decode(FileMetadata, response_bytes)


def _decode(message_cls, data: bytes):
    try:
        return message_cls.from_json(data)
    except (ValueError, KeyError, TypeError) as e:
        raise ChannelError(f"Malformed {message_cls.__name__} response: {e}") from e

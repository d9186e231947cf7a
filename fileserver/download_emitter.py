"""Server-side download emitter: streams a stored file as ordered chunks."""

import logging
from typing import BinaryIO, Iterator, Optional

from common.channel import read_segments
from common.constants import CHUNK_SIZE_BYTES
from common.protocol import Chunk
from fileserver.storage import FileStorage

logger = logging.getLogger(__name__)


class DownloadEmitter:
    """
    Produces the chunk sequence for one Download call.

    `open()` resolves the file and must be called before iterating, so a
    missing file is reported before the first chunk exists.
    """

    def __init__(self, storage: FileStorage, file_name: str, chunk_size: int = CHUNK_SIZE_BYTES):
        self.storage = storage
        self.file_name = file_name
        self.chunk_size = chunk_size
        self.chunks_sent = 0
        self.bytes_sent = 0
        self._handle: Optional[BinaryIO] = None

    def open(self) -> 'DownloadEmitter':
        """
        Open the stored file for streaming.

        Raises:
            StoredFileNotFoundError: If the file does not exist
            InvalidFileNameError: If the name is not a flat entry name
            OSError: If the file exists but cannot be opened
        """
        self._handle = self.storage.open_for_read(self.file_name)
        logger.info(f"Streaming {self.file_name} in segments of {self.chunk_size} bytes")
        return self

    def close(self) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            handle.close()

    def chunks(self) -> Iterator[Chunk]:
        """
        Yield one Chunk per file segment, in file offset order.

        Yields:
            Chunks tagged with the requested file name; none for an empty file

        Raises:
            RuntimeError: If called before open()
            OSError: If a read fails mid-stream
        """
        if self._handle is None:
            raise RuntimeError("DownloadEmitter.open() must be called before chunks()")
        for segment in read_segments(self._handle, self.chunk_size):
            self.chunks_sent += 1
            self.bytes_sent += len(segment)
            yield Chunk(content=segment, file_name=self.file_name)

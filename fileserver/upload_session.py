"""Server-side upload session: assembles one stored file from a chunk stream."""

import enum
import logging
import uuid
from typing import AsyncIterator, BinaryIO, Callable, Dict, Optional, Tuple

from common.exceptions import InvalidSessionTransitionError
from common.protocol import Chunk, UploadStatus
from fileserver.storage import FileStorage

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    AWAITING_FIRST_CHUNK = "awaiting_first_chunk"
    RECEIVING = "receiving"
    FINALIZED = "finalized"
    ABORTED = "aborted"


class SessionEvent(enum.Enum):
    CHUNK = "chunk"
    END_OF_STREAM = "end_of_stream"
    FAILURE = "failure"


TERMINAL_STATES = frozenset({SessionState.FINALIZED, SessionState.ABORTED})


class UploadSession:
    """
    State machine for one Upload call.

    The first chunk fixes the destination name and opens the destination
    handle; every chunk is appended in arrival order. On failure the handle
    is closed and the partially written file is deleted. The destination
    is truncated when the first chunk arrives, so an aborted re-upload also
    removes any earlier copy stored under the same name.
    """

    def __init__(self, storage: FileStorage, session_id: Optional[str] = None):
        """
        Initialize session bound to a storage root.

        Args:
            storage: Storage root the destination file is created under
            session_id: Identifier used in log lines (random if omitted)
        """
        self.storage = storage
        self.session_id = session_id or uuid.uuid4().hex[:8]
        self.state = SessionState.AWAITING_FIRST_CHUNK
        self.file_name: Optional[str] = None
        self.bytes_received = 0
        self._handle: Optional[BinaryIO] = None

    @property
    def handle_open(self) -> bool:
        return self._handle is not None

    async def run(self, chunks: AsyncIterator[Chunk]) -> UploadStatus:
        """
        Consume a chunk stream until it ends or fails.

        Args:
            chunks: Inbound chunks in send order

        Returns:
            UploadStatus reporting the number of bytes received

        Raises:
            InvalidFileNameError: If the first chunk names an invalid file
            ChannelError: If the stream fails
            OSError: If the destination cannot be created or written
        """
        try:
            async for chunk in chunks:
                self.accept(chunk)
            return self.finish()
        finally:
            if self.state not in TERMINAL_STATES:
                self.abort()

    def accept(self, chunk: Chunk) -> None:
        """Feed one chunk into the session."""
        self._dispatch(SessionEvent.CHUNK, chunk)

    def finish(self) -> UploadStatus:
        """Handle end of stream and produce the completion status."""
        self._dispatch(SessionEvent.END_OF_STREAM)
        return UploadStatus(success=True, message=f"Received {self.bytes_received} bytes")

    def abort(self) -> None:
        """Release the destination handle and delete the partial file."""
        self._dispatch(SessionEvent.FAILURE)

    def _dispatch(self, event: SessionEvent, chunk: Optional[Chunk] = None) -> None:
        key = (self.state, event)
        if key not in self._TRANSITIONS:
            raise InvalidSessionTransitionError(
                f"Session {self.session_id}: {event.value} not allowed in state {self.state.value}"
            )
        next_state, action = self._TRANSITIONS[key]
        action(self, chunk)
        logger.debug(f"[session {self.session_id}] {self.state.value} -> {next_state.value}")
        self.state = next_state

    def _open_destination(self, chunk: Chunk) -> None:
        self._handle = self.storage.open_for_write(chunk.file_name)
        self.file_name = chunk.file_name
        logger.info(f"[session {self.session_id}] Receiving file {self.file_name}")
        self._write(chunk)

    def _write(self, chunk: Chunk) -> None:
        if chunk.file_name != self.file_name:
            logger.warning(
                f"[session {self.session_id}] Chunk tagged {chunk.file_name!r} "
                f"written to {self.file_name!r}"
            )
        self._handle.write(chunk.content)
        self.bytes_received += len(chunk.content)

    def _finalize(self, chunk: Optional[Chunk]) -> None:
        handle, self._handle = self._handle, None
        if handle is None:
            logger.warning(f"[session {self.session_id}] Stream ended before any chunk, nothing stored")
            return
        handle.close()
        logger.info(
            f"[session {self.session_id}] Stored {self.file_name} ({self.bytes_received} bytes)"
        )

    def _abort(self, chunk: Optional[Chunk]) -> None:
        handle, self._handle = self._handle, None
        if handle is not None:
            try:
                handle.close()
            except OSError as e:
                logger.warning(f"[session {self.session_id}] Error closing {self.file_name}: {e}")
        if self.file_name is not None:
            try:
                self.storage.discard(self.file_name)
            except OSError as e:
                logger.error(f"[session {self.session_id}] Could not delete partial file {self.file_name}: {e}")
        logger.warning(
            f"[session {self.session_id}] Upload aborted after {self.bytes_received} bytes"
        )

    _TRANSITIONS: Dict[
        Tuple[SessionState, SessionEvent],
        Tuple[SessionState, Callable[['UploadSession', Optional[Chunk]], None]]
    ] = {
        (SessionState.AWAITING_FIRST_CHUNK, SessionEvent.CHUNK): (SessionState.RECEIVING, _open_destination),
        (SessionState.AWAITING_FIRST_CHUNK, SessionEvent.END_OF_STREAM): (SessionState.FINALIZED, _finalize),
        (SessionState.AWAITING_FIRST_CHUNK, SessionEvent.FAILURE): (SessionState.ABORTED, _abort),
        (SessionState.RECEIVING, SessionEvent.CHUNK): (SessionState.RECEIVING, _write),
        (SessionState.RECEIVING, SessionEvent.END_OF_STREAM): (SessionState.FINALIZED, _finalize),
        (SessionState.RECEIVING, SessionEvent.FAILURE): (SessionState.ABORTED, _abort),
    }

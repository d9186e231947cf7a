"""Chunk channel helpers: decoding inbound chunk streams, segmenting files.

A chunk stream is an async iterator. Exhausting it is the logical end of
the stream; an exception raised from it is a channel failure. Chunks are
observed in exactly the order the peer sent them.
"""

import logging
from typing import AsyncIterable, AsyncIterator, BinaryIO, Iterator

from common.exceptions import ChannelError
from common.protocol import Chunk

logger = logging.getLogger(__name__)


async def receive_chunks(raw_messages: AsyncIterable[bytes]) -> AsyncIterator[Chunk]:
    """
    Decode a stream of serialized Chunk messages.

    Args:
        raw_messages: Stream of JSON-encoded Chunk messages

    Yields:
        Decoded Chunk objects, in arrival order

    Raises:
        ChannelError: If a message cannot be decoded
    """
    index = 0
    async for message in raw_messages:
        try:
            chunk = Chunk.from_json(message)
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Undecodable chunk message at position {index}: {e}")
            raise ChannelError(f"Malformed chunk message at position {index}: {e}") from e
        index += 1
        yield chunk


def read_segments(handle: BinaryIO, segment_size: int) -> Iterator[bytes]:
    """
    Read an open binary file sequentially in fixed-size segments.

    Args:
        handle: File object opened in binary read mode
        segment_size: Maximum number of bytes per segment

    Yields:
        Non-empty byte segments in file offset order; nothing for an empty file

    Raises:
        ValueError: If segment_size is not positive
        OSError: If a read fails
    """
    if segment_size <= 0:
        raise ValueError(f"segment_size must be positive, got {segment_size}")
    while True:
        segment = handle.read(segment_size)
        if not segment:
            break
        yield segment

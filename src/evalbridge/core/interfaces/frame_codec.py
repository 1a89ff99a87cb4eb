"""Frame codec interface."""

import asyncio
from typing import Protocol


class IFrameCodec(Protocol):
    """Contract for splitting a byte stream into discrete messages.

    The same codec frames requests read from the producer and
    responses written back to it.
    """

    def encode(self, payload: bytes) -> bytes:
        """Wrap a payload into a single frame.

        Args:
            payload: The message bytes.

        Returns:
            The bytes to write on the stream.

        Raises:
            FrameError: If the payload cannot be framed.
        """
        ...

    async def read_frame(self, reader: asyncio.StreamReader) -> bytes | None:
        """Read exactly one frame from a stream.

        Args:
            reader: The stream to read from.

        Returns:
            The payload of the frame, or None if the peer closed the
            stream cleanly between frames.

        Raises:
            FrameError: If the frame is malformed or too large.
            TransportError: If the stream ends in the middle of a frame.
        """
        ...

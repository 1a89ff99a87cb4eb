"""Frame codecs for the bridge wire protocol.

length:  4-byte big-endian unsigned payload size, then the payload.
newline: the payload, then a single b"\\n".
"""

import asyncio
import struct

from evalbridge.core.entities.bridge_config import DEFAULT_MAX_FRAME_BYTES
from evalbridge.core.exceptions import FrameError, TransportError

_HEADER = struct.Struct(">I")


class LengthPrefixCodec:
    """Codec that prefixes every payload with its size."""

    def __init__(self, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES) -> None:
        self._max_frame_bytes = max_frame_bytes

    @property
    def max_frame_bytes(self) -> int:
        return self._max_frame_bytes

    def encode(self, payload: bytes) -> bytes:
        if len(payload) > self._max_frame_bytes:
            raise FrameError(
                f"Frame of {len(payload)} bytes exceeds limit of {self._max_frame_bytes}"
            )
        return _HEADER.pack(len(payload)) + payload

    async def read_frame(self, reader: asyncio.StreamReader) -> bytes | None:
        try:
            header = await reader.readexactly(_HEADER.size)
        except asyncio.IncompleteReadError as e:
            if not e.partial:
                return None
            raise TransportError("Connection closed inside a frame header") from e

        (size,) = _HEADER.unpack(header)
        if size > self._max_frame_bytes:
            raise FrameError(
                f"Frame of {size} bytes exceeds limit of {self._max_frame_bytes}"
            )

        try:
            return await reader.readexactly(size)
        except asyncio.IncompleteReadError as e:
            raise TransportError(
                f"Connection closed after {len(e.partial)} of {size} frame bytes"
            ) from e


class NewlineDelimitedCodec:
    """Codec that terminates every payload with a newline.

    Payloads must not contain newline bytes themselves.
    """

    delimiter = b"\n"

    def __init__(self, max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES) -> None:
        self._max_frame_bytes = max_frame_bytes

    @property
    def max_frame_bytes(self) -> int:
        return self._max_frame_bytes

    def encode(self, payload: bytes) -> bytes:
        if self.delimiter in payload:
            raise FrameError("Payload contains the newline delimiter")
        if len(payload) > self._max_frame_bytes:
            raise FrameError(
                f"Frame of {len(payload)} bytes exceeds limit of {self._max_frame_bytes}"
            )
        return payload + self.delimiter

    async def read_frame(self, reader: asyncio.StreamReader) -> bytes | None:
        try:
            line = await reader.readuntil(self.delimiter)
        except asyncio.IncompleteReadError as e:
            if not e.partial:
                return None
            raise TransportError("Connection closed before the frame delimiter") from e
        except asyncio.LimitOverrunError as e:
            raise FrameError("Frame exceeds the stream buffer limit") from e

        payload = line[: -len(self.delimiter)]
        if len(payload) > self._max_frame_bytes:
            raise FrameError(
                f"Frame of {len(payload)} bytes exceeds limit of {self._max_frame_bytes}"
            )
        return payload


def create_codec(
    framing: str,
    max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
) -> LengthPrefixCodec | NewlineDelimitedCodec:
    """Create the codec for a framing policy name.

    Args:
        framing: "length" or "newline".
        max_frame_bytes: Largest payload accepted in either direction.

    Returns:
        A codec instance.

    Raises:
        ValueError: If the framing policy is unknown.
    """
    if framing == "length":
        return LengthPrefixCodec(max_frame_bytes)
    if framing == "newline":
        return NewlineDelimitedCodec(max_frame_bytes)
    raise ValueError(f"Unknown framing policy: {framing!r}")


def stream_limit(max_frame_bytes: int) -> int:
    """Return a StreamReader buffer limit able to hold one full frame."""
    return max(max_frame_bytes + _HEADER.size + 1, 2**16)

"""Producer-side client for the bridge."""

import asyncio
import contextlib
from types import TracebackType
from typing import Any

from evalbridge.core.entities.bridge_config import (
    DEFAULT_MAX_FRAME_BYTES,
    DEFAULT_SOCKET_PATH,
)
from evalbridge.core.exceptions import RemoteError, TransportError
from evalbridge.core.interfaces.serializer import ISerializer
from evalbridge.infrastructure.serializers.json import JsonSerializer
from evalbridge.infrastructure.transport.framing import create_codec, stream_limit


class BridgeClient:
    """Async client that asks a running bridge to evaluate modules.

    One client holds one connection; requests on it are answered in
    the order they are sent.

    Example:
        async with BridgeClient("/tmp/evalbridge.sock") as client:
            value = await client.request("pages/index.py")
    """

    def __init__(
        self,
        socket_path: str = DEFAULT_SOCKET_PATH,
        framing: str = "length",
        timeout: float | None = None,
        envelope: bool = False,
        serializer: ISerializer | None = None,
        max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES,
        encoding: str = "utf-8",
    ) -> None:
        """Initialize the client.

        Args:
            socket_path: The bridge endpoint.
            framing: Framing policy the bridge was started with.
            timeout: Seconds to wait for a response. None waits forever,
                which never returns when the bridge drops a failed request.
            envelope: Set when the bridge runs with error responses; the
                client then unwraps values and raises RemoteError.
            serializer: Serializer used to decode payloads.
            max_frame_bytes: Largest payload accepted.
            encoding: Text encoding of identifiers.
        """
        self._socket_path = socket_path
        self._codec = create_codec(framing, max_frame_bytes)
        self._timeout = timeout
        self._envelope = envelope
        self._serializer = serializer or JsonSerializer()
        self._max_frame_bytes = max_frame_bytes
        self._encoding = encoding
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None

    @property
    def connected(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()

    async def connect(self) -> None:
        """Open the connection to the bridge."""
        if self.connected:
            return
        try:
            self._reader, self._writer = await asyncio.open_unix_connection(
                self._socket_path,
                limit=stream_limit(self._max_frame_bytes),
            )
        except OSError as e:
            raise TransportError(f"Cannot connect to {self._socket_path}: {e}") from e

    async def close(self) -> None:
        """Close the connection."""
        if self._writer is None:
            return
        writer, self._writer, self._reader = self._writer, None, None
        writer.close()
        with contextlib.suppress(ConnectionError):
            await writer.wait_closed()

    async def send(self, identifier: str) -> None:
        """Send a request without waiting for its response.

        Args:
            identifier: The module identifier to evaluate.
        """
        await self.connect()
        writer = self._writer
        if writer is None:
            raise TransportError("Client is not connected")
        try:
            writer.write(self._codec.encode(identifier.encode(self._encoding)))
            await writer.drain()
        except ConnectionError as e:
            raise TransportError(f"Connection lost while sending: {e}") from e

    async def receive(self, timeout: float | None = None) -> Any:
        """Wait for the next response and decode it.

        Args:
            timeout: Overrides the client timeout for this call.

        Returns:
            The decoded value.

        Raises:
            TimeoutError: If no response arrives in time. The connection is
                closed, and the next request opens a new one.
            TransportError: If the bridge closes the connection.
            RemoteError: If the bridge answers with an error envelope.
        """
        if self._reader is None:
            raise TransportError("Client is not connected")

        effective_timeout = timeout if timeout is not None else self._timeout
        try:
            payload = await asyncio.wait_for(
                self._codec.read_frame(self._reader),
                effective_timeout,
            )
        except asyncio.TimeoutError:
            # A late answer would be read as the answer to the next request.
            await self.close()
            raise
        except ConnectionError as e:
            raise TransportError(f"Connection lost while receiving: {e}") from e
        if payload is None:
            raise TransportError("Bridge closed the connection")

        value = self._serializer.deserialize(payload)
        if not self._envelope:
            return value
        if not isinstance(value, dict) or "ok" not in value:
            raise TransportError("Response is not an envelope; is the bridge using error responses?")
        if value["ok"]:
            return value.get("value")
        error = value.get("error") or {}
        raise RemoteError(error.get("type", "Error"), error.get("message", ""))

    async def request(self, identifier: str, timeout: float | None = None) -> Any:
        """Evaluate a module on the bridge and return its value.

        Args:
            identifier: The module identifier to evaluate.
            timeout: Overrides the client timeout for this call.

        Returns:
            The decoded value.
        """
        await self.send(identifier)
        return await self.receive(timeout)

    async def __aenter__(self) -> "BridgeClient":
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

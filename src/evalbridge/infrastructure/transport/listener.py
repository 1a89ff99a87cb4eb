"""Channel listener - serves the evaluation responder on a Unix socket."""

import asyncio
import contextlib
import logging
import os
import stat
from types import TracebackType

from evalbridge.core.entities.bridge_config import BridgeConfig
from evalbridge.core.exceptions import BindError, FrameError, TransportError
from evalbridge.core.interfaces.frame_codec import IFrameCodec
from evalbridge.core.services.evaluation_responder import EvaluationResponder
from evalbridge.infrastructure.transport.framing import create_codec, stream_limit

logger = logging.getLogger(__name__)


class ChannelListener:
    """Accepts connections on one Unix socket and routes frames.

    Each connection is served by its own task which reads a frame,
    awaits the responder and writes the answer before reading the next
    frame, so answers on one connection come back in request order.
    Connections share nothing except the responder and its cache.
    """

    def __init__(
        self,
        responder: EvaluationResponder,
        config: BridgeConfig | None = None,
        codec: IFrameCodec | None = None,
    ) -> None:
        """Initialize the listener.

        Args:
            responder: The responder that answers each request.
            config: Optional bridge configuration. Defaults to the
                responder's configuration.
            codec: Optional frame codec. Built from the configured
                framing policy if not provided.
        """
        self._responder = responder
        self._config = config or responder.config
        self._codec = codec or create_codec(
            self._config.framing,
            self._config.max_frame_bytes,
        )
        self._server: asyncio.Server | None = None
        self._connections: dict[int, asyncio.StreamWriter] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._next_connection_id = 0

    @property
    def responder(self) -> EvaluationResponder:
        """Return the responder answering requests."""
        return self._responder

    @property
    def socket_path(self) -> str:
        """Return the bound endpoint."""
        return self._config.socket_path

    @property
    def is_serving(self) -> bool:
        """Check whether the listener is accepting connections."""
        return self._server is not None and self._server.is_serving()

    @property
    def connection_count(self) -> int:
        """Return the number of open connections."""
        return len(self._connections)

    async def start(self) -> None:
        """Bind the endpoint and start accepting connections.

        Raises:
            BindError: If the endpoint is in use or cannot be bound.
        """
        if self._server is not None:
            raise BindError(f"Listener already bound to {self.socket_path}")

        await self._prepare_endpoint()

        try:
            self._server = await asyncio.start_unix_server(
                self._handle_connection,
                path=self.socket_path,
                limit=stream_limit(self._config.max_frame_bytes),
            )
        except OSError as e:
            raise BindError(f"Cannot bind {self.socket_path}: {e}") from e

        logger.info(
            "Listening on %s (framing=%s, evaluation=%s)",
            self.socket_path,
            self._config.framing,
            self._config.evaluation_mode,
        )

    async def serve_forever(self) -> None:
        """Start if needed and serve until cancelled."""
        if self._server is None:
            await self.start()
        server = self._server
        if server is None:
            raise BindError(f"Listener on {self.socket_path} was closed while starting")
        try:
            await server.serve_forever()
        finally:
            await self.close()

    async def close(self) -> None:
        """Stop accepting, drop open connections and unlink the endpoint."""
        if self._server is None:
            return

        server, self._server = self._server, None
        server.close()

        for writer in list(self._connections.values()):
            writer.close()
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

        await server.wait_closed()
        with contextlib.suppress(FileNotFoundError):
            os.unlink(self.socket_path)

        logger.info("Stopped listening on %s", self.socket_path)

    async def __aenter__(self) -> "ChannelListener":
        await self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def _prepare_endpoint(self) -> None:
        """Clear a stale socket file, refusing to touch a live one."""
        path = self.socket_path
        try:
            mode = os.lstat(path).st_mode
        except FileNotFoundError:
            return

        if not stat.S_ISSOCK(mode):
            raise BindError(f"{path} exists and is not a socket")

        try:
            _, writer = await asyncio.open_unix_connection(path)
        except (ConnectionRefusedError, FileNotFoundError):
            logger.info("Removing stale socket %s", path)
            with contextlib.suppress(FileNotFoundError):
                os.unlink(path)
            return
        except OSError as e:
            raise BindError(f"Cannot probe {path}: {e}") from e

        writer.close()
        with contextlib.suppress(ConnectionError):
            await writer.wait_closed()
        raise BindError(f"{path} is already in use by another listener")

    async def _handle_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        connection_id = self._next_connection_id
        self._next_connection_id += 1
        self._connections[connection_id] = writer
        task = asyncio.current_task()
        if task is not None:
            self._tasks.add(task)

        logger.info("Connection %d opened", connection_id)
        try:
            await self._serve_connection(reader, writer)
        except FrameError as e:
            logger.warning("Connection %d closed on bad frame: %s", connection_id, e)
        except (TransportError, ConnectionError) as e:
            logger.warning("Connection %d dropped: %s", connection_id, e)
        finally:
            self._connections.pop(connection_id, None)
            if task is not None:
                self._tasks.discard(task)
            writer.close()
            with contextlib.suppress(ConnectionError):
                await writer.wait_closed()
            logger.info("Connection %d closed", connection_id)

    async def _serve_connection(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
    ) -> None:
        while True:
            frame = await self._codec.read_frame(reader)
            if frame is None:
                return

            payload = await self._responder.respond(frame)
            if payload is None:
                continue

            try:
                response = self._codec.encode(payload)
            except FrameError as e:
                logger.warning("Dropped a response the codec cannot frame: %s", e)
                continue

            writer.write(response)
            await writer.drain()

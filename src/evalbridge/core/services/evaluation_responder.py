"""Evaluation responder - turns module identifiers into response payloads."""

import asyncio
import logging
import time
from typing import Any

from evalbridge.core.entities.bridge_config import BridgeConfig
from evalbridge.core.entities.module_record import ModuleRecord
from evalbridge.core.exceptions import ResolutionError, SerializationError
from evalbridge.core.interfaces.module_cache import IModuleCache
from evalbridge.core.interfaces.module_loader import IModuleLoader
from evalbridge.core.interfaces.serializer import ISerializer

logger = logging.getLogger(__name__)


class EvaluationResponder:
    """Domain service that answers a request for one module.

    Every request runs the same protocol: evict the cached evaluation,
    evaluate the module again from source, serialize the value. The
    responder owns its module cache, so a fresh responder starts with an
    empty cache and closing it drops every cached record.
    """

    def __init__(
        self,
        cache: IModuleCache,
        loader: IModuleLoader,
        serializer: ISerializer,
        config: BridgeConfig | None = None,
    ) -> None:
        """Initialize the responder.

        Args:
            cache: The store for evaluated module records.
            loader: The mechanism that resolves and evaluates modules.
            serializer: The serializer for encoding values.
            config: Optional bridge configuration. Uses defaults if not provided.
        """
        self._cache = cache
        self._loader = loader
        self._serializer = serializer
        self._config = config or BridgeConfig()

        # Statistics
        self._requests = 0
        self._responses = 0
        self._failures = 0

    @property
    def config(self) -> BridgeConfig:
        """Get the bridge configuration."""
        return self._config

    @property
    def cache(self) -> IModuleCache:
        """Get the module cache owned by this responder."""
        return self._cache

    @property
    def stats(self) -> dict[str, int]:
        """Get request statistics.

        Returns:
            Dictionary with requests, responses, and failures.
        """
        return {
            "requests": self._requests,
            "responses": self._responses,
            "failures": self._failures,
        }

    async def respond(self, message: str | bytes) -> bytes | None:
        """Answer one request.

        Args:
            message: The received frame, holding a module identifier.

        Returns:
            The payload to write back, or None when the request failed
            and error responses are disabled.
        """
        self._requests += 1

        try:
            identifier = self._decode_identifier(message)
            record = await self.evaluate(identifier)
            payload = self._encode_value(record.value)
        except (ResolutionError, SerializationError) as e:
            self._failures += 1
            logger.warning("Request failed: %s", e)
            if not self._config.error_responses:
                return None
            return self._encode_error(e)

        self._responses += 1
        return payload

    async def evaluate(self, identifier: str) -> ModuleRecord:
        """Invalidate and freshly evaluate a module.

        The cached record is evicted before evaluation starts, so the
        evaluation never observes state left by an earlier request for
        the same identifier.

        Args:
            identifier: The module identifier.

        Returns:
            The new record, which is also stored in the cache.

        Raises:
            ResolutionError: If the module cannot be resolved or evaluated.
        """
        evicted = await self._cache.delete(identifier)
        self._loader.evict(identifier)
        logger.debug("Invalidated %r (cached=%s)", identifier, evicted)

        start = time.perf_counter()
        if self._config.isolated:
            value, origin = await asyncio.to_thread(self._run_loader, identifier)
        else:
            value, origin = self._run_loader(identifier)
        duration = time.perf_counter() - start

        record = ModuleRecord.create(
            identifier=identifier,
            value=value,
            origin=origin,
            duration=duration,
        )
        await self._cache.set(identifier, record)
        logger.debug("Evaluated %r in %.3fs", identifier, duration)
        return record

    async def close(self) -> None:
        """Release the module cache."""
        await self._cache.clear()

    def _run_loader(self, identifier: str) -> tuple[Any, str | None]:
        try:
            return self._loader.evaluate(identifier)
        except ResolutionError:
            raise
        except (Exception, SystemExit) as e:
            raise ResolutionError(identifier, f"{type(e).__name__}: {e}") from e

    def _decode_identifier(self, message: str | bytes) -> str:
        if isinstance(message, bytes):
            try:
                message = message.decode(self._config.encoding)
            except UnicodeDecodeError as e:
                raise ResolutionError(repr(message[:64]), "identifier is not valid text") from e

        identifier = message.strip()
        if not identifier:
            raise ResolutionError(identifier, "empty identifier")
        return identifier

    def _encode_value(self, value: Any) -> bytes:
        if self._config.error_responses:
            payload = self._serializer.serialize({"ok": True, "value": value})
        else:
            payload = self._serializer.serialize(value)

        limit = self._config.max_frame_bytes
        if len(payload) > limit:
            raise SerializationError(
                f"Payload of {len(payload)} bytes exceeds frame limit of {limit}"
            )
        return payload

    def _encode_error(self, error: Exception) -> bytes:
        return self._serializer.serialize(
            {
                "ok": False,
                "error": {"type": type(error).__name__, "message": str(error)},
            }
        )

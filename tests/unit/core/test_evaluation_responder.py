"""Tests for EvaluationResponder."""

import json
import threading
from typing import Any

import pytest

from evalbridge import (
    BridgeConfig,
    EvaluationResponder,
    InMemoryModuleCache,
    JsonSerializer,
    ModuleRecord,
    ResolutionError,
)


class RecordingCache(InMemoryModuleCache):
    """In-memory cache that records every mutation in a shared log."""

    def __init__(self, log: list[str]) -> None:
        super().__init__()
        self._log = log

    async def set(self, identifier: str, record: ModuleRecord) -> None:
        self._log.append(f"set:{identifier}")
        await super().set(identifier, record)

    async def delete(self, identifier: str) -> bool:
        self._log.append(f"delete:{identifier}")
        return await super().delete(identifier)


class FakeLoader:
    """Loader serving values from a dict, like modules on disk."""

    def __init__(self, log: list[str] | None = None) -> None:
        self.modules: dict[str, Any] = {}
        self.log = log if log is not None else []
        self.threads: list[int] = []
        self.seen_cached: list[bool] = []
        self.cache: InMemoryModuleCache | None = None

    def evict(self, identifier: str) -> None:
        self.log.append(f"evict:{identifier}")

    def evaluate(self, identifier: str) -> tuple[Any, str | None]:
        self.log.append(f"evaluate:{identifier}")
        self.threads.append(threading.get_ident())
        if self.cache is not None:
            self.seen_cached.append(identifier in self.cache._cache)
        if identifier not in self.modules:
            raise ResolutionError(identifier, "no such module")
        value = self.modules[identifier]
        if isinstance(value, BaseException):
            raise value
        return value, f"/modules/{identifier}"


def create_responder(
    config: BridgeConfig | None = None,
) -> tuple[EvaluationResponder, FakeLoader, RecordingCache, list[str]]:
    """Create a responder with a recording cache and fake loader."""
    log: list[str] = []
    cache = RecordingCache(log)
    loader = FakeLoader(log)
    loader.cache = cache
    responder = EvaluationResponder(
        cache=cache,
        loader=loader,
        serializer=JsonSerializer(),
        config=config,
    )
    return responder, loader, cache, log


class TestEvaluationResponder:
    """Tests for the invalidate-evaluate-serialize protocol."""

    async def test_respond_serializes_value(self) -> None:
        """Test that a resolvable identifier produces its JSON payload."""
        responder, loader, _, _ = create_responder()
        loader.modules["pages/index.py"] = {"title": "Home", "tags": ["a", "b"]}

        payload = await responder.respond(b"pages/index.py")

        assert payload is not None
        assert json.loads(payload) == {"title": "Home", "tags": ["a", "b"]}

    async def test_invalidate_before_evaluate(self) -> None:
        """Test that the cache entry is evicted before evaluation starts."""
        responder, loader, _, log = create_responder()
        loader.modules["m"] = 1

        await responder.respond(b"m")
        await responder.respond(b"m")

        assert log == [
            "delete:m", "evict:m", "evaluate:m", "set:m",
            "delete:m", "evict:m", "evaluate:m", "set:m",
        ]
        assert loader.seen_cached == [False, False]

    async def test_source_change_is_picked_up(self) -> None:
        """Test the same identifier yields the new value after a change."""
        responder, loader, _, _ = create_responder()

        loader.modules["a/b.mod"] = 3
        first = await responder.respond(b"a/b.mod")
        loader.modules["a/b.mod"] = 4
        second = await responder.respond(b"a/b.mod")

        assert first == b"3"
        assert second == b"4"

    async def test_evaluate_stores_record(self) -> None:
        """Test that evaluate fills the cache with a fresh record."""
        responder, loader, cache, _ = create_responder()
        loader.modules["m"] = [1, 2]

        record = await responder.evaluate("m")

        assert record.identifier == "m"
        assert record.value == [1, 2]
        assert record.origin == "/modules/m"
        assert record.duration >= 0
        assert await cache.get("m") is record

    async def test_identifier_whitespace_is_stripped(self) -> None:
        """Test that surrounding whitespace is not part of the identifier."""
        responder, loader, _, _ = create_responder()
        loader.modules["m"] = "value"

        payload = await responder.respond(b"  m\r\n")

        assert payload == b'"value"'

    async def test_str_identifier(self) -> None:
        """Test that an already decoded identifier is accepted."""
        responder, loader, _, _ = create_responder()
        loader.modules["m"] = True

        assert await responder.respond("m") == b"true"

    async def test_stats(self) -> None:
        """Test request statistics tracking."""
        responder, loader, _, _ = create_responder()
        loader.modules["m"] = 1

        await responder.respond(b"m")
        await responder.respond(b"missing")

        assert responder.stats == {"requests": 2, "responses": 1, "failures": 1}

    async def test_close_clears_cache(self) -> None:
        """Test that closing the responder drops cached records."""
        responder, loader, cache, _ = create_responder()
        loader.modules["m"] = 1
        await responder.respond(b"m")
        assert len(cache) == 1

        await responder.close()

        assert len(cache) == 0


class TestSilentFailures:
    """Tests for the default policy of answering failures with silence."""

    async def test_unresolvable_identifier(self) -> None:
        """Test that an unknown module produces no response."""
        responder, _, _, _ = create_responder()

        assert await responder.respond(b"missing") is None

    async def test_failure_then_success(self) -> None:
        """Test a valid request after a failed one still succeeds."""
        responder, loader, _, _ = create_responder()
        loader.modules["m"] = 42

        assert await responder.respond(b"missing") is None
        assert await responder.respond(b"m") == b"42"

    async def test_serialization_failure(self) -> None:
        """Test that a non-serializable value produces no response."""
        responder, loader, _, _ = create_responder()
        circular: dict = {}
        circular["self"] = circular
        loader.modules["cycle"] = circular

        assert await responder.respond(b"cycle") is None
        assert responder.stats["failures"] == 1

    async def test_unexpected_loader_error_is_resolution_error(self) -> None:
        """Test that arbitrary loader exceptions are treated as resolution failures."""
        responder, loader, _, _ = create_responder()
        loader.modules["boom"] = RuntimeError("kaboom")

        with pytest.raises(ResolutionError, match="RuntimeError: kaboom"):
            await responder.evaluate("boom")

        assert await responder.respond(b"boom") is None

    async def test_system_exit_is_resolution_error(self) -> None:
        """Test that a module calling sys.exit fails only its own request."""
        responder, loader, _, _ = create_responder()
        loader.modules["quit"] = SystemExit(0)
        loader.modules["m"] = "ok"

        assert await responder.respond(b"quit") is None
        assert await responder.respond(b"m") == b'"ok"'
        assert responder.stats == {"requests": 2, "responses": 1, "failures": 1}

    async def test_payload_over_frame_limit(self) -> None:
        """Test that a value too large for one frame produces no response."""
        responder, loader, _, _ = create_responder(BridgeConfig(max_frame_bytes=16))
        loader.modules["big"] = "x" * 32
        loader.modules["small"] = "x"

        assert await responder.respond(b"big") is None
        assert await responder.respond(b"small") == b'"x"'
        assert responder.stats == {"requests": 2, "responses": 1, "failures": 1}

    async def test_invalid_text(self) -> None:
        """Test that an identifier that is not valid text is dropped."""
        responder, loader, _, _ = create_responder()

        assert await responder.respond(b"\xff\xfe") is None
        assert loader.log == []

    async def test_empty_identifier(self) -> None:
        """Test that an empty identifier is dropped without evaluation."""
        responder, loader, _, _ = create_responder()

        assert await responder.respond(b"  \n") is None
        assert loader.log == []


class TestErrorResponses:
    """Tests for the explicit error envelope policy."""

    async def test_success_envelope(self) -> None:
        """Test that values are wrapped when error responses are enabled."""
        responder, loader, _, _ = create_responder(BridgeConfig(error_responses=True))
        loader.modules["m"] = {"a": 1}

        payload = await responder.respond(b"m")

        assert payload is not None
        assert json.loads(payload) == {"ok": True, "value": {"a": 1}}

    async def test_resolution_error_envelope(self) -> None:
        """Test that resolution failures are reported to the producer."""
        responder, _, _, _ = create_responder(BridgeConfig(error_responses=True))

        payload = await responder.respond(b"missing")

        assert payload is not None
        body = json.loads(payload)
        assert body["ok"] is False
        assert body["error"]["type"] == "ResolutionError"
        assert "missing" in body["error"]["message"]

    async def test_serialization_error_envelope(self) -> None:
        """Test that serialization failures are reported to the producer."""
        responder, loader, _, _ = create_responder(BridgeConfig(error_responses=True))
        loader.modules["nan"] = float("nan")

        payload = await responder.respond(b"nan")

        assert payload is not None
        assert json.loads(payload)["error"]["type"] == "SerializationError"

    async def test_payload_over_frame_limit_envelope(self) -> None:
        """Test that an oversized value is reported instead of sent."""
        config = BridgeConfig(error_responses=True, max_frame_bytes=256)
        responder, loader, _, _ = create_responder(config)
        loader.modules["big"] = "x" * 512

        payload = await responder.respond(b"big")

        assert payload is not None
        error = json.loads(payload)["error"]
        assert error["type"] == "SerializationError"
        assert "exceeds frame limit of 256" in error["message"]


class TestEvaluationModes:
    """Tests for inline and isolated evaluation."""

    async def test_inline_runs_on_loop_thread(self) -> None:
        """Test that inline evaluation runs on the calling thread."""
        responder, loader, _, _ = create_responder(BridgeConfig(evaluation_mode="inline"))
        loader.modules["m"] = 1

        await responder.respond(b"m")

        assert loader.threads == [threading.get_ident()]

    async def test_isolated_runs_in_worker_thread(self) -> None:
        """Test that isolated evaluation runs off the event loop thread."""
        responder, loader, _, _ = create_responder(
            BridgeConfig(evaluation_mode="isolated")
        )
        loader.modules["m"] = 1

        payload = await responder.respond(b"m")

        assert payload == b"1"
        assert loader.threads[0] != threading.get_ident()

    async def test_isolated_failure_is_recovered(self) -> None:
        """Test that failures in a worker thread follow the same policy."""
        responder, _, _, _ = create_responder(BridgeConfig(evaluation_mode="isolated"))

        assert await responder.respond(b"missing") is None

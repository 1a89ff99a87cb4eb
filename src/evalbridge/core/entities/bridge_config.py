"""Bridge configuration entity."""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

DEFAULT_SOCKET_PATH = "/tmp/evalbridge.sock"
DEFAULT_MAX_FRAME_BYTES = 16 * 1024 * 1024

FRAMING_POLICIES = ("length", "newline")
EVALUATION_MODES = ("inline", "isolated")

ENV_PREFIX = "EVALBRIDGE_"


@dataclass
class BridgeConfig:
    """Bridge configuration.

    Controls where the listener binds, how messages are framed on the
    wire, how modules are evaluated and how failed requests are reported.

    Framing:
        "length" prefixes every frame with a 4-byte big-endian size.
        "newline" terminates every frame with a single newline byte.

    Evaluation mode:
        "inline" evaluates modules on the event loop thread, so a slow
        module stalls every connection until it finishes.
        "isolated" evaluates modules in a worker thread.

    Error responses:
        When False, failed requests produce no response at all and the
        producer must apply its own timeout. When True, every response is
        an envelope carrying either the value or the error.
    """

    socket_path: str = DEFAULT_SOCKET_PATH
    framing: str = "length"
    max_frame_bytes: int = DEFAULT_MAX_FRAME_BYTES
    evaluation_mode: str = "inline"
    error_responses: bool = False
    root_dir: Path | None = None
    cache_maxsize: int | None = None  # None keeps entries until evicted
    encoding: str = "utf-8"

    def __post_init__(self) -> None:
        """Normalize and validate field values."""
        if not self.socket_path:
            raise ValueError("socket_path must not be empty")
        if self.framing not in FRAMING_POLICIES:
            raise ValueError(
                f"framing must be one of {FRAMING_POLICIES}, got {self.framing!r}"
            )
        if self.evaluation_mode not in EVALUATION_MODES:
            raise ValueError(
                f"evaluation_mode must be one of {EVALUATION_MODES}, "
                f"got {self.evaluation_mode!r}"
            )
        if self.max_frame_bytes <= 0:
            raise ValueError("max_frame_bytes must be positive")
        if self.cache_maxsize is not None and self.cache_maxsize <= 0:
            raise ValueError("cache_maxsize must be positive or None")
        if self.root_dir is not None:
            self.root_dir = Path(self.root_dir)

    @property
    def isolated(self) -> bool:
        """Whether evaluation runs off the event loop thread."""
        return self.evaluation_mode == "isolated"

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        **overrides: Any,
    ) -> "BridgeConfig":
        """Create a configuration from EVALBRIDGE_* environment variables.

        Explicit keyword overrides win over the environment, which wins
        over the defaults. Overrides set to None are ignored.

        Args:
            environ: Mapping to read from. Defaults to os.environ.
            **overrides: Field values that take precedence.

        Returns:
            A new BridgeConfig instance.
        """
        env = os.environ if environ is None else environ
        values: dict[str, Any] = {}

        for f in fields(cls):
            raw = env.get(ENV_PREFIX + f.name.upper())
            if raw is None or raw == "":
                continue
            values[f.name] = _parse_env_value(f.name, raw)

        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


def _parse_env_value(name: str, raw: str) -> Any:
    if name in ("max_frame_bytes", "cache_maxsize"):
        try:
            return int(raw)
        except ValueError as e:
            raise ValueError(f"{ENV_PREFIX}{name.upper()} must be an integer") from e
    if name == "error_responses":
        return raw.strip().lower() in ("1", "true", "yes", "on")
    if name == "root_dir":
        return Path(raw)
    return raw

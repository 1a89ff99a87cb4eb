"""Core domain layer for evalbridge."""

from evalbridge.core.entities import BridgeConfig, ModuleRecord
from evalbridge.core.exceptions import (
    BindError,
    EvalBridgeError,
    FrameError,
    RemoteError,
    ResolutionError,
    SerializationError,
    TransportError,
)
from evalbridge.core.interfaces import (
    IFrameCodec,
    IModuleCache,
    IModuleLoader,
    ISerializer,
)
from evalbridge.core.services import EvaluationResponder

__all__ = [
    # Entities
    "BridgeConfig",
    "ModuleRecord",
    # Errors
    "EvalBridgeError",
    "BindError",
    "ResolutionError",
    "SerializationError",
    "TransportError",
    "FrameError",
    "RemoteError",
    # Interfaces
    "IModuleCache",
    "IModuleLoader",
    "ISerializer",
    "IFrameCodec",
    # Services
    "EvaluationResponder",
]

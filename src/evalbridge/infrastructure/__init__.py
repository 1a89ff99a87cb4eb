"""Infrastructure layer implementations for evalbridge."""

from evalbridge.infrastructure.backends import InMemoryModuleCache
from evalbridge.infrastructure.loaders import PythonModuleLoader
from evalbridge.infrastructure.serializers import JsonSerializer
from evalbridge.infrastructure.transport import (
    BridgeClient,
    ChannelListener,
    LengthPrefixCodec,
    NewlineDelimitedCodec,
    create_codec,
)

__all__ = [
    "InMemoryModuleCache",
    "PythonModuleLoader",
    "JsonSerializer",
    "ChannelListener",
    "BridgeClient",
    "LengthPrefixCodec",
    "NewlineDelimitedCodec",
    "create_codec",
]

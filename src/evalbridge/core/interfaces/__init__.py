"""Core interfaces (Protocol classes) for evalbridge."""

from evalbridge.core.interfaces.frame_codec import IFrameCodec
from evalbridge.core.interfaces.module_cache import IModuleCache
from evalbridge.core.interfaces.module_loader import IModuleLoader
from evalbridge.core.interfaces.serializer import ISerializer

__all__ = [
    "IModuleCache",
    "IModuleLoader",
    "ISerializer",
    "IFrameCodec",
]

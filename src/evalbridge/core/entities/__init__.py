"""Domain entities for evalbridge."""

from evalbridge.core.entities.bridge_config import (
    DEFAULT_MAX_FRAME_BYTES,
    DEFAULT_SOCKET_PATH,
    BridgeConfig,
)
from evalbridge.core.entities.module_record import ModuleRecord

__all__ = [
    "BridgeConfig",
    "ModuleRecord",
    "DEFAULT_SOCKET_PATH",
    "DEFAULT_MAX_FRAME_BYTES",
]

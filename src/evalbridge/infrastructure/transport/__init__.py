"""Unix socket transport for evalbridge."""

from evalbridge.infrastructure.transport.client import BridgeClient
from evalbridge.infrastructure.transport.framing import (
    LengthPrefixCodec,
    NewlineDelimitedCodec,
    create_codec,
)
from evalbridge.infrastructure.transport.listener import ChannelListener

__all__ = [
    "ChannelListener",
    "BridgeClient",
    "LengthPrefixCodec",
    "NewlineDelimitedCodec",
    "create_codec",
]

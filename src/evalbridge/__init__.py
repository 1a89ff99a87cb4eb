"""evalbridge - serve freshly evaluated Python modules over a local socket.

A long-running bridge process that lets a build or preview tool written
in another language ask for the current value of a module. Every request
evicts the cached evaluation of that module, evaluates it again from
source and sends back its JSON serialization, so edits to the module are
picked up without restarting the process.

Example:
    import asyncio
    from evalbridge import BridgeConfig, create_listener

    config = BridgeConfig(
        socket_path="/tmp/site.sock",
        root_dir="site/pages",
        evaluation_mode="isolated",
    )

    async def main() -> None:
        async with create_listener(config) as listener:
            await listener.serve_forever()

    asyncio.run(main())

Requesting a module from Python:
    from evalbridge import BridgeClient

    async with BridgeClient("/tmp/site.sock", timeout=5.0) as client:
        data = await client.request("index.py")

A module's value is its ``default`` attribute when it defines one,
otherwise a mapping of its public, non-callable names.
"""

from evalbridge.bridge import create_listener, create_responder, serve
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
from evalbridge.infrastructure import (
    BridgeClient,
    ChannelListener,
    InMemoryModuleCache,
    JsonSerializer,
    LengthPrefixCodec,
    NewlineDelimitedCodec,
    PythonModuleLoader,
    create_codec,
)

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Core entities
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
    # Core interfaces
    "IModuleCache",
    "IModuleLoader",
    "ISerializer",
    "IFrameCodec",
    # Core services
    "EvaluationResponder",
    # Infrastructure implementations
    "InMemoryModuleCache",
    "PythonModuleLoader",
    "JsonSerializer",
    "LengthPrefixCodec",
    "NewlineDelimitedCodec",
    "create_codec",
    # Transport
    "ChannelListener",
    "BridgeClient",
    # Factories
    "create_responder",
    "create_listener",
    "serve",
]

"""Factories that wire the default bridge components together."""

from evalbridge.core.entities.bridge_config import BridgeConfig
from evalbridge.core.services.evaluation_responder import EvaluationResponder
from evalbridge.infrastructure.backends.memory import InMemoryModuleCache
from evalbridge.infrastructure.loaders.python import PythonModuleLoader
from evalbridge.infrastructure.serializers.json import JsonSerializer
from evalbridge.infrastructure.transport.listener import ChannelListener


def create_responder(config: BridgeConfig | None = None) -> EvaluationResponder:
    """Create a responder with a fresh cache, Python loader and JSON serializer.

    Args:
        config: Optional bridge configuration. Uses defaults if not provided.

    Returns:
        A new EvaluationResponder that owns a new, empty module cache.
    """
    config = config or BridgeConfig()
    return EvaluationResponder(
        cache=InMemoryModuleCache(maxsize=config.cache_maxsize),
        loader=PythonModuleLoader(root_dir=config.root_dir),
        serializer=JsonSerializer(encoding=config.encoding),
        config=config,
    )


def create_listener(config: BridgeConfig | None = None) -> ChannelListener:
    """Create a listener serving a default responder.

    Args:
        config: Optional bridge configuration. Uses defaults if not provided.

    Returns:
        A ChannelListener that is not started yet.
    """
    config = config or BridgeConfig()
    return ChannelListener(create_responder(config), config=config)


async def serve(config: BridgeConfig | None = None) -> None:
    """Run a bridge until cancelled.

    Raises:
        BindError: If the endpoint is unavailable.
    """
    listener = create_listener(config)
    try:
        await listener.serve_forever()
    finally:
        await listener.responder.close()

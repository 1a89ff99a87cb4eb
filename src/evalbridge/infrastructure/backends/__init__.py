"""Module cache backends."""

from evalbridge.infrastructure.backends.memory import InMemoryModuleCache

__all__ = ["InMemoryModuleCache"]

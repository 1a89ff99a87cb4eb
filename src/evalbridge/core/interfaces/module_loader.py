"""Module loader interface."""

from typing import Any, Protocol


class IModuleLoader(Protocol):
    """Contract for the mechanism that resolves and evaluates modules.

    Loaders are synchronous: the responder decides whether a call runs
    on the event loop thread or in a worker thread.
    """

    def evict(self, identifier: str) -> None:
        """Drop any copy of the module the loader itself keeps.

        Args:
            identifier: The module identifier.
        """
        ...

    def evaluate(self, identifier: str) -> tuple[Any, str | None]:
        """Resolve and evaluate a module from source.

        Args:
            identifier: The module identifier.

        Returns:
            The value produced by the module and its resolved origin
            (a file path, or None when the loader cannot tell).

        Raises:
            ResolutionError: If the module cannot be found or raises
                while being evaluated.
        """
        ...

"""Module cache interface."""

from typing import Protocol

from evalbridge.core.entities.module_record import ModuleRecord


class IModuleCache(Protocol):
    """Contract for stores that hold evaluated module records.

    The responder owns exactly one cache and is the only component that
    mutates it. Methods are async so stores with their own I/O can be
    plugged in without changing the responder.
    """

    async def get(self, identifier: str) -> ModuleRecord | None:
        """Retrieve the record for an identifier.

        Args:
            identifier: The module identifier.

        Returns:
            The cached record, or None if the module is not cached.
        """
        ...

    async def set(self, identifier: str, record: ModuleRecord) -> None:
        """Store the record for an identifier, replacing any previous one.

        Args:
            identifier: The module identifier.
            record: The freshly evaluated record.
        """
        ...

    async def delete(self, identifier: str) -> bool:
        """Evict the record for an identifier.

        Args:
            identifier: The module identifier.

        Returns:
            True if a record existed and was evicted, False otherwise.
        """
        ...

    async def exists(self, identifier: str) -> bool:
        """Check whether an identifier is cached."""
        ...

    async def clear(self) -> None:
        """Evict every record."""
        ...

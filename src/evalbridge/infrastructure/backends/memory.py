"""In-memory module cache implementation."""

import math

from cachetools import Cache, LRUCache  # type: ignore[import-untyped]

from evalbridge.core.entities.module_record import ModuleRecord


class InMemoryModuleCache:
    """In-memory store for evaluated module records.

    Unbounded by default, so a record stays until a later request for
    the same identifier evicts it. With a maxsize the store becomes an
    LRU cache; a record dropped for space is simply re-evaluated on its
    next request.
    """

    def __init__(self, maxsize: int | None = None) -> None:
        """Initialize the in-memory module cache.

        Args:
            maxsize: Maximum number of records, or None for no limit.
        """
        self._maxsize = maxsize
        self._cache: Cache[str, ModuleRecord]
        if maxsize is None:
            self._cache = Cache(maxsize=math.inf)
        else:
            self._cache = LRUCache(maxsize=maxsize)

    async def get(self, identifier: str) -> ModuleRecord | None:
        """Retrieve the record for an identifier.

        Args:
            identifier: The module identifier.

        Returns:
            The cached record, or None if the module is not cached.
        """
        return self._cache.get(identifier)

    async def set(self, identifier: str, record: ModuleRecord) -> None:
        """Store the record for an identifier.

        Args:
            identifier: The module identifier.
            record: The freshly evaluated record.
        """
        self._cache[identifier] = record

    async def delete(self, identifier: str) -> bool:
        """Evict the record for an identifier.

        Args:
            identifier: The module identifier.

        Returns:
            True if a record existed and was evicted, False otherwise.
        """
        try:
            del self._cache[identifier]
            return True
        except KeyError:
            return False

    async def exists(self, identifier: str) -> bool:
        """Check whether an identifier is cached."""
        return identifier in self._cache

    async def clear(self) -> None:
        """Evict every record."""
        self._cache.clear()

    def __len__(self) -> int:
        """Return the number of cached records."""
        return len(self._cache)

    @property
    def maxsize(self) -> int | None:
        """Return the maximum size of the cache, None if unbounded."""
        return self._maxsize

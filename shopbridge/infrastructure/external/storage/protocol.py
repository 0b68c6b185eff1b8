"""Storage service protocol (DIP). Implementations: PlatformFileStorage, BucketFileStorage."""

from typing import Protocol

from shopbridge.domain.value_objects import ListOptions, ListPage, StoredFile


class StorageProtocol(Protocol):
    """Protocol for file storage backends (platform Files API, S3-compatible bucket).

    An entry is visible to get/has/list only once fully committed.
    """

    async def get(self, key: str) -> StoredFile | None:
        """Return content and metadata, or None if the key is absent."""
        ...

    async def has(self, key: str) -> bool:
        """Return True if the key exists. Does not download content."""
        ...

    async def list(self, options: ListOptions | None = None) -> ListPage:
        """Return one page of entries, prefix-filtered and cursor-paginated."""
        ...

    async def put(self, key: str, file: StoredFile) -> StoredFile:
        """Store ``file`` at ``key``, replacing any existing entry."""
        ...

    async def set(self, key: str, file: StoredFile) -> None:
        """Like put, discarding the result."""
        ...

    async def remove(self, key: str) -> None:
        """Delete the entry at ``key``.

        The platform backend raises FileNotFoundException for unknown keys;
        the bucket backend treats them as already removed.
        """
        ...

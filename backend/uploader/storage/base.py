"""Abstract ObjectStore interface."""
from abc import ABC, abstractmethod


class ObjectStore(ABC):
    """Bucket-scoped blob store with presigned read access.

    Implementations must be thread-safe: the pipeline calls them from
    FastAPI's thread-pool executor, one call per concurrent request.
    """

    @property
    @abstractmethod
    def bucket(self) -> str:
        """Name of the bucket all keys live in."""

    @abstractmethod
    def put_object(self, key: str, body: bytes, content_type: str) -> None:
        """Store ``body`` under ``key`` as a private object.

        An existing object with the same key is replaced.

        Raises:
            StorageWriteError: If the store is unreachable or rejects the write.
        """

    @abstractmethod
    def presigned_get_url(self, key: str, expires_in: int) -> str:
        """Return a URL granting read access to ``key`` for ``expires_in`` seconds.

        Raises:
            UrlGenerationError: If no URL can be produced.
        """

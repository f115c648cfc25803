from abc import ABC, abstractmethod


class BaseStorage(ABC):
    """
    Abstract base class for object storage.

    Objects are addressed by a slash separated key when written and by an
    opaque reference URI once stored. References are returned by ``upload``
    and accepted by ``download`` and ``delete``.
    """

    @abstractmethod
    def upload(self, data: bytes, key: str) -> str:
        """Store ``data`` under ``key`` (overwriting) and return its reference.

        Raises:
            RuntimeError: If the upload fails.
        """

    @abstractmethod
    def download(self, ref: str) -> bytes:
        """Return the bytes stored at ``ref``.

        Raises:
            RuntimeError: If the object cannot be read.
        """

    @abstractmethod
    def delete(self, ref: str) -> None:
        """Delete the object at ``ref``. Deleting a missing object is not an error.

        Raises:
            RuntimeError: If the backend refuses the deletion.
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an object is stored under ``key``."""

    @abstractmethod
    def make_ref(self, key: str) -> str:
        """Return the reference an object stored under ``key`` has (or would have)."""

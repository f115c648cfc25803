"""
Object storage backends for synthesized audio.

``LocalStorage`` keeps objects on disk (development, tests) and
``CloudStorage`` talks to an S3 compatible bucket. Both implement the
``BaseStorage`` upload/download/delete/exists interface.
"""

from .base import BaseStorage
from .cloud import CloudStorage
from .local import LocalStorage


def get_storage(backend: str = "local", local_root: str = "data/storage") -> BaseStorage:
    """Return the storage backend named ``backend`` ("local" or "cloud")."""
    if backend == "cloud":
        return CloudStorage()
    if backend == "local":
        return LocalStorage(local_root)
    raise ValueError(f"Unknown storage backend: {backend}")


__all__ = [
    "BaseStorage",
    "CloudStorage",
    "LocalStorage",
    "get_storage",
]

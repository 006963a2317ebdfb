"""Task storage backends and the factory that picks one at startup."""

import logging

from google.cloud.storage import Client

from todo_backend.config import Settings
from todo_backend.storage.base import StorageBackend
from todo_backend.storage.gcs import GCSStorage
from todo_backend.storage.memory import InMemoryStorage

logger = logging.getLogger(__name__)

__all__ = ["GCSStorage", "InMemoryStorage", "StorageBackend", "build_storage"]


def build_storage(settings: Settings) -> StorageBackend:
    """Build the backend selected by ``settings``.

    The remote client picks up ambient credentials (workload identity or
    application default credentials).
    """
    if settings.use_local_storage:
        logger.info("Using in-memory storage for local development")
        return InMemoryStorage()

    client = Client()
    logger.info("Using Google Cloud Storage bucket %s", settings.bucket_name)
    return GCSStorage(client, settings.bucket_name, timeout=settings.storage_timeout)

"""Google Cloud Storage task backend.

Each task is one JSON object named ``task-<id>.json`` in the configured
bucket. The client is injected so tests can pass a fake and production can
pass a client built from ambient credentials.

No call is retried: every request passes ``retry=None`` and a per-call
timeout, so a failed remote call surfaces immediately.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions

from todo_backend.errors import (
    StorageInternalError,
    StoragePermissionDenied,
    TaskNotFound,
)
from todo_backend.models import Task
from todo_backend.storage.base import StorageBackend

logger = logging.getLogger(__name__)

TASK_OBJECT_PREFIX = "task-"
TASK_OBJECT_SUFFIX = ".json"
CONTENT_TYPE = "application/json"
CONSOLE_URL = "https://console.cloud.google.com/storage/browser/{bucket}"

# Transport-level failures (connection resets, timeouts, credential refresh)
# arrive as OSError subclasses from requests or as google-auth errors.
_TRANSPORT_ERRORS = (
    api_exceptions.GoogleAPIError,
    auth_exceptions.GoogleAuthError,
    OSError,
)


def object_name(task_id: str) -> str:
    return f"{TASK_OBJECT_PREFIX}{task_id}{TASK_OBJECT_SUFFIX}"


def console_url(bucket_name: str) -> str:
    return CONSOLE_URL.format(bucket=bucket_name)


@contextmanager
def _api_errors(action: str, task_id: str | None = None) -> Iterator[None]:
    """Translate google client exceptions into classified storage errors.

    A ``NotFound`` only means a missing task when the call addressed one;
    otherwise (missing bucket on list or create) it is an internal error.
    """
    try:
        yield
    except api_exceptions.NotFound as exc:
        if task_id is None:
            raise StorageInternalError(f"{action}: {exc.message}") from exc
        raise TaskNotFound(task_id) from exc
    except (api_exceptions.Forbidden, api_exceptions.Unauthorized) as exc:
        raise StoragePermissionDenied(f"{action}: {exc.message}", task_id=task_id) from exc
    except _TRANSPORT_ERRORS as exc:
        raise StorageInternalError(f"{action}: {exc}", task_id=task_id) from exc


class GCSStorage(StorageBackend):
    """One object per task in a Cloud Storage bucket."""

    mode = "google-cloud-storage"

    def __init__(self, client, bucket_name: str, *, timeout: float = 30.0) -> None:
        self._client = client
        self._bucket = client.bucket(bucket_name)
        self.bucket_name = bucket_name
        self._timeout = timeout

    def _blob(self, task_id: str):
        return self._bucket.blob(object_name(task_id))

    def list_tasks(self) -> list[Task]:
        """Read every task object under the prefix.

        Objects that cannot be downloaded or decoded are logged and skipped
        so one corrupt record does not break the whole listing.
        """
        tasks: list[Task] = []
        with _api_errors("listing tasks"):
            blobs = self._client.list_blobs(
                self.bucket_name,
                prefix=TASK_OBJECT_PREFIX,
                timeout=self._timeout,
                retry=None,
            )
            for blob in blobs:
                task = self._read_listed(blob)
                if task is not None:
                    tasks.append(task)
        return tasks

    def _read_listed(self, blob) -> Task | None:
        # Any failure on a single object (including checksum mismatches from
        # the media layer) skips that object rather than the whole listing.
        try:
            payload = blob.download_as_bytes(timeout=self._timeout, retry=None)
        except Exception as exc:
            logger.warning("Error reading object %s: %s", blob.name, exc)
            return None
        try:
            return Task.model_validate_json(payload)
        except ValueError as exc:
            logger.warning("Error decoding task %s: %s", blob.name, exc)
            return None

    def create_task(self, task: Task) -> None:
        blob = self._blob(task.id)
        with _api_errors(f"writing {blob.name}"):
            blob.upload_from_string(
                task.to_json(),
                content_type=CONTENT_TYPE,
                timeout=self._timeout,
                retry=None,
            )

    def update_task(self, task: Task) -> None:
        # Objects are replaced whole; the caller supplies the merged task.
        self.create_task(task)

    def delete_task(self, task_id: str) -> None:
        blob = self._blob(task_id)
        with _api_errors(f"deleting {blob.name}", task_id):
            blob.reload(timeout=self._timeout, retry=None)
            blob.delete(timeout=self._timeout, retry=None)

    def get_task(self, task_id: str) -> Task:
        blob = self._blob(task_id)
        with _api_errors(f"reading {blob.name}", task_id):
            payload = blob.download_as_bytes(timeout=self._timeout, retry=None)
        try:
            return Task.model_validate_json(payload)
        except ValueError as exc:
            logger.warning("Error decoding task %s: %s", blob.name, exc)
            raise TaskNotFound(task_id) from exc

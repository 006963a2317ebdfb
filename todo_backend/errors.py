"""Error taxonomy shared by the storage backends and the API layer.

Every storage failure carries an :class:`ErrorKind` tag set where it is
raised. The API layer maps the tag to an HTTP status and never looks at the
message text.
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    INTERNAL = "internal"


class StorageError(Exception):
    """Base class for failures reported by a storage backend."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str, *, task_id: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.task_id = task_id


class TaskNotFound(StorageError):
    """The operation targeted an id that is not in the store."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, task_id: str) -> None:
        super().__init__(f"task {task_id} not found", task_id=task_id)


class StoragePermissionDenied(StorageError):
    kind = ErrorKind.PERMISSION_DENIED


class StorageInternalError(StorageError):
    kind = ErrorKind.INTERNAL


class ConfigError(Exception):
    """Raised at startup when the environment describes an unusable setup."""

"""Storage backend interface.

Both backends satisfy the same contract:

- ``create_task`` overwrites silently when the id already exists.
- ``update_task`` replaces the whole stored task with the one given.
- ``update_task``, ``delete_task`` and ``get_task`` raise
  :class:`~todo_backend.errors.TaskNotFound` for an absent id.
- Remote failures are raised as ``StoragePermissionDenied`` or
  ``StorageInternalError``.

All operations are blocking; the API layer calls them from a worker thread.
"""

from abc import ABC, abstractmethod

from todo_backend.models import Task


class StorageBackend(ABC):
    """Abstract interface for task persistence."""

    #: Short identifier reported by the health and bucket-info endpoints.
    mode: str = ""
    #: Bucket holding the tasks, or None when nothing is stored remotely.
    bucket_name: str | None = None

    @abstractmethod
    def list_tasks(self) -> list[Task]:
        """Return every stored task, in no particular order."""

    @abstractmethod
    def create_task(self, task: Task) -> None:
        """Store a new task, replacing any task with the same id."""

    @abstractmethod
    def update_task(self, task: Task) -> None:
        """Overwrite an existing task with ``task``."""

    @abstractmethod
    def delete_task(self, task_id: str) -> None:
        """Remove a task permanently."""

    @abstractmethod
    def get_task(self, task_id: str) -> Task:
        """Fetch a single task by id."""

"""In-memory task storage.

Used for local development and tests. State lives for the lifetime of the
process and is never persisted.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager

from todo_backend.errors import TaskNotFound
from todo_backend.models import Task
from todo_backend.storage.base import StorageBackend


class ReadWriteLock:
    """Many concurrent readers or a single writer.

    Waiting writers block new readers so a steady stream of reads cannot
    starve a write.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class InMemoryStorage(StorageBackend):
    """Dict-backed task storage guarded by a reader/writer lock."""

    mode = "in-memory"

    def __init__(self) -> None:
        """Initialize an empty task store."""
        self._tasks: dict[str, Task] = {}
        self._lock = ReadWriteLock()

    def list_tasks(self) -> list[Task]:
        with self._lock.read():
            return list(self._tasks.values())

    def get_task(self, task_id: str) -> Task:
        with self._lock.read():
            task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFound(task_id)
        return task

    def create_task(self, task: Task) -> None:
        with self._lock.write():
            self._tasks[task.id] = task

    def update_task(self, task: Task) -> None:
        with self._lock.write():
            if task.id not in self._tasks:
                raise TaskNotFound(task.id)
            self._tasks[task.id] = task

    def delete_task(self, task_id: str) -> None:
        with self._lock.write():
            if task_id not in self._tasks:
                raise TaskNotFound(task_id)
            del self._tasks[task_id]

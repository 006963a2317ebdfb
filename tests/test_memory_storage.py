"""Tests for the in-memory storage backend."""

import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import UTC, datetime
from uuid import uuid4

import pytest

from todo_backend.errors import ErrorKind, TaskNotFound
from todo_backend.models import Task
from todo_backend.storage import InMemoryStorage
from todo_backend.storage.memory import ReadWriteLock


def make_task(text: str = "task", completed: bool = False, task_id: str | None = None) -> Task:
    return Task(
        id=task_id or str(uuid4()),
        text=text,
        completed=completed,
        created_at=datetime.now(UTC),
    )


def test_create_and_get(storage: InMemoryStorage) -> None:
    task = make_task("buy milk")
    storage.create_task(task)
    assert storage.get_task(task.id) == task


def test_create_overwrites_existing_id(storage: InMemoryStorage) -> None:
    first = make_task("first", task_id="same")
    second = make_task("second", task_id="same")
    storage.create_task(first)
    storage.create_task(second)

    assert storage.list_tasks() == [second]


def test_update_replaces_task(storage: InMemoryStorage) -> None:
    task = make_task("old")
    storage.create_task(task)

    updated = task.model_copy(update={"text": "new", "completed": True})
    storage.update_task(updated)
    assert storage.get_task(task.id) == updated


@pytest.mark.parametrize("op", ["get", "update", "delete"])
def test_missing_id_raises_not_found(storage: InMemoryStorage, op: str) -> None:
    task = make_task()
    with pytest.raises(TaskNotFound) as excinfo:
        if op == "get":
            storage.get_task(task.id)
        elif op == "update":
            storage.update_task(task)
        else:
            storage.delete_task(task.id)
    assert excinfo.value.kind is ErrorKind.NOT_FOUND
    assert excinfo.value.task_id == task.id


def test_update_does_not_create(storage: InMemoryStorage) -> None:
    with pytest.raises(TaskNotFound):
        storage.update_task(make_task())
    assert storage.list_tasks() == []


def test_delete_removes_task(storage: InMemoryStorage) -> None:
    task = make_task()
    storage.create_task(task)
    storage.delete_task(task.id)

    assert storage.list_tasks() == []
    with pytest.raises(TaskNotFound):
        storage.get_task(task.id)


def test_concurrent_creates(storage: InMemoryStorage) -> None:
    tasks = [make_task(f"task {i}") for i in range(200)]

    with ThreadPoolExecutor(max_workers=16) as pool:
        list(pool.map(storage.create_task, tasks))

    listed = storage.list_tasks()
    assert len(listed) == 200
    assert {t.id for t in listed} == {t.id for t in tasks}


def test_concurrent_reads_and_writes(storage: InMemoryStorage) -> None:
    seed = make_task("seed")
    storage.create_task(seed)

    def toggle(i: int) -> None:
        storage.update_task(seed.model_copy(update={"completed": i % 2 == 0}))
        storage.get_task(seed.id)
        storage.list_tasks()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(toggle, range(100)))

    assert storage.get_task(seed.id).text == "seed"


def test_rw_lock_allows_parallel_readers() -> None:
    lock = ReadWriteLock()
    both_inside = threading.Barrier(2, timeout=5)

    def reader() -> None:
        with lock.read():
            both_inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(2)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


def test_rw_lock_writer_excludes_readers() -> None:
    lock = ReadWriteLock()
    events: list[str] = []
    writer_inside = threading.Event()
    release_writer = threading.Event()

    def writer() -> None:
        with lock.write():
            writer_inside.set()
            release_writer.wait(timeout=5)
            events.append("write done")

    def reader() -> None:
        with lock.read():
            events.append("read")

    w = threading.Thread(target=writer)
    w.start()
    assert writer_inside.wait(timeout=5)
    r = threading.Thread(target=reader)
    r.start()
    r.join(timeout=0.1)
    assert events == []

    release_writer.set()
    w.join(timeout=5)
    r.join(timeout=5)
    assert events == ["write done", "read"]

"""Pytest fixtures for the To-Do API tests."""

import pytest
from fastapi.testclient import TestClient

from todo_backend.main import create_app
from todo_backend.storage import GCSStorage, InMemoryStorage

from .fakes import FakeGCSClient


@pytest.fixture
def storage() -> InMemoryStorage:
    """A fresh in-memory backend per test."""
    return InMemoryStorage()


@pytest.fixture
def client(storage: InMemoryStorage) -> TestClient:
    """Create a test client for the API."""
    return TestClient(create_app(storage))


@pytest.fixture
def gcs_client() -> FakeGCSClient:
    return FakeGCSClient("todo-bucket")


@pytest.fixture
def gcs_storage(gcs_client: FakeGCSClient) -> GCSStorage:
    return GCSStorage(gcs_client, "todo-bucket", timeout=5.0)


@pytest.fixture
def remote_client(gcs_storage: GCSStorage) -> TestClient:
    """Test client whose app persists through the fake Cloud Storage client."""
    return TestClient(create_app(gcs_storage))

"""Pytest fixtures for the Task Service tests."""

import fakeredis
import pytest
from fastapi.testclient import TestClient

from task_service.main import create_app
from task_service.redis_store import RedisTaskRepository
from task_service.store import InMemoryTaskRepository, TaskRepository


@pytest.fixture
def redis_server() -> fakeredis.FakeServer:
    """An isolated fake Redis server. Set ``connected = False`` to simulate an outage."""
    return fakeredis.FakeServer()


@pytest.fixture
def redis_client(redis_server: fakeredis.FakeServer) -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(server=redis_server, decode_responses=True)


@pytest.fixture
def memory_repository() -> InMemoryTaskRepository:
    return InMemoryTaskRepository()


@pytest.fixture
def redis_repository(redis_client: fakeredis.FakeRedis) -> RedisTaskRepository:
    return RedisTaskRepository(redis_client)


@pytest.fixture(params=["memory", "redis"])
def repository(request: pytest.FixtureRequest) -> TaskRepository:
    """Each backend in turn; both must behave identically."""
    return request.getfixturevalue(f"{request.param}_repository")


@pytest.fixture
def client(repository: TaskRepository) -> TestClient:
    """Create a test client for the API."""
    return TestClient(create_app(repository=repository))

"""Task storage.

``TaskRepository`` is the interface the API talks to. Two backends implement
it: ``InMemoryTaskRepository`` below, and ``RedisTaskRepository`` in
``task_service.redis_store``. Pick one at startup with ``create_repository``.
"""

import logging
from abc import ABC, abstractmethod
from datetime import UTC, datetime
from uuid import uuid4

from task_service.config import Settings
from task_service.models import Task, TaskRequest
from task_service.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)


class TaskRepository(ABC):
    """CRUD over tasks.

    Absence is reported as ``None`` from ``get`` and ``update``; backend
    faults raise ``StorageError``. The two are never mixed.
    """

    @abstractmethod
    def create(self, data: TaskRequest) -> Task:
        """Store a new task with a fresh id and timestamps, and return it."""

    @abstractmethod
    def get(self, task_id: str) -> Task | None:
        """Get a task by its ID, or None if not found."""

    @abstractmethod
    def list_all(self) -> list[Task]:
        """Return every stored task, in no particular order."""

    @abstractmethod
    def update(self, task_id: str, data: TaskRequest) -> Task | None:
        """Replace title, description and status of an existing task.

        Returns None, without writing anything, if the task does not exist.
        """

    @abstractmethod
    def delete(self, task_id: str) -> None:
        """Delete a task. Deleting a missing task is not an error."""

    def close(self) -> None:
        """Release backend resources. No-op unless the backend holds any."""


def new_task(data: TaskRequest) -> Task:
    now = datetime.now(UTC)
    return Task(
        id=str(uuid4()),
        title=data.title,
        description=data.description,
        status=data.status,
        created_at=now,
        updated_at=now,
    )


def updated_task(existing: Task, data: TaskRequest) -> Task:
    """Return ``existing`` with its mutable fields replaced.

    ``updated_at`` never moves backwards, even if the wall clock does.
    """
    return existing.model_copy(
        update={
            "title": data.title,
            "description": data.description,
            "status": data.status,
            "updated_at": max(datetime.now(UTC), existing.updated_at),
        }
    )


class InMemoryTaskRepository(TaskRepository):
    """Volatile task storage held in process memory."""

    def __init__(self) -> None:
        self._tasks: dict[str, Task] = {}
        self._lock = ReadWriteLock()

    def create(self, data: TaskRequest) -> Task:
        task = new_task(data)
        with self._lock.write_locked():
            self._tasks[task.id] = task
        logger.debug("Created task id=%s", task.id)
        return task

    def get(self, task_id: str) -> Task | None:
        with self._lock.read_locked():
            return self._tasks.get(task_id)

    def list_all(self) -> list[Task]:
        with self._lock.read_locked():
            return list(self._tasks.values())

    def update(self, task_id: str, data: TaskRequest) -> Task | None:
        with self._lock.write_locked():
            existing = self._tasks.get(task_id)
            if existing is None:
                return None
            task = updated_task(existing, data)
            self._tasks[task_id] = task
        logger.debug("Updated task id=%s", task_id)
        return task

    def delete(self, task_id: str) -> None:
        with self._lock.write_locked():
            if self._tasks.pop(task_id, None) is not None:
                logger.debug("Deleted task id=%s", task_id)

    def clear(self) -> None:
        """Clear all tasks. Useful for testing."""
        with self._lock.write_locked():
            self._tasks.clear()


def create_repository(settings: Settings) -> TaskRepository:
    """Build the backend named by ``settings.backend``.

    Raises:
        ValueError: If the backend name is unsupported or the Redis URL is
            malformed.
        StorageError: If the Redis backend cannot reach its server.
    """
    backend = settings.backend.lower()

    if backend == "memory":
        logger.info("Using in-memory task storage")
        return InMemoryTaskRepository()
    if backend == "redis":
        from task_service.redis_store import RedisTaskRepository

        return RedisTaskRepository.from_url(
            settings.redis_url,
            key=settings.redis_key,
            socket_timeout=settings.redis_socket_timeout,
        )

    raise ValueError(f"Unsupported task backend: {backend!r}. Supported: memory, redis")

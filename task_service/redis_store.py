"""Redis-backed task storage.

All tasks live in a single Redis hash: the field is the task id and the value
is the task's JSON encoding.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis
from pydantic import ValidationError

from task_service.errors import StorageError
from task_service.models import Task, TaskRequest
from task_service.rwlock import ReadWriteLock
from task_service.store import TaskRepository, new_task, updated_task

logger = logging.getLogger(__name__)

DEFAULT_KEY = "tasks"


def encode_task(task: Task) -> str:
    return task.model_dump_json()


def decode_task(raw: str | bytes) -> Task:
    return Task.model_validate_json(raw)


@contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    """Re-raise Redis and decoding failures as ``StorageError``."""
    try:
        yield
    except redis.RedisError as exc:
        raise StorageError(f"Redis error while trying to {action}: {exc}") from exc
    except (ValidationError, UnicodeDecodeError) as exc:
        raise StorageError(f"Stored task could not be decoded while trying to {action}") from exc


class RedisTaskRepository(TaskRepository):
    """Task storage in a Redis hash.

    The client is checked with PING on construction and reused for every
    call. Operations also take a process-local reader/writer lock so that
    check-then-write sequences are not interleaved with other requests
    handled by this process.
    """

    def __init__(self, client: redis.Redis, key: str = DEFAULT_KEY) -> None:
        self._client = client
        self._key = key
        self._lock = ReadWriteLock()
        with _storage_errors("connect"):
            client.ping()
        logger.info("RedisTaskRepository ready key=%s", key)

    @classmethod
    def from_url(
        cls,
        url: str,
        key: str = DEFAULT_KEY,
        socket_timeout: float | None = None,
    ) -> "RedisTaskRepository":
        """Connect to the Redis server at ``url``, e.g. ``redis://localhost:6379/0``.

        Raises:
            ValueError: If ``url`` is not a valid Redis URL.
            StorageError: If the server does not answer PING.
        """
        logger.info("Connecting to Redis at %s", _redact(url))
        with _storage_errors("connect"):
            client = redis.Redis.from_url(
                url,
                decode_responses=False,
                socket_timeout=socket_timeout,
                socket_connect_timeout=socket_timeout,
            )
        return cls(client, key=key)

    def create(self, data: TaskRequest) -> Task:
        task = new_task(data)
        with self._lock.write_locked(), _storage_errors("create task"):
            self._client.hset(self._key, task.id, encode_task(task))
        logger.debug("Created task id=%s", task.id)
        return task

    def get(self, task_id: str) -> Task | None:
        with self._lock.read_locked(), _storage_errors("get task"):
            raw = self._client.hget(self._key, task_id)
            if raw is None:
                return None
            return decode_task(raw)

    def list_all(self) -> list[Task]:
        with self._lock.read_locked(), _storage_errors("list tasks"):
            raw_tasks = self._client.hgetall(self._key)
            return [decode_task(raw) for raw in raw_tasks.values()]

    def update(self, task_id: str, data: TaskRequest) -> Task | None:
        with self._lock.write_locked(), _storage_errors("update task"):
            # The stored record is the source of created_at.
            raw = self._client.hget(self._key, task_id)
            if raw is None:
                return None
            task = updated_task(decode_task(raw), data)
            self._client.hset(self._key, task_id, encode_task(task))
        logger.debug("Updated task id=%s", task_id)
        return task

    def delete(self, task_id: str) -> None:
        with self._lock.write_locked(), _storage_errors("delete task"):
            if not self._client.hexists(self._key, task_id):
                return
            self._client.hdel(self._key, task_id)
        logger.debug("Deleted task id=%s", task_id)

    def clear(self) -> None:
        """Drop the whole hash. Useful for testing."""
        with self._lock.write_locked(), _storage_errors("clear tasks"):
            self._client.delete(self._key)

    def close(self) -> None:
        self._client.close()


def _redact(url: str) -> str:
    """Hide the password in a redis:// URL before logging it."""
    scheme, sep, rest = url.partition("://")
    if not sep or "@" not in rest:
        return url
    creds, _, host = rest.rpartition("@")
    user = creds.partition(":")[0]
    return f"{scheme}://{user}:***@{host}"

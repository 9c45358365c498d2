"""Settings loaded from environment variables.

One ``Settings`` object is built at startup with ``Settings.from_env()`` and
passed to ``create_app``. Nothing is read from the environment at import time.
"""

import os
from dataclasses import dataclass, field

DEFAULT_REDIS_URL = "redis://localhost:6379"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None or v.strip() == "" else v.strip()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_list(name: str, default: list[str]) -> list[str]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [p.strip() for p in raw.replace(",", " ").split() if p.strip()]


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- Storage ----
    backend: str = "memory"
    redis_url: str = DEFAULT_REDIS_URL
    redis_key: str = "tasks"
    redis_socket_timeout: float = 5.0

    # ---- HTTP ----
    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:3000"])

    # ---- Logging ----
    log_level: str = "INFO"

    @staticmethod
    def from_env() -> "Settings":
        # A configured REDIS_URL selects Redis unless TASKS_BACKEND says otherwise.
        redis_url = _env("REDIS_URL")
        backend = _env("TASKS_BACKEND", "redis" if redis_url else "memory").lower()

        return Settings(
            backend=backend,
            redis_url=redis_url or DEFAULT_REDIS_URL,
            redis_key=_env("TASKS_REDIS_KEY", "tasks"),
            redis_socket_timeout=_env_float("REDIS_SOCKET_TIMEOUT", 5.0),
            host=_env("HOST", "0.0.0.0"),
            port=_env_int("PORT", 3000),
            cors_origins=_env_list("CORS_ORIGINS", ["http://localhost:3000"]),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )

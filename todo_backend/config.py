"""Settings loaded from environment variables.

One frozen ``Settings`` object is built at startup and handed to the storage
factory and the app factory. Nothing reads the environment after that.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from todo_backend.errors import ConfigError

DEFAULT_PORT = 8080
DEFAULT_STORAGE_TIMEOUT = 30.0

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}


def _env_bool(env: Mapping[str, str], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _env_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True, slots=True)
class Settings:
    use_local_storage: bool = False
    bucket_name: str | None = None
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    storage_timeout: float = DEFAULT_STORAGE_TIMEOUT

    @property
    def storage_label(self) -> str:
        return "in-memory" if self.use_local_storage else "Google Cloud Storage"

    def validate(self) -> None:
        """Fail fast on configurations the service cannot run with."""
        if not self.use_local_storage and not self.bucket_name:
            raise ConfigError(
                "BUCKET_NAME environment variable is required when not using local storage"
            )
        if not 0 < self.port < 65536:
            raise ConfigError(f"PORT must be between 1 and 65535, got {self.port}")


def load_settings(env: Mapping[str, str] | None = None) -> Settings:
    if env is None:
        env = os.environ
    bucket = (env.get("BUCKET_NAME") or "").strip() or None
    return Settings(
        use_local_storage=_env_bool(env, "USE_LOCAL_STORAGE", False),
        bucket_name=bucket,
        host=env.get("HOST") or "0.0.0.0",
        port=_env_int(env, "PORT", DEFAULT_PORT),
        log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        storage_timeout=_env_float(env, "STORAGE_TIMEOUT", DEFAULT_STORAGE_TIMEOUT),
    )

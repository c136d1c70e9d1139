from __future__ import annotations

import os
from dataclasses import dataclass


def _env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Port waiting
    poll_interval_s: float = _env_float("DBH_POLL_INTERVAL_S", 1.0)
    wait_timeout_s: float = _env_float("DBH_WAIT_TIMEOUT_S", 50.0)
    wait_quiet: bool = _env_bool("DBH_WAIT_QUIET", False)

    # Engine client. Connection details (DOCKER_HOST, DOCKER_TLS_VERIFY, ...) are read by docker.from_env().
    engine_timeout_s: float = _env_float("DBH_ENGINE_TIMEOUT_S", 60.0)

    log_level: str = os.getenv("DBH_LOG_LEVEL", "INFO")


settings = Settings()

"""Environment-driven runtime settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


@dataclass(frozen=True)
class Settings:
    app_name: str = "Task Allocation Optimizer API"
    app_version: str = "0.1.0"
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False
    log_level: str = "INFO"

    # Total simplex iterations allowed per solve, across all passes.
    solver_max_iterations: int = 10_000
    solver_tolerance: float = 1e-7


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw.strip().lower() == "true"


def load_settings() -> Settings:
    """Read settings from the environment, falling back to defaults."""
    defaults = Settings()
    settings = Settings(
        host=os.environ.get("HOST", defaults.host),
        port=int(os.environ.get("PORT", defaults.port)),
        reload=_env_bool("RELOAD", defaults.reload),
        log_level=os.environ.get("LOG_LEVEL", defaults.log_level),
        solver_max_iterations=int(
            os.environ.get("SOLVER_MAX_ITERATIONS", defaults.solver_max_iterations)
        ),
        solver_tolerance=float(
            os.environ.get("SOLVER_TOLERANCE", defaults.solver_tolerance)
        ),
    )
    if settings.solver_max_iterations <= 0:
        raise ValueError("SOLVER_MAX_ITERATIONS must be > 0")
    if not 0.0 < settings.solver_tolerance < 1.0:
        raise ValueError("SOLVER_TOLERANCE must be in (0, 1)")
    return settings


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()

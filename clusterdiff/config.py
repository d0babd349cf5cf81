"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from clusterdiff.errors import ConfigError
from clusterdiff.models.config import (
    ClusterDiffConfig,
    LogConfig,
    RegistryConfig,
    SourcesConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"CLUSTERDIFF_{key}", default)


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    raw = _env(key, str(default))
    try:
        val = int(raw)
    except ValueError as exc:
        raise ConfigError(f"CLUSTERDIFF_{key} must be an integer, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None, max_val: float | None = None) -> float:
    raw = _env(key, str(default))
    try:
        val = float(raw)
    except ValueError as exc:
        raise ConfigError(f"CLUSTERDIFF_{key} must be a number, got {raw!r}") from exc
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ConfigError(f"Invalid log level: {value}. Must be one of {sorted(valid)}")
    return value.lower()


def load_config() -> ClusterDiffConfig:
    """Load configuration from CLUSTERDIFF_* environment variables."""
    return ClusterDiffConfig(
        registry=RegistryConfig(
            url=_env("REGISTRY_URL", ""),
            token=_env("REGISTRY_TOKEN", ""),
            timeout_seconds=_env_float("REGISTRY_TIMEOUT", 10.0, min_val=1.0, max_val=120.0),
            max_retries=_env_int("REGISTRY_MAX_RETRIES", 3, min_val=0, max_val=10),
        ),
        sources=SourcesConfig(
            topology_path=_env("TOPOLOGY_PATH", "clusters.yaml"),
            cache_file=_env("CACHE_FILE", ""),
            inventory_file=_env("INVENTORY_FILE", ""),
        ),
        log=LogConfig(
            level=validate_log_level(_env("LOG_LEVEL", "warning")),
        ),
    )

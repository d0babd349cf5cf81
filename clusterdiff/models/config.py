"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class RegistryConfig:
    """Live configuration-registry API settings."""

    url: str = ""
    token: str = ""
    timeout_seconds: float = 10.0
    max_retries: int = 3


@dataclass
class SourcesConfig:
    """Where desired and observed state are read from."""

    topology_path: str = "clusters.yaml"
    cache_file: str = ""  # JSON-lines registry fixture; disables live registry calls
    inventory_file: str = ""  # JSON-lines cloud inventory


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "warning"


@dataclass
class ClusterDiffConfig:
    """Top-level clusterdiff configuration."""

    registry: RegistryConfig = field(default_factory=RegistryConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)
    log: LogConfig = field(default_factory=LogConfig)

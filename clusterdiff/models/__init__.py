"""Core data structures for clusterdiff."""

from clusterdiff.models.config import ClusterDiffConfig
from clusterdiff.models.manifest import MachineManifest
from clusterdiff.models.records import (
    CloudAddress,
    CloudInstance,
    CloudVolume,
    Found,
    NodeRecord,
    NotFound,
    RoleRecord,
)
from clusterdiff.models.topology import Bogosity, Cluster, Facet, Server, ServerKey

__all__ = [
    "Bogosity",
    "CloudAddress",
    "CloudInstance",
    "CloudVolume",
    "Cluster",
    "ClusterDiffConfig",
    "Facet",
    "Found",
    "MachineManifest",
    "NodeRecord",
    "NotFound",
    "RoleRecord",
    "Server",
    "ServerKey",
]

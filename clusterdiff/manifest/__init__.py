"""Manifest building: desired-state and observed-state MachineManifests.

Submodules:
    components -- Component plugins and the ComponentCatalog.
    builder    -- Local and remote manifest construction.
"""

from clusterdiff.manifest.builder import (
    build_local_manifest,
    build_remote_manifest,
    remote_manifest_for,
)
from clusterdiff.manifest.components import CATALOG, Component, ComponentCatalog

__all__ = [
    "CATALOG",
    "Component",
    "ComponentCatalog",
    "build_local_manifest",
    "build_remote_manifest",
    "remote_manifest_for",
]

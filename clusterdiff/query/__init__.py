"""Read-only access to the configuration registry and the cloud inventory.

Submodules:
    base            -- RegistrySource / CloudSource interfaces.
    resource_query  -- ResourceQuery: per-run memoizing facade.
    cache_file      -- JSON-lines registry fixture (offline mode).
    http            -- httpx registry client with timeouts and retries.
    inventory       -- Static and JSON-lines cloud inventories.
"""

from clusterdiff.query.base import CloudSource, RegistrySource
from clusterdiff.query.cache_file import CacheFileRegistry
from clusterdiff.query.http import HttpRegistry
from clusterdiff.query.inventory import InventoryFileCloud, StaticCloud
from clusterdiff.query.resource_query import ResourceQuery

__all__ = [
    "CacheFileRegistry",
    "CloudSource",
    "HttpRegistry",
    "InventoryFileCloud",
    "RegistrySource",
    "ResourceQuery",
    "StaticCloud",
]

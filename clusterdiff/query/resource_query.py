"""Per-run query context with populate-once caches.

ResourceQuery is the only object discovery and manifest building talk to.
Each listing is fetched on first use and reused for the rest of the run.
It is not safe to share one instance between threads.
"""

from __future__ import annotations

from clusterdiff.models.records import (
    CloudAddress,
    CloudInstance,
    CloudVolume,
    NodeRecord,
    NotFound,
)
from clusterdiff.observability.logging import get_logger
from clusterdiff.query.base import CloudSource, NodeLookup, RegistrySource, RoleLookup

_log = get_logger("query")


class ResourceQuery:
    """Memoizing facade over one registry source and one cloud source."""

    def __init__(self, registry: RegistrySource, cloud: CloudSource) -> None:
        self.registry = registry
        self.cloud = cloud
        self._chef_nodes: dict[str, list[NodeRecord]] = {}
        self._fog_servers: list[CloudInstance] | None = None
        self._fog_volumes: list[CloudVolume] | None = None
        self._fog_addresses: dict[str, CloudAddress] | None = None
        self._nodes: dict[str, NodeLookup] = {}
        self._roles: dict[str, RoleLookup] = {}

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def chef_nodes(self, cluster_name: str) -> list[NodeRecord]:
        """Registry nodes whose cluster_name is exactly *cluster_name*."""
        cached = self._chef_nodes.get(cluster_name)
        if cached is not None:
            return cached
        _log.debug("searching registry nodes", source=self.registry.source_name, cluster=cluster_name)
        nodes = [
            node
            for node in self.registry.search_nodes(cluster_name)
            if node is not None and node.cluster_name == cluster_name
        ]
        self._chef_nodes[cluster_name] = nodes
        return nodes

    def node(self, name: str) -> NodeLookup:
        if name not in self._nodes:
            result = self.registry.get_node(name)
            if isinstance(result, NotFound):
                _log.debug("registry node not found", node=name)
            self._nodes[name] = result
        return self._nodes[name]

    def role(self, name: str) -> RoleLookup:
        if name not in self._roles:
            self._roles[name] = self.registry.get_role(name)
        return self._roles[name]

    # ------------------------------------------------------------------
    # Cloud
    # ------------------------------------------------------------------

    def fog_servers(self) -> list[CloudInstance]:
        if self._fog_servers is None:
            _log.debug("cataloguing cloud instances", source=self.cloud.source_name)
            self._fog_servers = list(self.cloud.list_instances())
        return self._fog_servers

    def cluster_fog_servers(self, cluster_name: str) -> list[CloudInstance]:
        """Non-terminated instances that are members of *cluster_name*'s group."""
        return [fs for fs in self.fog_servers() if cluster_name in fs.groups and not fs.terminated]

    def fog_volumes(self) -> list[CloudVolume]:
        if self._fog_volumes is None:
            _log.debug("cataloguing cloud volumes", source=self.cloud.source_name)
            self._fog_volumes = list(self.cloud.list_volumes())
        return self._fog_volumes

    def fog_addresses(self) -> dict[str, CloudAddress]:
        """Elastic addresses keyed by public IP."""
        if self._fog_addresses is None:
            _log.debug("cataloguing cloud addresses", source=self.cloud.source_name)
            self._fog_addresses = {fa.public_ip: fa for fa in self.cloud.list_addresses()}
        return self._fog_addresses

    def close(self) -> None:
        self.registry.close()
        self.cloud.close()

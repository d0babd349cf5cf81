"""Shared fixtures for clusterdiff integration tests.

Provides an in-memory registry, record factories and a small desired
topology so discovery and diff pipelines run without any live service.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import pytest

from clusterdiff.loader import parse_topology
from clusterdiff.models.records import (
    CloudAddress,
    CloudInstance,
    CloudVolume,
    Found,
    NodeRecord,
    NotFound,
    RoleRecord,
)
from clusterdiff.models.topology import Cluster
from clusterdiff.query.base import NodeLookup, RegistrySource, RoleLookup
from clusterdiff.query.inventory import StaticCloud
from clusterdiff.query.resource_query import ResourceQuery

# ---------------------------------------------------------------------------
# Record factories
# ---------------------------------------------------------------------------


def make_node(name: str, cluster_name: str | None = "web", **attributes: Any) -> NodeRecord:
    """Create a registry node; ``cluster_name`` is set unless passed as None."""
    data: dict[str, Any] = {"name": name, **attributes}
    if cluster_name is not None:
        data["cluster_name"] = cluster_name
    return NodeRecord(data)


def make_instance(
    instance_id: str,
    cluster: str | None = "web",
    facet: str | None = None,
    index: str | int | None = None,
    state: str = "running",
    groups: Iterable[str] | None = None,
    public_ip: str | None = None,
) -> CloudInstance:
    """Create a cloud instance; tags are set only for the parts given."""
    tags: dict[str, str] = {}
    if cluster is not None and facet is not None and index is not None:
        tags = {"cluster": cluster, "facet": facet, "index": str(index)}
    return CloudInstance(
        id=instance_id,
        state=state,
        tags=tags,
        groups=tuple(groups if groups is not None else ([cluster] if cluster else [])),
        public_ip=public_ip,
    )


class MemoryRegistry(RegistrySource):
    """Registry held in dictionaries; counts searches for memoization checks."""

    def __init__(
        self,
        nodes: Iterable[NodeRecord] = (),
        roles: Iterable[RoleRecord] = (),
    ) -> None:
        self.nodes = {n.name: n for n in nodes}
        self.roles = {r.name: r for r in roles}
        self.search_calls = 0

    @property
    def source_name(self) -> str:
        return "memory"

    def get_node(self, name: str) -> NodeLookup:
        node = self.nodes.get(name)
        return Found(node) if node is not None else NotFound(kind="node", name=name)

    def get_role(self, name: str) -> RoleLookup:
        role = self.roles.get(name)
        return Found(role) if role is not None else NotFound(kind="role", name=name)

    def search_nodes(self, cluster_name: str) -> list[NodeRecord]:
        self.search_calls += 1
        # Prefix match, like a loose registry search; callers must filter exactly.
        return [n for n in self.nodes.values() if (n.cluster_name or "").startswith(cluster_name)]


def make_query(
    nodes: Iterable[NodeRecord] = (),
    instances: Iterable[CloudInstance] = (),
    volumes: Iterable[CloudVolume] = (),
    addresses: Iterable[CloudAddress] = (),
    roles: Iterable[RoleRecord] = (),
) -> ResourceQuery:
    return ResourceQuery(
        MemoryRegistry(nodes=nodes, roles=roles),
        StaticCloud(instances=instances, volumes=volumes, addresses=addresses),
    )


# ---------------------------------------------------------------------------
# Topology fixtures
# ---------------------------------------------------------------------------

WEB_TOPOLOGY: dict[str, Any] = {
    "web": {
        "run_list": ["base"],
        "components": [{"name": "ssh", "port": 22}],
        "default_attributes": {"ntp": {"servers": ["pool.ntp.org"]}},
        "facets": {
            "app": {
                "instances": 3,
                "run_list": ["role[web_app]"],
                "default_attributes": {"java_version": "8"},
            },
            "db": {"instances": 1, "components": [{"name": "zookeeper"}]},
        },
    },
}


@pytest.fixture
def web_cluster() -> Cluster:
    """Cluster 'web' with facets app (3 slots) and db (1 slot)."""
    return parse_topology(WEB_TOPOLOGY)["web"]

"""Correlation engine: map live registry nodes and cloud instances onto slots.

A discovery pass over one cluster runs in a fixed order:

1. vivify every declared slot,
2. attach registry nodes (and remember their cloud instance ids),
3. attach cloud instances by tag, or by the remembered instance id,
4. attach volumes and elastic addresses per server.

Step 3 depends on step 2 through the InstanceIndex, so a pass is strictly
sequential.  Independent clusters may be discovered independently.
"""

from __future__ import annotations

from clusterdiff.discovery.naming import resolve_node_triple
from clusterdiff.errors import ResourceQueryError
from clusterdiff.models.records import CloudInstance
from clusterdiff.models.topology import Bogosity, Cluster, Server
from clusterdiff.observability.logging import get_logger
from clusterdiff.query.resource_query import ResourceQuery

_log = get_logger("discovery")


class InstanceIndex:
    """Cloud instance id -> Server, filled by the registry pass."""

    def __init__(self) -> None:
        self._servers: dict[str, Server] = {}

    def remember(self, instance_id: str, server: Server) -> None:
        self._servers[instance_id] = server

    def lookup(self, instance_id: str) -> Server | None:
        return self._servers.get(instance_id)

    def __len__(self) -> int:
        return len(self._servers)


class ClusterDiscovery:
    """Runs discovery passes for one cluster against one ResourceQuery."""

    def __init__(self, cluster: Cluster, query: ResourceQuery) -> None:
        self.cluster = cluster
        self.query = query

    def discover(self, *, attachments: bool = True) -> list[Server]:
        """Run a full discovery pass and return every server of the cluster."""
        log = _log.bind(cluster=self.cluster.name)
        instance_index = InstanceIndex()

        self.cluster.servers()
        self.discover_chef_nodes(instance_index)
        self.discover_fog_servers(instance_index)
        if attachments:
            self.discover_attachments()
        self._flag_undefined()

        servers = self.cluster.servers()
        log.info(
            "discovery complete",
            servers=len(servers),
            bogus=sum(1 for s in servers if s.bogus),
            indexed_instances=len(instance_index),
        )
        return servers

    # ------------------------------------------------------------------
    # Registry pass
    # ------------------------------------------------------------------

    def discover_chef_nodes(self, instance_index: InstanceIndex) -> None:
        """Attach each registry node to its slot and index its instance id."""
        for node in self.query.chef_nodes(self.cluster.name):
            cluster_name, facet_name, facet_index = resolve_node_triple(node)
            if cluster_name != self.cluster.name:
                _log.warning(
                    "registry_node_skipped",
                    node=node.name,
                    cluster=self.cluster.name,
                    resolved_cluster=cluster_name,
                )
                continue
            svr = self.cluster.server(facet_name, facet_index)
            svr.chef_node = node
            if node.instance_id:
                instance_index.remember(node.instance_id, svr)

    # ------------------------------------------------------------------
    # Cloud pass
    # ------------------------------------------------------------------

    def discover_fog_servers(self, instance_index: InstanceIndex) -> None:
        """Attach each live instance to its slot.

        Instances tagged for this cluster go to their tagged slot; untagged
        ones are found through the registry's instance ids; the rest are not
        tracked by this cluster and are left alone.
        """
        for fs in self.query.cluster_fog_servers(self.cluster.name):
            svr = self._server_for_instance(fs, instance_index)
            if svr is None:
                _log.debug("untracked_cloud_instance", cluster=self.cluster.name, instance_id=fs.id)
                continue

            existing = svr.fog_server
            if existing is not None and existing.id != fs.id:
                if _parked_in_overflow(svr, fs.id):
                    continue
                _log.warning(
                    "duplicate_cloud_instance",
                    server=svr.fullname,
                    instance_id=fs.id,
                    existing_instance_id=existing.id,
                )
                original = svr
                svr = original.facet.next_overflow_server(original.facet_index)
                original.mark_bogus(Bogosity.DUPLICATE)
                svr.mark_bogus(Bogosity.DUPLICATE)
            svr.fog_server = fs

    def _server_for_instance(self, fs: CloudInstance, instance_index: InstanceIndex) -> Server | None:
        triple = fs.tagged_triple()
        if triple is not None and triple[0] == self.cluster.name:
            return self.cluster.server(triple[1], triple[2])
        return instance_index.lookup(fs.id)

    # ------------------------------------------------------------------
    # Volumes and addresses
    # ------------------------------------------------------------------

    def discover_attachments(self) -> None:
        """Attach volumes and addresses server by server.

        A failure is recorded on the server it happened for; the remaining
        servers are still processed.
        """
        for svr in self.cluster.servers():
            try:
                discover_volumes(svr, self.query)
                discover_addresses(svr, self.query)
            except ResourceQueryError as exc:
                _log.warning("attachment_discovery_failed", server=svr.fullname, error=str(exc))
                svr.discovery_errors.append(str(exc))

    def _flag_undefined(self) -> None:
        for svr in self.cluster.servers():
            if not svr.declared and svr.overflow == 0 and (svr.chef_node or svr.fog_server):
                svr.mark_bogus(Bogosity.UNDEFINED)


def _parked_in_overflow(svr: Server, instance_id: str) -> bool:
    # An instance listed again after being moved to an overflow slot stays there.
    return any(
        o.fog_server is not None and o.fog_server.id == instance_id
        for o in svr.facet.overflow_servers(svr.facet_index)
    )


def discover_volumes(svr: Server, query: ResourceQuery) -> None:
    """Attach the volumes mounted on the server's cloud instance."""
    if svr.fog_server is None:
        return
    svr.volumes = [vol for vol in query.fog_volumes() if vol.server_id == svr.fog_server.id]


def discover_addresses(svr: Server, query: ResourceQuery) -> None:
    """Attach the elastic address bound to the server's public IP."""
    if svr.fog_server is None or not svr.fog_server.public_ip:
        return
    svr.address = query.fog_addresses().get(svr.fog_server.public_ip)

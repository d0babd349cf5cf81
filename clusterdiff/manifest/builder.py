"""Build comparable MachineManifests from desired and observed state."""

from __future__ import annotations

import copy
from typing import Any

from clusterdiff.errors import AmbiguousNameError, RoleNotFoundError
from clusterdiff.manifest.components import CATALOG, Component, ComponentCatalog
from clusterdiff.models.manifest import MachineManifest
from clusterdiff.models.records import NodeRecord, NotFound, RoleRecord
from clusterdiff.models.topology import Server
from clusterdiff.observability.logging import get_logger
from clusterdiff.query.resource_query import ResourceQuery

_log = get_logger("manifest.builder")

_QUALIFIED_PREFIXES = ("role[", "recipe[")


# ---------------------------------------------------------------------------
# Desired state
# ---------------------------------------------------------------------------


def qualify_run_list_item(item: object) -> str:
    """Turn a bare run-list name into ``recipe[name]``; keep qualified entries."""
    item = str(item)
    if item.startswith(_QUALIFIED_PREFIXES):
        return item
    return f"recipe[{item}]"


def local_run_list(*run_lists: list[str]) -> list[str]:
    """Concatenate run lists in order, qualifying entries and dropping repeats."""
    result: list[str] = []
    for run_list in run_lists:
        for item in run_list:
            qualified = qualify_run_list_item(item)
            if qualified not in result:
                result.append(qualified)
    return result


def _merge_components(*layers: list[Component]) -> list[Component]:
    # Later layers replace earlier components of the same name.
    merged: dict[str, Component] = {}
    for layer in layers:
        for component in layer:
            merged[component.name] = component
    return list(merged.values())


def build_local_manifest(server: Server) -> MachineManifest:
    """Manifest of what *server* should look like according to the topology."""
    facet = server.facet
    cluster = facet.cluster
    return MachineManifest(
        name=server.facet_index,
        cluster_name=cluster.name,
        facet_name=facet.name,
        components=_merge_components(cluster.components, facet.components),
        run_list=local_run_list(cluster.run_list, facet.run_list),
        cluster_default_attributes=copy.deepcopy(cluster.default_attributes),
        cluster_override_attributes=copy.deepcopy(cluster.override_attributes),
        facet_default_attributes=copy.deepcopy(facet.default_attributes),
        facet_override_attributes=copy.deepcopy(facet.override_attributes),
    )


# ---------------------------------------------------------------------------
# Observed state
# ---------------------------------------------------------------------------


def parse_manifest_name(node_name: str) -> tuple[str, str, str]:
    """Split a node name into (cluster, facet, instance).

    The first ``-`` group is the cluster and the last is the instance;
    everything in between is the facet.

    Raises:
        AmbiguousNameError: if the name has fewer than three parts.
    """
    cluster_name, sep, rest = node_name.partition("-")
    facet_name, sep2, instance = rest.rpartition("-")
    if not (sep and sep2 and cluster_name and facet_name and instance):
        raise AmbiguousNameError(node_name)
    return cluster_name, facet_name, instance


def build_remote_manifest(
    node: NodeRecord,
    cluster_role: RoleRecord,
    facet_role: RoleRecord,
    catalog: ComponentCatalog = CATALOG,
) -> MachineManifest:
    """Reconstruct a manifest from a live node and its two role records."""
    cluster_name, facet_name, instance = parse_manifest_name(node.name)
    return MachineManifest(
        name=instance,
        cluster_name=cluster_name,
        facet_name=facet_name,
        components=catalog.components_from_node(node),
        run_list=node.run_list,
        cluster_default_attributes=copy.deepcopy(cluster_role.default_attributes),
        cluster_override_attributes=copy.deepcopy(cluster_role.override_attributes),
        facet_default_attributes=copy.deepcopy(facet_role.default_attributes),
        facet_override_attributes=copy.deepcopy(facet_role.override_attributes),
    )


def cluster_role_name(cluster_name: str) -> str:
    return f"{cluster_name}-cluster"


def facet_role_name(cluster_name: str, facet_name: str) -> str:
    return f"{cluster_name}-{facet_name}-facet"


def fetch_role(query: ResourceQuery, role_name: str) -> RoleRecord:
    """Fetch a role record.

    Raises:
        RoleNotFoundError: if the registry has no such role.
    """
    result = query.role(role_name)
    if isinstance(result, NotFound):
        _log.error("role_lookup_failed", role=role_name)
        raise RoleNotFoundError(role_name)
    return result.record


def remote_manifest_for(
    query: ResourceQuery,
    local: MachineManifest,
    catalog: ComponentCatalog = CATALOG,
) -> dict[str, Any]:
    """Comparable remote structure for the machine *local* describes.

    A node the registry does not know yields an empty structure, so every
    local key shows up as local-only instead of aborting the run.
    """
    result = query.node(local.node_name)
    if isinstance(result, NotFound):
        _log.warning("remote_node_missing", node=local.node_name)
        return {}
    cluster_role = fetch_role(query, cluster_role_name(local.cluster_name))
    facet_role = fetch_role(query, facet_role_name(local.cluster_name, local.facet_name))
    return build_remote_manifest(result.record, cluster_role, facet_role, catalog).to_dict()

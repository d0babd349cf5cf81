"""Resolving a registry node to its (cluster, facet, index) slot."""

from __future__ import annotations

from clusterdiff.errors import AmbiguousNameError
from clusterdiff.models.records import NodeRecord


def split_node_name(name: str) -> tuple[str, str, str] | None:
    """Split ``cluster-facet-index`` into its three parts.

    Returns None unless the name has exactly three non-empty parts.  A facet
    whose own name contains ``-`` cannot be told apart from a malformed name;
    such nodes need a correlation block or flat fields.
    """
    parts = name.split("-")
    if len(parts) != 3 or not all(parts):
        return None
    return (parts[0], parts[1], parts[2])


def resolve_node_triple(node: NodeRecord) -> tuple[str, str, str]:
    """Return the slot triple for *node*.

    Priority: the structured correlation block, then the flat
    cluster_name/facet_name/facet_index fields, then the node name.

    Raises:
        AmbiguousNameError: if none of the three yields a triple.
    """
    triple = node.correlation_triple() or node.flat_triple() or split_node_name(node.name)
    if triple is None:
        raise AmbiguousNameError(node.name)
    return triple

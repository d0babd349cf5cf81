"""Discovery and correlation of live resources into the logical topology."""

from clusterdiff.discovery.correlation import ClusterDiscovery, InstanceIndex
from clusterdiff.discovery.naming import resolve_node_triple, split_node_name

__all__ = ["ClusterDiscovery", "InstanceIndex", "resolve_node_triple", "split_node_name"]

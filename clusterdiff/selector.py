"""CLUSTER[-FACET[-INDEXES]] selectors."""

from __future__ import annotations

from dataclasses import dataclass

from clusterdiff.errors import SelectorError
from clusterdiff.models.topology import Cluster, Server


@dataclass(frozen=True)
class Selector:
    """A slice of one cluster: optionally one facet, optionally some indexes."""

    cluster_name: str
    facet_name: str | None = None
    indexes: frozenset[str] | None = None

    def matches(self, server: Server) -> bool:
        if server.cluster_name != self.cluster_name:
            return False
        if self.facet_name is not None and server.facet_name != self.facet_name:
            return False
        if self.indexes is not None and server.facet_index not in self.indexes:
            return False
        return True

    def select(self, cluster: Cluster) -> list[Server]:
        return [svr for svr in cluster.servers() if self.matches(svr)]


def parse_indexes(text: str) -> frozenset[str]:
    """Parse ``1,3,5..7`` into the set of index strings."""
    indexes: set[str] = set()
    for part in text.split(","):
        part = part.strip()
        lo, sep, hi = part.partition("..")
        try:
            if sep:
                start, stop = int(lo), int(hi)
                if start > stop:
                    raise SelectorError(f"Empty index range {part!r}")
                indexes.update(str(i) for i in range(start, stop + 1))
            else:
                indexes.add(str(int(part)))
        except ValueError as exc:
            raise SelectorError(f"Invalid index {part!r} in {text!r}") from exc
    return frozenset(indexes)


def parse_selector(text: str) -> Selector:
    """Parse a CLUSTER[-FACET[-INDEXES]] selector.

    Raises:
        SelectorError: on an empty selector, empty part, or bad index list.
    """
    parts = text.strip().split("-", 2)
    if not all(parts):
        raise SelectorError(f"Invalid selector {text!r}: expected CLUSTER[-FACET[-INDEXES]]")
    cluster_name = parts[0]
    facet_name = parts[1] if len(parts) > 1 else None
    indexes = parse_indexes(parts[2]) if len(parts) > 2 else None
    return Selector(cluster_name=cluster_name, facet_name=facet_name, indexes=indexes)

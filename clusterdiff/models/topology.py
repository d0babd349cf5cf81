"""Logical cluster topology: clusters, facets and server slots.

A Server is the shared correlation point between the registry and the cloud:
both discovery passes attach what they find to the same Server object.
Servers are vivified (get-or-create) through their owning Facet so there is
exactly one Server per slot key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from clusterdiff.manifest.components import Component
    from clusterdiff.models.records import CloudAddress, CloudInstance, CloudVolume, NodeRecord


class Bogosity(StrEnum):
    """How trustworthy a server's correlation is."""

    CLEAN = "clean"
    DUPLICATE = "duplicate"  # two cloud instances claimed this slot
    UNDEFINED = "undefined"  # slot exists in reality but not in the topology


@dataclass(frozen=True)
class ServerKey:
    """Unique identity of a server slot.

    ``overflow`` is 0 for ordinary slots.  Duplicate cloud instances are parked
    in overflow slots 1, 2, ... of the same facet index, so a synthetic slot can
    never collide with an ordinal index.
    """

    cluster_name: str
    facet_name: str
    facet_index: str
    overflow: int = 0

    @property
    def fullname(self) -> str:
        name = f"{self.cluster_name}-{self.facet_name}-{self.facet_index}"
        if self.overflow:
            name = f"{name}~dup{self.overflow}"
        return name


def index_sort_key(index: str) -> tuple[int, int, str]:
    """Sort numeric indexes numerically, anything else after them."""
    if index.isdigit():
        return (0, int(index), "")
    return (1, 0, index)


@dataclass(eq=False)
class Server:
    """One logical machine slot and whatever was discovered for it."""

    facet: Facet = field(repr=False)
    facet_index: str
    overflow: int = 0
    declared: bool = False
    chef_node: NodeRecord | None = None
    fog_server: CloudInstance | None = None
    volumes: list[CloudVolume] = field(default_factory=list)
    address: CloudAddress | None = None
    bogosity: Bogosity = Bogosity.CLEAN
    discovery_errors: list[str] = field(default_factory=list)

    @property
    def cluster_name(self) -> str:
        return self.facet.cluster.name

    @property
    def facet_name(self) -> str:
        return self.facet.name

    @property
    def key(self) -> ServerKey:
        return ServerKey(self.cluster_name, self.facet_name, self.facet_index, self.overflow)

    @property
    def fullname(self) -> str:
        return self.key.fullname

    @property
    def node_name(self) -> str:
        """Registry node name this slot is expected to register as."""
        return f"{self.cluster_name}-{self.facet_name}-{self.facet_index}"

    @property
    def bogus(self) -> bool:
        return self.bogosity is not Bogosity.CLEAN

    def mark_bogus(self, reason: Bogosity) -> None:
        # A duplicate flag is the stronger statement; never downgrade it.
        if self.bogosity is Bogosity.DUPLICATE:
            return
        self.bogosity = reason

    def sort_key(self) -> tuple[Any, ...]:
        return (index_sort_key(self.facet_index), self.overflow)


@dataclass(eq=False)
class Facet:
    """A named group of same-purpose server slots within a cluster."""

    cluster: Cluster = field(repr=False)
    name: str
    instances: int = 1
    run_list: list[str] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    default_attributes: dict[str, Any] = field(default_factory=dict)
    override_attributes: dict[str, Any] = field(default_factory=dict)
    declared: bool = True
    _servers: dict[tuple[str, int], Server] = field(default_factory=dict, init=False, repr=False)

    def indices(self) -> list[str]:
        """Facet indexes implied by the declared instance count."""
        if not self.declared:
            return []
        return [str(i) for i in range(self.instances)]

    def server(self, index: str | int, overflow: int = 0) -> Server:
        """Return the server in slot *index*, creating it on first reference."""
        index = str(index)
        slot = (index, overflow)
        svr = self._servers.get(slot)
        if svr is None:
            declared = overflow == 0 and index in self.indices()
            svr = Server(facet=self, facet_index=index, overflow=overflow, declared=declared)
            self._servers[slot] = svr
        return svr

    def overflow_servers(self, index: str | int) -> list[Server]:
        """Overflow slots already allocated for *index*, in allocation order."""
        index = str(index)
        return [self._servers[slot] for slot in sorted(self._servers) if slot[0] == index and slot[1] > 0]

    def next_overflow_server(self, index: str | int) -> Server:
        """Vivify the first unused overflow slot for *index*."""
        index = str(index)
        overflow = 1
        while (index, overflow) in self._servers:
            overflow += 1
        return self.server(index, overflow)

    def servers(self) -> list[Server]:
        """All server slots of this facet, declared ones vivified, in index order."""
        for index in self.indices():
            self.server(index)
        return sorted(self._servers.values(), key=lambda s: s.sort_key())


@dataclass(eq=False)
class Cluster:
    """A named cluster owning an ordered set of facets."""

    name: str
    run_list: list[str] = field(default_factory=list)
    components: list[Component] = field(default_factory=list)
    default_attributes: dict[str, Any] = field(default_factory=dict)
    override_attributes: dict[str, Any] = field(default_factory=dict)
    _facets: dict[str, Facet] = field(default_factory=dict, init=False, repr=False)

    def add_facet(self, name: str, **definition: Any) -> Facet:
        facet = Facet(cluster=self, name=name, **definition)
        self._facets[name] = facet
        return facet

    def facet(self, name: str) -> Facet | None:
        return self._facets.get(name)

    def vivify_facet(self, name: str) -> Facet:
        """Return facet *name*, creating an undeclared placeholder if needed."""
        facet = self._facets.get(name)
        if facet is None:
            facet = self.add_facet(name, instances=0, declared=False)
        return facet

    def server(self, facet_name: str, index: str | int) -> Server:
        """Get-or-create the server for (this cluster, facet_name, index)."""
        return self.vivify_facet(facet_name).server(index)

    @property
    def facets(self) -> list[Facet]:
        return list(self._facets.values())

    def servers(self) -> list[Server]:
        """All server slots, facet by facet; declared slots are vivified."""
        result: list[Server] = []
        for facet in self.facets:
            result.extend(facet.servers())
        return result

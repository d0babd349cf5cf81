"""Source interfaces over the configuration registry and the cloud provider.

Sources are pure readers.  Lookups of a single named record return
``Found | NotFound`` instead of raising; transport failures raise
ResourceQueryError.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable

from clusterdiff.models.records import (
    CloudAddress,
    CloudInstance,
    CloudVolume,
    Found,
    NodeRecord,
    NotFound,
    RoleRecord,
)

NodeLookup = Found[NodeRecord] | NotFound
RoleLookup = Found[RoleRecord] | NotFound


class RegistrySource(ABC):
    """Read access to registered nodes and role definitions."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier used in logs and error messages."""

    @abstractmethod
    def get_node(self, name: str) -> NodeLookup:
        """Look up a node by name."""

    @abstractmethod
    def get_role(self, name: str) -> RoleLookup:
        """Look up a role by name."""

    @abstractmethod
    def search_nodes(self, cluster_name: str) -> Iterable[NodeRecord]:
        """Yield nodes the registry associates with *cluster_name*.

        Implementations may over-match (e.g. prefix search); callers filter.
        """

    def close(self) -> None:  # noqa: B027
        """Release any held connections."""


class CloudSource(ABC):
    """Read access to the cloud provider's live inventory."""

    @property
    @abstractmethod
    def source_name(self) -> str:
        """Identifier used in logs and error messages."""

    @abstractmethod
    def list_instances(self) -> Iterable[CloudInstance]:
        """Every instance in the account, in any state."""

    @abstractmethod
    def list_volumes(self) -> Iterable[CloudVolume]:
        """Every block-storage volume."""

    @abstractmethod
    def list_addresses(self) -> Iterable[CloudAddress]:
        """Every elastic address."""

    def close(self) -> None:  # noqa: B027
        """Release any held connections."""

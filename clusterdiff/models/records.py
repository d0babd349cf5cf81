"""Records returned by the registry and cloud sources.

Registry records wrap the raw JSON mapping the registry returned; typed
accessors pull out the handful of fields correlation and manifest building
need.  Cloud records are flattened into small frozen dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

T = TypeVar("T")

# Node attribute holding an explicit {cluster, facet, index} block.
CORRELATION_KEY = "cluster_chef"

TERMINATED_STATE = "terminated"


# ---------------------------------------------------------------------------
# Lookup results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Found(Generic[T]):
    """A successful registry lookup."""

    record: T


@dataclass(frozen=True)
class NotFound:
    """A registry lookup for a name the registry does not know."""

    kind: str
    name: str


# ---------------------------------------------------------------------------
# Registry records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class NodeRecord:
    """A node registered with the configuration registry."""

    data: dict[str, Any] = field(default_factory=dict)

    @property
    def name(self) -> str:
        return str(self.data.get("name", ""))

    @property
    def cluster_name(self) -> str | None:
        value = self.data.get("cluster_name")
        return None if value is None else str(value)

    def correlation_triple(self) -> tuple[str, str, str] | None:
        """Return (cluster, facet, index) from the structured correlation block."""
        block = self.data.get(CORRELATION_KEY)
        if not isinstance(block, dict):
            return None
        return _triple(block.get("cluster"), block.get("facet"), block.get("index"))

    def flat_triple(self) -> tuple[str, str, str] | None:
        """Return (cluster, facet, index) from the flat cluster_name/facet_name/facet_index fields."""
        return _triple(
            self.data.get("cluster_name"),
            self.data.get("facet_name"),
            self.data.get("facet_index"),
        )

    @property
    def instance_id(self) -> str | None:
        ec2 = self.data.get("ec2")
        if isinstance(ec2, dict) and ec2.get("instance_id"):
            return str(ec2["instance_id"])
        return None

    @property
    def run_list(self) -> list[str]:
        return [str(item) for item in self.data.get("run_list") or []]

    @property
    def announces(self) -> dict[str, Any]:
        announces = self.data.get("announces")
        return announces if isinstance(announces, dict) else {}


@dataclass(frozen=True)
class RoleRecord:
    """A role definition (cluster role or facet role)."""

    name: str
    default_attributes: dict[str, Any] = field(default_factory=dict)
    override_attributes: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RoleRecord:
        return cls(
            name=str(data.get("name", "")),
            default_attributes=dict(data.get("default_attributes") or {}),
            override_attributes=dict(data.get("override_attributes") or {}),
        )


# ---------------------------------------------------------------------------
# Cloud records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CloudInstance:
    """A compute instance as listed by the cloud provider."""

    id: str
    state: str = "running"
    tags: dict[str, str] = field(default_factory=dict)
    groups: tuple[str, ...] = ()
    public_ip: str | None = None
    private_ip: str | None = None

    @property
    def terminated(self) -> bool:
        return self.state == TERMINATED_STATE

    def tagged_triple(self) -> tuple[str, str, str] | None:
        """Return (cluster, facet, index) when all three tags are set."""
        return _triple(self.tags.get("cluster"), self.tags.get("facet"), self.tags.get("index"))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CloudInstance:
        return cls(
            id=str(data["id"]),
            state=str(data.get("state", "running")),
            tags={str(k): str(v) for k, v in (data.get("tags") or {}).items()},
            groups=tuple(str(g) for g in data.get("groups") or ()),
            public_ip=data.get("public_ip_address"),
            private_ip=data.get("private_ip_address"),
        )


@dataclass(frozen=True)
class CloudVolume:
    """A block-storage volume, possibly attached to an instance."""

    id: str
    server_id: str | None = None
    device: str | None = None
    size: int | None = None
    state: str = "available"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CloudVolume:
        size = data.get("size")
        return cls(
            id=str(data["id"]),
            server_id=data.get("server_id"),
            device=data.get("device"),
            size=int(size) if size is not None else None,
            state=str(data.get("state", "available")),
        )


@dataclass(frozen=True)
class CloudAddress:
    """An elastic (static public) address."""

    public_ip: str
    server_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CloudAddress:
        return cls(public_ip=str(data["public_ip"]), server_id=data.get("server_id"))


def _triple(cluster: Any, facet: Any, index: Any) -> tuple[str, str, str] | None:
    if cluster in (None, "") or facet in (None, "") or index in (None, ""):
        return None
    return (str(cluster), str(facet), str(index))

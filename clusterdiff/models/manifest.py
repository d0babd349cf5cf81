"""Machine manifest: the comparable description of one machine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from clusterdiff.manifest.components import Component


@dataclass
class MachineManifest:
    """Desired or observed configuration of one machine.

    ``name`` is the facet index (the last part of the node name).  Local and
    remote manifests are built independently and never share state.
    """

    name: str
    cluster_name: str
    facet_name: str
    components: list[Component] = field(default_factory=list)
    run_list: list[str] = field(default_factory=list)
    cluster_default_attributes: dict[str, Any] = field(default_factory=dict)
    cluster_override_attributes: dict[str, Any] = field(default_factory=dict)
    facet_default_attributes: dict[str, Any] = field(default_factory=dict)
    facet_override_attributes: dict[str, Any] = field(default_factory=dict)

    @property
    def node_name(self) -> str:
        return f"{self.cluster_name}-{self.facet_name}-{self.name}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "cluster_name": self.cluster_name,
            "facet_name": self.facet_name,
            "components": {c.name: c.to_node() for c in self.components},
            "run_list": list(self.run_list),
            "cluster_default_attributes": self.cluster_default_attributes,
            "cluster_override_attributes": self.cluster_override_attributes,
            "facet_default_attributes": self.facet_default_attributes,
            "facet_override_attributes": self.facet_override_attributes,
        }

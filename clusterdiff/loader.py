"""Desired topology loading from YAML.

File shape::

    web:
      run_list: [base]
      components:
        - {name: ssh, port: 22}
      default_attributes: {}
      override_attributes: {}
      facets:
        app:
          instances: 3
          run_list: ["role[web_app]"]
          components: []
          default_attributes: {java_version: "8"}
          override_attributes: {}
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml

from clusterdiff.errors import TopologyError
from clusterdiff.manifest.components import CATALOG, Component, ComponentCatalog
from clusterdiff.models.topology import Cluster
from clusterdiff.observability.logging import get_logger

_log = get_logger("loader")

_CLUSTER_KEYS = {"run_list", "components", "default_attributes", "override_attributes", "facets"}
_FACET_KEYS = {"instances", "run_list", "components", "default_attributes", "override_attributes"}


def load_topology(path: str | Path, catalog: ComponentCatalog = CATALOG) -> dict[str, Cluster]:
    """Read a topology file into Clusters keyed by name.

    Raises:
        TopologyError: if the file is missing, is not YAML, or is malformed.
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except OSError as exc:
        raise TopologyError(f"Cannot read topology file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise TopologyError(f"Invalid YAML in topology file {path}: {exc}") from exc

    clusters = parse_topology(data, catalog)
    _log.debug("topology loaded", path=str(path), clusters=sorted(clusters))
    return clusters


def parse_topology(data: Any, catalog: ComponentCatalog = CATALOG) -> dict[str, Cluster]:
    """Build Clusters from an already-decoded topology mapping."""
    if not isinstance(data, Mapping):
        raise TopologyError("Topology must be a mapping of cluster name to definition")
    return {str(name): _parse_cluster(str(name), spec or {}, catalog) for name, spec in data.items()}


def _parse_cluster(name: str, spec: Any, catalog: ComponentCatalog) -> Cluster:
    _check_name("cluster", name)
    where = f"cluster {name!r}"
    spec = _mapping(spec, where, _CLUSTER_KEYS)
    cluster = Cluster(
        name=name,
        run_list=_string_list(spec.get("run_list"), f"{where} run_list"),
        components=_components(spec.get("components"), where, catalog),
        default_attributes=_mapping(spec.get("default_attributes") or {}, f"{where} default_attributes"),
        override_attributes=_mapping(spec.get("override_attributes") or {}, f"{where} override_attributes"),
    )
    facets = _mapping(spec.get("facets") or {}, f"{where} facets")
    for facet_name, facet_spec in facets.items():
        facet_name = str(facet_name)
        _check_name("facet", facet_name)
        fwhere = f"facet {name}-{facet_name}"
        facet_spec = _mapping(facet_spec or {}, fwhere, _FACET_KEYS)
        instances = facet_spec.get("instances", 1)
        if not isinstance(instances, int) or isinstance(instances, bool) or instances < 0:
            raise TopologyError(f"{fwhere}: instances must be a non-negative integer, got {instances!r}")
        cluster.add_facet(
            facet_name,
            instances=instances,
            run_list=_string_list(facet_spec.get("run_list"), f"{fwhere} run_list"),
            components=_components(facet_spec.get("components"), fwhere, catalog),
            default_attributes=_mapping(facet_spec.get("default_attributes") or {}, f"{fwhere} default_attributes"),
            override_attributes=_mapping(
                facet_spec.get("override_attributes") or {}, f"{fwhere} override_attributes"
            ),
        )
    return cluster


def _check_name(kind: str, name: str) -> None:
    # Node names are CLUSTER-FACET-INDEX; a '-' inside a part makes them unparseable.
    if not name or "-" in name:
        raise TopologyError(f"Invalid {kind} name {name!r}: must be non-empty and contain no '-'")


def _mapping(value: Any, where: str, allowed: set[str] | None = None) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise TopologyError(f"{where}: expected a mapping, got {type(value).__name__}")
    if allowed is not None:
        unknown = {str(k) for k in value} - allowed
        if unknown:
            raise TopologyError(f"{where}: unknown keys {sorted(unknown)}")
    return dict(value)


def _string_list(value: Any, where: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise TopologyError(f"{where}: expected a list, got {type(value).__name__}")
    return [str(item) for item in value]


def _components(value: Any, where: str, catalog: ComponentCatalog) -> list[Component]:
    components: list[Component] = []
    for entry in value or []:
        if isinstance(entry, str):
            entry = {"name": entry}
        if not isinstance(entry, Mapping) or "name" not in entry:
            raise TopologyError(f"{where}: each component needs a 'name'")
        name = str(entry["name"])
        plugin = catalog.resolve(name)
        if plugin is None:
            raise TopologyError(f"{where}: unknown component {name!r} (known: {catalog.names()})")
        try:
            components.append(plugin.from_config(entry))
        except (TypeError, ValueError) as exc:
            raise TopologyError(f"{where}: {exc}") from exc
    return components

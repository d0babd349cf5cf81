"""Component plugins and the catalog that resolves them by name.

A component is a typed piece of machine configuration (an announced
service).  Desired-state components come from the topology file
(``from_config``); observed components are rebuilt from the ``announces``
record a live node publishes (``from_node``).  Both sides serialize through
``to_node`` so they compare field by field.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any, ClassVar, TypeVar

from clusterdiff.models.records import NodeRecord
from clusterdiff.observability.logging import get_logger

_log = get_logger("manifest.components")

C = TypeVar("C", bound="Component")


def announce_name(key: Any, announce: Any) -> str:
    """Plugin name of one ``announces`` entry; falls back to the entry key."""
    if isinstance(announce, Mapping) and announce.get("name"):
        return str(announce["name"])
    return str(key)


@dataclass
class Component:
    """Base class for every component plugin."""

    plugin: ClassVar[str] = ""

    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            self.name = self.plugin

    def to_node(self) -> dict[str, Any]:
        """Serialize the settings (everything but the name) to plain data."""
        return {f.name: copy.deepcopy(getattr(self, f.name)) for f in fields(self) if f.name != "name"}

    @classmethod
    def setting_names(cls) -> set[str]:
        return {f.name for f in fields(cls) if f.name != "name"}

    @classmethod
    def from_config(cls: type[C], config: Mapping[str, Any]) -> C:
        """Build from a desired-state mapping.

        Raises:
            ValueError: if the mapping carries settings this plugin does not know.
        """
        settings = {str(k): v for k, v in config.items() if str(k) != "name"}
        unknown = set(settings) - cls.setting_names()
        if unknown:
            raise ValueError(f"component {cls.plugin!r} has no settings {sorted(unknown)}")
        return cls(name=str(config.get("name", cls.plugin)), **settings)

    @classmethod
    def from_node(cls: type[C], node: NodeRecord) -> C:
        """Build from the announce this plugin published on *node*.

        Settings missing from the announce keep their defaults; extra keys the
        plugin does not model are ignored.
        """
        info: Mapping[str, Any] = {}
        for key, announce in node.announces.items():
            if isinstance(announce, Mapping) and announce_name(key, announce) == cls.plugin:
                info = announce.get("info") or {}
                break
        known = cls.setting_names()
        return cls(**{str(k): copy.deepcopy(v) for k, v in info.items() if str(k) in known})


class ComponentCatalog:
    """Registry of component plugins keyed by plugin name."""

    def __init__(self) -> None:
        self._plugins: dict[str, type[Component]] = {}

    def register(self, plugin: type[C]) -> type[C]:
        """Class decorator adding *plugin* to the catalog."""
        if not plugin.plugin:
            raise ValueError(f"{plugin.__name__} does not declare a plugin name")
        self._plugins[plugin.plugin] = plugin
        return plugin

    def resolve(self, name: str) -> type[Component] | None:
        return self._plugins.get(name)

    def names(self) -> list[str]:
        return sorted(self._plugins)

    def components_from_node(self, node: NodeRecord) -> list[Component]:
        """Rebuild every registered component announced by *node*.

        Announces naming an unregistered plugin are skipped.
        """
        components: list[Component] = []
        for key, announce in node.announces.items():
            name = announce_name(key, announce)
            plugin = self.resolve(name)
            if plugin is None:
                _log.debug("unregistered_component_skipped", node=node.name, component=name)
                continue
            component = plugin.from_node(node)
            component.name = name
            components.append(component)
        return components


CATALOG = ComponentCatalog()


# ---------------------------------------------------------------------------
# Built-in plugins
# ---------------------------------------------------------------------------


@CATALOG.register
@dataclass
class ZookeeperComponent(Component):
    """ZooKeeper ensemble member."""

    plugin: ClassVar[str] = "zookeeper"

    client_port: int = 2181
    peer_port: int = 2888
    leader_port: int = 3888


@CATALOG.register
@dataclass
class ElasticsearchComponent(Component):
    """Elasticsearch data or master node."""

    plugin: ClassVar[str] = "elasticsearch"

    cluster_name: str = ""
    http_port: int = 9200
    transport_port: int = 9300


@CATALOG.register
@dataclass
class NfsServerComponent(Component):
    """NFS server exporting one or more paths."""

    plugin: ClassVar[str] = "nfs_server"

    exports: list[str] = field(default_factory=list)


@CATALOG.register
@dataclass
class SshComponent(Component):
    """SSH daemon and the groups allowed to log in."""

    plugin: ClassVar[str] = "ssh"

    port: int = 22
    allow_groups: list[str] = field(default_factory=list)

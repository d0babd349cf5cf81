"""Application wiring for clusterdiff.

Builds the sources from configuration, loads the desired topology, runs
discovery for the selected cluster, then hands servers to the manifest
builder and diff formatter.  Any ClusterDiffError is fatal: it is logged,
reported on stderr, and turned into exit code 1.  Recoverable conditions
(missing nodes, duplicate instances) only show up in logs and the report.
"""

from __future__ import annotations

import sys
from typing import TextIO

from clusterdiff.diff.formatter import DiffFormatter
from clusterdiff.discovery.correlation import ClusterDiscovery
from clusterdiff.errors import ClusterDiffError, ConfigError, SelectorError
from clusterdiff.loader import load_topology
from clusterdiff.manifest.builder import build_local_manifest, remote_manifest_for
from clusterdiff.models.config import ClusterDiffConfig
from clusterdiff.models.topology import Cluster, Server
from clusterdiff.observability.logging import get_logger, run_context
from clusterdiff.query.base import CloudSource, RegistrySource
from clusterdiff.query.cache_file import CacheFileRegistry
from clusterdiff.query.http import HttpRegistry
from clusterdiff.query.inventory import InventoryFileCloud, StaticCloud
from clusterdiff.query.resource_query import ResourceQuery
from clusterdiff.selector import parse_selector

_log = get_logger("app")

EXIT_OK = 0
EXIT_FATAL = 1


def build_registry(config: ClusterDiffConfig) -> RegistrySource:
    """Cache file when configured (no live calls at all), else the HTTP API."""
    if config.sources.cache_file:
        return CacheFileRegistry(config.sources.cache_file)
    if config.registry.url:
        return HttpRegistry(config.registry)
    raise ConfigError("No registry source: set CLUSTERDIFF_REGISTRY_URL or pass --cache-file")


def build_cloud(config: ClusterDiffConfig) -> CloudSource:
    if config.sources.inventory_file:
        return InventoryFileCloud(config.sources.inventory_file)
    _log.info("no cloud inventory configured; correlating registry nodes only")
    return StaticCloud()


class ClusterDiffApp:
    """Owns the query context and topology for a single run.

    Either pass ``query``/``clusters`` directly or let ``open()`` build them
    from ``config``.
    """

    def __init__(
        self,
        config: ClusterDiffConfig,
        query: ResourceQuery | None = None,
        clusters: dict[str, Cluster] | None = None,
    ) -> None:
        self.config = config
        self.query = query
        self.clusters = clusters

    def open(self) -> None:
        if self.clusters is None:
            self.clusters = load_topology(self.config.sources.topology_path)
        if self.query is None:
            self.query = ResourceQuery(build_registry(self.config), build_cloud(self.config))

    def close(self) -> None:
        if self.query is not None:
            self.query.close()

    def __enter__(self) -> ClusterDiffApp:
        self.open()
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _opened(self) -> tuple[dict[str, Cluster], ResourceQuery]:
        if self.clusters is None or self.query is None:
            raise RuntimeError("ClusterDiffApp used before open()")
        return self.clusters, self.query

    # ------------------------------------------------------------------
    # Scope
    # ------------------------------------------------------------------

    def servers_in_scope(self, selector_text: str) -> list[Server]:
        """Discover the selected cluster and return the servers in the slice."""
        clusters, query = self._opened()
        selector = parse_selector(selector_text)
        cluster = clusters.get(selector.cluster_name)
        if cluster is None:
            raise SelectorError(
                f"Unknown cluster {selector.cluster_name!r} (known: {sorted(clusters)})"
            )
        if selector.facet_name is not None and cluster.facet(selector.facet_name) is None:
            raise SelectorError(f"Cluster {cluster.name!r} has no facet {selector.facet_name!r}")
        ClusterDiscovery(cluster, query).discover()
        return selector.select(cluster)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def diff(self, selector_text: str, stream: TextIO | None = None) -> None:
        """Write a local/remote manifest diff for each declared server in scope."""
        _, query = self._opened()
        out = stream or sys.stdout
        differ = DiffFormatter(left="local", right="remote", stream=out, indentation=4)
        for server in self.servers_in_scope(selector_text):
            if not server.declared:
                _log.warning("undeclared_server_not_diffed", server=server.fullname, bogosity=server.bogosity.value)
                continue
            local = build_local_manifest(server)
            remote = remote_manifest_for(query, local)
            title = f"Displaying manifest diffs for {local.node_name}"
            if server.bogus:
                title += f" (bogus: {server.bogosity.value})"
            differ.header(title)
            result = differ.display_diff(local.to_dict(), remote)
            _log.debug("server diffed", server=server.fullname, **result.summary())

    def discover(self, selector_text: str, stream: TextIO | None = None) -> None:
        """Write one line per server in scope describing what was correlated."""
        out = stream or sys.stdout
        for server in self.servers_in_scope(selector_text):
            out.write(format_server_line(server) + "\n")


def format_server_line(server: Server) -> str:
    fs = server.fog_server
    fields = [
        server.fullname.ljust(28),
        (server.chef_node.name if server.chef_node else "-").ljust(24),
        (fs.id if fs else "-").ljust(20),
        (fs.state if fs else "-").ljust(12),
        ",".join(sorted(v.id for v in server.volumes)) or "-",
        server.address.public_ip if server.address else "-",
    ]
    line = "  ".join(fields)
    if server.bogus:
        line += f"  BOGUS:{server.bogosity.value}"
    if server.discovery_errors:
        line += f"  ERRORS:{len(server.discovery_errors)}"
    return line


def _run(command: str, selector_text: str, config: ClusterDiffConfig, stream: TextIO | None) -> int:
    try:
        with run_context(command, selector_text), ClusterDiffApp(config) as app:
            getattr(app, command)(selector_text, stream=stream)
    except ClusterDiffError as exc:
        _log.critical("fatal error", command=command, error=str(exc))
        sys.stderr.write(f"ERROR: {exc}\n")
        return EXIT_FATAL
    return EXIT_OK


def run_diff(selector_text: str, config: ClusterDiffConfig, stream: TextIO | None = None) -> int:
    """Diff every declared server selected by *selector_text*; return the exit code."""
    return _run("diff", selector_text, config, stream)


def run_discover(selector_text: str, config: ClusterDiffConfig, stream: TextIO | None = None) -> int:
    """List correlated servers selected by *selector_text*; return the exit code."""
    return _run("discover", selector_text, config, stream)

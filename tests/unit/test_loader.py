"""Tests for YAML topology loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from clusterdiff.errors import TopologyError
from clusterdiff.loader import load_topology, parse_topology
from clusterdiff.manifest.components import SshComponent, ZookeeperComponent

_YAML = """\
web:
  run_list: [base]
  components:
    - ssh
  default_attributes: {ntp: pool.ntp.org}
  facets:
    app:
      instances: 2
      run_list: ["role[web_app]"]
      default_attributes: {java_version: "8"}
    db:
      components:
        - {name: zookeeper, client_port: 2182}
"""


class TestLoadTopology:
    def test_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "clusters.yaml"
        path.write_text(_YAML)
        cluster = load_topology(path)["web"]
        assert cluster.run_list == ["base"]
        assert cluster.default_attributes == {"ntp": "pool.ntp.org"}
        assert [type(c) for c in cluster.components] == [SshComponent]

        app = cluster.facet("app")
        assert app is not None
        assert app.indices() == ["0", "1"]
        assert app.default_attributes == {"java_version": "8"}

        db = cluster.facet("db")
        assert db is not None
        assert db.instances == 1
        (zk,) = db.components
        assert isinstance(zk, ZookeeperComponent)
        assert zk.client_port == 2182

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(TopologyError, match="Cannot read"):
            load_topology(tmp_path / "absent.yaml")

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "clusters.yaml"
        path.write_text("web: [unclosed\n")
        with pytest.raises(TopologyError, match="Invalid YAML"):
            load_topology(path)

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "clusters.yaml"
        path.write_text("")
        assert load_topology(path) == {}


class TestParseTopologyErrors:
    def test_not_a_mapping(self) -> None:
        with pytest.raises(TopologyError):
            parse_topology(["web"])

    def test_hyphenated_cluster_name(self) -> None:
        with pytest.raises(TopologyError, match="Invalid cluster name"):
            parse_topology({"web-east": {}})

    def test_hyphenated_facet_name(self) -> None:
        with pytest.raises(TopologyError, match="Invalid facet name"):
            parse_topology({"web": {"facets": {"app-server": {}}}})

    def test_unknown_cluster_key(self) -> None:
        with pytest.raises(TopologyError, match="unknown keys"):
            parse_topology({"web": {"facet": {}}})

    @pytest.mark.parametrize("instances", [-1, "3", True, 1.5])
    def test_bad_instance_count(self, instances: object) -> None:
        with pytest.raises(TopologyError, match="instances"):
            parse_topology({"web": {"facets": {"app": {"instances": instances}}}})

    def test_unknown_component(self) -> None:
        with pytest.raises(TopologyError, match="unknown component 'memcached'"):
            parse_topology({"web": {"components": ["memcached"]}})

    def test_unknown_component_setting(self) -> None:
        with pytest.raises(TopologyError, match="no settings"):
            parse_topology({"web": {"components": [{"name": "ssh", "colour": "blue"}]}})

    def test_run_list_must_be_a_list(self) -> None:
        with pytest.raises(TopologyError, match="run_list"):
            parse_topology({"web": {"run_list": "base"}})

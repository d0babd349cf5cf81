"""End-to-end tests for the ``clusterdiff`` CLI in offline (cache file) mode.

A topology YAML, a JSON-lines registry cache and a JSON-lines cloud
inventory are written to a temp dir; the CLI is driven with click's
CliRunner and its report checked.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from clusterdiff.app import ClusterDiffApp
from clusterdiff.cli import cli
from clusterdiff.models.config import ClusterDiffConfig

from .conftest import WEB_TOPOLOGY

_BANNER = "  " + "-" * 80


def _write_jsonl(path: Path, records: list[dict]) -> Path:
    path.write_text("\n".join(json.dumps(r) for r in records) + "\n", encoding="utf-8")
    return path


def _roles() -> list[dict]:
    return [
        {
            "name": "web-cluster",
            "default_attributes": {"ntp": {"servers": ["pool.ntp.org"]}},
            "override_attributes": {},
        },
        {"name": "web-app-facet", "default_attributes": {"java_version": "7"}, "override_attributes": {}},
        {"name": "web-db-facet", "default_attributes": {}, "override_attributes": {}},
    ]


def _app_node(index: int) -> dict:
    return {
        "name": f"web-app-{index}",
        "cluster_name": "web",
        "run_list": ["recipe[base]", "role[web_app]"],
        "announces": {"web-ssh": {"name": "ssh", "info": {"port": 22, "allow_groups": []}}},
        "ec2": {"instance_id": f"i-app{index}"},
    }


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    (tmp_path / "clusters.yaml").write_text(yaml.safe_dump(WEB_TOPOLOGY), encoding="utf-8")
    _write_jsonl(tmp_path / "chef.jsonl", _roles() + [_app_node(0), _app_node(1)])
    _write_jsonl(
        tmp_path / "inventory.jsonl",
        [
            {"type": "instance", "id": "i-app0", "groups": ["web"], "state": "running"},
            {"type": "instance", "id": "i-dup-a", "groups": ["web"], "tags": {"cluster": "web", "facet": "db", "index": "0"}},
            {"type": "instance", "id": "i-dup-b", "groups": ["web"], "tags": {"cluster": "web", "facet": "db", "index": "0"}},
            {"type": "volume", "id": "vol-1", "server_id": "i-app0"},
        ],
    )
    return tmp_path


@pytest.fixture(autouse=True)
def _no_logging_setup():
    # Keep the test process's structlog configuration untouched.
    with patch("clusterdiff.cli.main.setup_logging"):
        yield


def _invoke(*args: str):
    return CliRunner().invoke(cli, list(args), env={"CLUSTERDIFF_REGISTRY_URL": ""})


class TestDiffCommand:
    def test_missing_selector_prints_usage_and_fails(self) -> None:
        result = _invoke("diff")
        assert result.exit_code == 1
        assert "Usage" in result.output

    def test_reports_changed_attribute_and_equal_run_list(self, workdir: Path) -> None:
        result = _invoke(
            "diff",
            "web-app-0",
            "--topology",
            str(workdir / "clusters.yaml"),
            "--cache-file",
            str(workdir / "chef.jsonl"),
        )
        assert result.exit_code == 0, result.output
        assert f"{_BANNER}\n  Displaying manifest diffs for web-app-0\n{_BANNER}\n" in result.output
        assert "    facet_default_attributes.java_version: changed\n" in result.output
        assert '        local:  "8"\n' in result.output
        assert '        remote: "7"\n' in result.output
        assert "run_list" not in result.output
        assert "components" not in result.output

    def test_missing_node_reports_local_only_and_keeps_going(self, workdir: Path) -> None:
        result = _invoke(
            "diff",
            "web-app",
            "--topology",
            str(workdir / "clusters.yaml"),
            "--cache_file",
            str(workdir / "chef.jsonl"),
        )
        assert result.exit_code == 0, result.output
        for index in range(3):
            assert f"Displaying manifest diffs for web-app-{index}" in result.output
        assert "    run_list: only in local\n" in result.output

    def test_bogus_server_is_marked_in_header(self, workdir: Path) -> None:
        _write_jsonl(
            workdir / "chef.jsonl",
            _roles() + [{"name": "web-db-0", "cluster_name": "web", "run_list": ["recipe[base]"]}],
        )
        result = _invoke(
            "diff",
            "web-db",
            "--topology",
            str(workdir / "clusters.yaml"),
            "--cache-file",
            str(workdir / "chef.jsonl"),
            "--inventory-file",
            str(workdir / "inventory.jsonl"),
        )
        assert result.exit_code == 0, result.output
        assert "Displaying manifest diffs for web-db-0 (bogus: duplicate)" in result.output
        assert result.output.count("Displaying manifest diffs for") == 1

    def test_missing_role_is_fatal(self, workdir: Path) -> None:
        _write_jsonl(workdir / "chef.jsonl", [_app_node(0)])
        result = _invoke(
            "diff",
            "web-app-0",
            "--topology",
            str(workdir / "clusters.yaml"),
            "--cache-file",
            str(workdir / "chef.jsonl"),
        )
        assert result.exit_code == 1
        assert "web-cluster" in result.output

    def test_unknown_cluster_is_fatal(self, workdir: Path) -> None:
        result = _invoke(
            "diff",
            "api",
            "--topology",
            str(workdir / "clusters.yaml"),
            "--cache-file",
            str(workdir / "chef.jsonl"),
        )
        assert result.exit_code == 1
        assert "Unknown cluster 'api'" in result.output

    def test_no_registry_source_is_fatal(self, workdir: Path) -> None:
        result = _invoke("diff", "web", "--topology", str(workdir / "clusters.yaml"))
        assert result.exit_code == 1
        assert "No registry source" in result.output


class TestDiscoverCommand:
    def test_lists_correlation_and_flags_duplicates(self, workdir: Path) -> None:
        result = _invoke(
            "discover",
            "web",
            "--topology",
            str(workdir / "clusters.yaml"),
            "--cache-file",
            str(workdir / "chef.jsonl"),
            "--inventory-file",
            str(workdir / "inventory.jsonl"),
        )
        assert result.exit_code == 0, result.output
        lines = {line.split()[0]: line for line in result.output.splitlines() if line.startswith("web-")}
        assert set(lines) == {"web-app-0", "web-app-1", "web-app-2", "web-db-0", "web-db-0~dup1"}
        assert "i-app0" in lines["web-app-0"] and "vol-1" in lines["web-app-0"]
        assert "BOGUS" not in lines["web-app-0"]
        assert "BOGUS:duplicate" in lines["web-db-0"]
        assert "BOGUS:duplicate" in lines["web-db-0~dup1"]


class TestAppLifecycle:
    def test_commands_require_open(self) -> None:
        app = ClusterDiffApp(ClusterDiffConfig())
        with pytest.raises(RuntimeError, match="before open"):
            app.diff("web")
        with pytest.raises(RuntimeError, match="before open"):
            app.discover("web")

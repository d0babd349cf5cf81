"""Registry source backed by a pre-captured JSON-lines file.

Each line is one JSON object holding at least a ``name`` field; nodes and
roles share the file and are told apart only by how they are looked up.
When this source is active no live registry call is ever made.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from clusterdiff.errors import ResourceQueryError
from clusterdiff.models.records import Found, NodeRecord, NotFound, RoleRecord
from clusterdiff.observability.logging import get_logger
from clusterdiff.query.base import NodeLookup, RegistrySource, RoleLookup

_log = get_logger("query.cache_file")


def read_json_lines(path: str | Path) -> Iterator[dict[str, Any]]:
    """Yield one JSON object per non-blank line of *path*.

    Raises:
        ResourceQueryError: if the file is unreadable or a line is not a JSON object.
    """
    path = Path(path)
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ResourceQueryError(str(path), exc) from exc

    for lineno, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        try:
            datum = json.loads(line)
        except json.JSONDecodeError as exc:
            raise ResourceQueryError(f"{path}:{lineno}", exc) from exc
        if not isinstance(datum, dict):
            raise ResourceQueryError(f"{path}:{lineno}", "line is not a JSON object")
        yield datum


class CacheFileRegistry(RegistrySource):
    """Nodes and roles read from a JSON-lines fixture, keyed by ``name``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._records: dict[str, dict[str, Any]] = {}
        for datum in read_json_lines(self._path):
            name = datum.get("name")
            if not name:
                raise ResourceQueryError(str(self._path), "record without a 'name' field")
            self._records[str(name)] = datum
        _log.info("registry cache file loaded", path=str(self._path), records=len(self._records))

    @property
    def source_name(self) -> str:
        return f"cache_file:{self._path}"

    def get_node(self, name: str) -> NodeLookup:
        datum = self._records.get(name)
        if datum is None:
            return NotFound(kind="node", name=name)
        return Found(NodeRecord(datum))

    def get_role(self, name: str) -> RoleLookup:
        datum = self._records.get(name)
        if datum is None:
            return NotFound(kind="role", name=name)
        return Found(RoleRecord.from_dict(datum))

    def search_nodes(self, cluster_name: str) -> Iterator[NodeRecord]:
        for datum in self._records.values():
            if datum.get("cluster_name") == cluster_name:
                yield NodeRecord(datum)

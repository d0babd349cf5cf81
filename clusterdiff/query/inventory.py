"""Cloud sources that do not talk to a live provider."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from clusterdiff.errors import ResourceQueryError
from clusterdiff.models.records import CloudAddress, CloudInstance, CloudVolume
from clusterdiff.observability.logging import get_logger
from clusterdiff.query.base import CloudSource
from clusterdiff.query.cache_file import read_json_lines

_log = get_logger("query.inventory")


class StaticCloud(CloudSource):
    """In-memory inventory; empty unless resources are passed in."""

    def __init__(
        self,
        instances: Iterable[CloudInstance] = (),
        volumes: Iterable[CloudVolume] = (),
        addresses: Iterable[CloudAddress] = (),
    ) -> None:
        self.instances = list(instances)
        self.volumes = list(volumes)
        self.addresses = list(addresses)

    @property
    def source_name(self) -> str:
        return "static"

    def list_instances(self) -> list[CloudInstance]:
        return list(self.instances)

    def list_volumes(self) -> list[CloudVolume]:
        return list(self.volumes)

    def list_addresses(self) -> list[CloudAddress]:
        return list(self.addresses)


class InventoryFileCloud(StaticCloud):
    """Inventory captured to a JSON-lines file.

    Every line carries ``type`` (``instance``, ``volume`` or ``address``)
    alongside the resource fields.
    """

    def __init__(self, path: str | Path) -> None:
        super().__init__()
        self._path = Path(path)
        parsers = {
            "instance": (CloudInstance.from_dict, self.instances),
            "volume": (CloudVolume.from_dict, self.volumes),
            "address": (CloudAddress.from_dict, self.addresses),
        }
        for datum in read_json_lines(self._path):
            kind = str(datum.get("type", "instance"))
            if kind not in parsers:
                raise ResourceQueryError(str(self._path), f"unknown resource type {kind!r}")
            parse, bucket = parsers[kind]
            try:
                bucket.append(parse(datum))
            except KeyError as exc:
                raise ResourceQueryError(str(self._path), f"{kind} record missing field {exc}") from exc
            except (TypeError, ValueError, AttributeError) as exc:
                raise ResourceQueryError(str(self._path), f"malformed {kind} record: {exc}") from exc
        _log.info(
            "cloud inventory file loaded",
            path=str(self._path),
            instances=len(self.instances),
            volumes=len(self.volumes),
            addresses=len(self.addresses),
        )

    @property
    def source_name(self) -> str:
        return f"inventory_file:{self._path}"

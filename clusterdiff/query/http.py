"""Registry source talking JSON over HTTP.

Endpoints:
    GET /nodes/{name}                        -- node record
    GET /roles/{name}                        -- role record
    GET /search/node?q=cluster_name:{name}   -- ``{"rows": [node, ...]}``

Every request carries a timeout.  Transport errors and 5xx responses are
retried with exponential back-off up to ``max_retries`` times; a 404 is a
NotFound result, never an error.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx

from clusterdiff.errors import ResourceQueryError
from clusterdiff.models.config import RegistryConfig
from clusterdiff.models.records import Found, NodeRecord, NotFound, RoleRecord
from clusterdiff.observability.logging import get_logger
from clusterdiff.query.base import NodeLookup, RegistrySource, RoleLookup

_log = get_logger("query.http")

_BACKOFF_BASE_SECONDS = 0.5


class HttpRegistry(RegistrySource):
    """Blocking httpx client for the configuration registry API.

    Args:
        config:    URL, token, timeout and retry budget.
        transport: Optional httpx transport (tests pass an httpx.MockTransport).
        sleep:     Back-off sleeper, replaceable in tests.
    """

    def __init__(
        self,
        config: RegistryConfig,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not config.url:
            raise ValueError("Registry url must not be empty")
        headers = {"Accept": "application/json"}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        self._url = config.url
        self._max_retries = config.max_retries
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=config.url,
            headers=headers,
            timeout=config.timeout_seconds,
            transport=transport,
        )

    @property
    def source_name(self) -> str:
        return f"registry:{self._url}"

    def get_node(self, name: str) -> NodeLookup:
        body = self._get(f"/nodes/{name}")
        if body is None:
            return NotFound(kind="node", name=name)
        return Found(NodeRecord(body))

    def get_role(self, name: str) -> RoleLookup:
        body = self._get(f"/roles/{name}")
        if body is None:
            return NotFound(kind="role", name=name)
        return Found(RoleRecord.from_dict(body))

    def search_nodes(self, cluster_name: str) -> list[NodeRecord]:
        body = self._get("/search/node", params={"q": f"cluster_name:{cluster_name}"})
        rows = (body or {}).get("rows") or []
        return [NodeRecord(row) for row in rows if isinstance(row, dict)]

    def close(self) -> None:
        self._client.close()

    def _get(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any] | None:
        """GET *path*, returning the decoded body or None on 404."""
        attempt = 0
        while True:
            try:
                response = self._client.get(path, params=params)
            except httpx.TransportError as exc:
                if attempt >= self._max_retries:
                    raise ResourceQueryError(self.source_name, exc) from exc
                _log.warning("registry_request_retry", path=path, attempt=attempt + 1, error=str(exc))
            else:
                if response.status_code == 404:
                    return None
                if response.status_code < 500:
                    return self._decode(path, response)
                if attempt >= self._max_retries:
                    raise ResourceQueryError(self.source_name, f"HTTP {response.status_code} for {path}")
                _log.warning(
                    "registry_request_retry",
                    path=path,
                    attempt=attempt + 1,
                    status_code=response.status_code,
                )
            self._sleep(_BACKOFF_BASE_SECONDS * (2**attempt))
            attempt += 1

    def _decode(self, path: str, response: httpx.Response) -> dict[str, Any]:
        try:
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPStatusError, ValueError) as exc:
            raise ResourceQueryError(self.source_name, f"{path}: {exc}") from exc
        if not isinstance(body, dict):
            raise ResourceQueryError(self.source_name, f"{path}: response is not a JSON object")
        return body

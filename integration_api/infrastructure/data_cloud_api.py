from __future__ import annotations

from typing import Any, Dict

import httpx

from integration_api.domain.entities import OrgConnection
from integration_api.domain.errors import UpstreamError


class DataCloudApi:
    """Runs ANSI SQL queries against a Data Cloud org."""

    def __init__(self, connection: OrgConnection, client: httpx.AsyncClient) -> None:
        self._connection = connection
        self._client = client

    async def query(self, sql: str) -> Dict[str, Any]:
        try:
            response = await self._client.post(
                f"{self._connection.instance_url}/api/v2/query",
                json={"sql": sql},
                headers={"Authorization": f"Bearer {self._connection.access_token}"},
            )
        except httpx.RequestError as exc:
            raise UpstreamError(f"Data Cloud query failed: {exc}") from exc
        if response.is_error:
            raise UpstreamError(f"Data Cloud query failed: HTTP {response.status_code} {response.text}")
        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Data Cloud query failed: response is not JSON (HTTP {response.status_code})") from exc
        if not isinstance(body, dict):
            raise UpstreamError(f"Data Cloud query failed: unexpected response body {body!r}")
        return body

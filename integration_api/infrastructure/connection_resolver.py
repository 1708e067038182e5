"""Resolves named org connections through the integration add-on API."""
from __future__ import annotations

import logging

import httpx

from integration_api.domain.entities import OrgConnection
from integration_api.domain.errors import NotFoundError, UpstreamError

logger = logging.getLogger(__name__)


class ConnectionResolver:
    """Looks up authorized connections by developer name."""

    def __init__(self, api_url: str, token: str, client: httpx.AsyncClient, default_api_version: str) -> None:
        self._api_url = api_url.rstrip("/")
        self._token = token
        self._client = client
        self._default_api_version = default_api_version

    async def get_connection(self, name: str) -> OrgConnection:
        url = f"{self._api_url}/authorizations/{name}"
        try:
            response = await self._client.get(url, headers={"Authorization": f"Bearer {self._token}"})
        except httpx.RequestError as exc:
            raise UpstreamError(f"Failed to get connection '{name}': {exc}") from exc

        if response.status_code == 404:
            raise NotFoundError(f"Connection not found: {name}")
        if response.is_error:
            raise UpstreamError(f"Failed to get connection '{name}': HTTP {response.status_code}")

        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(f"Failed to get connection '{name}': response is not JSON") from exc
        org = payload.get("org") if isinstance(payload, dict) else None
        if not isinstance(org, dict):
            raise UpstreamError(f"Failed to get connection '{name}': response has no org")
        user_auth = org.get("user_auth") or {}
        if not isinstance(user_auth, dict) or not org.get("instance_url") or not user_auth.get("access_token"):
            raise UpstreamError(f"Connection '{name}' has no instance URL or access token")

        return OrgConnection(
            id=org.get("id", ""),
            name=org.get("developer_name") or name,
            instance_url=org["instance_url"].rstrip("/"),
            access_token=user_auth["access_token"],
            api_version=str(org.get("api_version") or self._default_api_version),
            username=user_auth.get("username", ""),
        )

"""Salesforce REST adapter implementing the data API port over httpx."""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

import httpx

from integration_api.domain.entities import InvocationContext
from integration_api.domain.errors import CommitError, UpstreamError
from integration_api.domain.record_graph import CommitResult, RecordGraph
from integration_api.infrastructure.composite_graph import from_composite_graph, to_composite_graph

logger = logging.getLogger(__name__)


def _describe_failure(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}: {response.text}"
    if isinstance(body, list) and body and isinstance(body[0], dict):
        return f"HTTP {response.status_code}: {body[0].get('errorCode')} {body[0].get('message')}"
    return f"HTTP {response.status_code}: {body}"


def _json_object(response: httpx.Response, action: str) -> Dict[str, Any]:
    """Decode a JSON object body, raising UpstreamError for anything else."""
    try:
        body = response.json()
    except ValueError as exc:
        raise UpstreamError(f"{action}: response is not JSON (HTTP {response.status_code})") from exc
    if not isinstance(body, dict):
        raise UpstreamError(f"{action}: unexpected response body {body!r}")
    return body


class SalesforceDataApi:
    """Data API bound to one org's instance URL and access token."""

    def __init__(self, context: InvocationContext, client: httpx.AsyncClient) -> None:
        self._context = context
        self._client = client

    @property
    def org_id(self) -> str:
        return self._context.org_id

    @property
    def _base_path(self) -> str:
        return f"{self._context.instance_url}/services/data/v{self._context.api_version}"

    @property
    def _headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self._context.access_token}"}

    async def query(self, soql: str) -> List[Dict[str, Any]]:
        """Run a SOQL query, following nextRecordsUrl until done."""
        records: List[Dict[str, Any]] = []
        url = f"{self._base_path}/query"
        params: Dict[str, str] | None = {"q": soql}

        while url:
            try:
                response = await self._client.get(url, params=params, headers=self._headers)
            except httpx.RequestError as exc:
                raise UpstreamError(f"Query failed for org {self.org_id}: {exc}") from exc
            if response.is_error:
                raise UpstreamError(f"Query failed for org {self.org_id}: {_describe_failure(response)}")

            payload = _json_object(response, f"Query failed for org {self.org_id}")
            page = payload.get("records") or []
            if not isinstance(page, list):
                raise UpstreamError(f"Query failed for org {self.org_id}: records is not a list")
            for record in page:
                if not isinstance(record, dict):
                    continue
                records.append({key: value for key, value in record.items() if key != "attributes"})

            next_url = None if payload.get("done", True) else payload.get("nextRecordsUrl")
            url = f"{self._context.instance_url}{next_url}" if next_url else None
            params = None

        return records

    def new_graph(self) -> RecordGraph:
        return RecordGraph()

    async def commit_graph(self, graph: RecordGraph) -> CommitResult:
        """Submit ``graph`` through the composite graph resource in one request."""
        body = to_composite_graph(graph, self._context.api_version)
        try:
            response = await self._client.post(
                f"{self._base_path}/composite/graph", json=body, headers=self._headers
            )
        except httpx.RequestError as exc:
            raise CommitError(str(exc) or exc.__class__.__name__) from exc
        if response.is_error:
            raise CommitError(_describe_failure(response))
        try:
            payload = _json_object(response, "Failed to insert record")
        except UpstreamError as exc:
            raise CommitError(str(exc)) from exc
        return from_composite_graph(graph, payload)

    async def create_record(self, record_type: str, fields: Dict[str, Any]) -> str:
        try:
            response = await self._client.post(
                f"{self._base_path}/sobjects/{record_type}/", json=fields, headers=self._headers
            )
        except httpx.RequestError as exc:
            raise UpstreamError(f"Failed to create {record_type}: {exc}") from exc
        if response.is_error:
            raise UpstreamError(f"Failed to create {record_type}: {_describe_failure(response)}")
        return _json_object(response, f"Failed to create {record_type}").get("id")

    async def upload_content_version(self, filename: str, record_id: str, data: bytes) -> str:
        """Upload ``data`` as a new ContentVersion published to ``record_id``."""
        entity_content = {
            "ReasonForChange": "New PDF version",
            "PathOnClient": filename,
            "FirstPublishLocationId": record_id,
        }
        files = {
            "entity_content": (None, json.dumps(entity_content), "application/json"),
            "VersionData": (filename, data, "application/pdf"),
        }
        try:
            response = await self._client.post(
                f"{self._base_path}/sobjects/ContentVersion/", files=files, headers=self._headers
            )
        except httpx.RequestError as exc:
            raise UpstreamError(f"Failed to upload {filename}: {exc}") from exc
        if response.is_error:
            raise UpstreamError(f"Failed to upload {filename}: {_describe_failure(response)}")

        content_version_id = _json_object(response, f"Failed to upload {filename}").get("id")
        logger.info(f"Uploaded {filename} to record {record_id} as ContentVersion {content_version_id}")
        return content_version_id

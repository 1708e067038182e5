"""
Test configuration and fixtures for integration-api tests.
"""
from __future__ import annotations

import base64
import json
from typing import Any, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient
from unittest.mock import patch

from integration_api.main import app
from integration_api.config import settings
from integration_api.domain.entities import InvocationContext
from integration_api.domain.events import event_publisher
from integration_api.domain.record_graph import CommitResult, RecordGraph, RecordOutcome

INSTANCE_URL = "https://acme.my.salesforce.com"


@pytest.fixture(autouse=True)
def test_settings():
    """Override settings for testing."""
    with patch.multiple(
        settings,
        SALESFORCE_INSTANCE_URL="",
        SALESFORCE_ACCESS_TOKEN="",
        SALESFORCE_ORG_NAME="",
        DATA_CLOUD_ORG="",
        DATA_CLOUD_QUERY="",
        INTEGRATION_API_URL="",
        COMMIT_TIMEOUT_SECONDS=5.0,
        CALLBACK_TIMEOUT_SECONDS=5.0,
    ):
        yield settings


@pytest.fixture(autouse=True)
def clean_event_subscribers():
    event_publisher.clear_subscribers()
    yield
    event_publisher.clear_subscribers()


@pytest.fixture
def client():
    """Create test client."""
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def invocation_context():
    return InvocationContext(
        org_id="00Dxx0000001gPL",
        instance_url=INSTANCE_URL,
        access_token="00Dxx!token",
        api_version="62.0",
        request_id="req-1",
    )


@pytest.fixture
def client_context_header():
    """Encoded x-client-context header for the test org."""
    payload = {
        "requestId": "req-1",
        "accessToken": "00Dxx!token",
        "apiVersion": "62.0",
        "namespace": "",
        "orgId": "00Dxx0000001gPL",
        "orgDomainUrl": INSTANCE_URL,
        "userContext": {"userId": "005xx000001X8Uz", "username": "admin@acme.com"},
    }
    return base64.b64encode(json.dumps(payload).encode("utf-8")).decode("ascii")


class FakeDataApi:
    """In-memory data API assigning sequential ids on commit."""

    ID_PREFIXES = {"Account": "001", "Contact": "003", "Case": "500"}

    def __init__(self, records: List[Dict[str, Any]] | None = None, fail_with: Exception | None = None):
        self.records = records or []
        self.fail_with = fail_with
        self.commit_calls: List[RecordGraph] = []
        self.query_calls: List[str] = []
        self.uploads: List[Dict[str, Any]] = []

    async def query(self, soql: str) -> List[Dict[str, Any]]:
        self.query_calls.append(soql)
        return list(self.records)

    def new_graph(self) -> RecordGraph:
        return RecordGraph()

    async def commit_graph(self, graph: RecordGraph) -> CommitResult:
        self.commit_calls.append(graph)
        if self.fail_with is not None:
            raise self.fail_with
        outcomes = {}
        for index, intent in enumerate(graph):
            prefix = self.ID_PREFIXES.get(intent.record_type, "a00")
            outcomes[intent.reference_id] = RecordOutcome(
                assigned_id=f"{prefix}{index:015d}", success=True
            )
        return CommitResult(outcomes)

    async def create_record(self, record_type: str, fields: Dict[str, Any]) -> str:
        return f"{self.ID_PREFIXES.get(record_type, 'a00')}000000000000001"

    async def upload_content_version(self, filename: str, record_id: str, data: bytes) -> str:
        self.uploads.append({"filename": filename, "record_id": record_id, "data": data})
        return "068000000000001AAA"


@pytest.fixture
def fake_data_api():
    return FakeDataApi(records=[{"Id": "001000000000001", "Name": "Acme"}])


class RecordingTransport:
    """httpx MockTransport handler that records every outbound request."""

    def __init__(self, status_code: int = 200, error: Exception | None = None):
        self.status_code = status_code
        self.error = error
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(self.status_code, json={"ok": True})


@pytest.fixture
def recording_transport():
    return RecordingTransport()


@pytest.fixture
def mock_http_client(recording_transport):
    return httpx.AsyncClient(transport=httpx.MockTransport(recording_transport))


@pytest.fixture
def data_api_factory():
    """Build FakeDataApi instances with custom records or failures."""
    return FakeDataApi


@pytest.fixture
def transport_factory():
    """Build RecordingTransport instances with custom status codes or errors."""
    return RecordingTransport

"""
Tests for FastAPI endpoints.
"""
import json
import logging
from unittest.mock import AsyncMock, Mock

import httpx
import pytest
from fastapi.testclient import TestClient

from integration_api.main import app
from integration_api.application.callback_dispatcher import CallbackDispatcher
from integration_api.application.data_action_service import DataActionService
from integration_api.dependencies import (
    get_account_service,
    get_alternate_org_lookup,
    get_callback_dispatcher,
    get_data_action_service,
    get_data_api,
    get_pdf_renderer,
)
from integration_api.application.account_service import AccountService, AlternateOrgLookup
from integration_api.domain.errors import UpstreamError

UOW_PAYLOAD = {
    "accountName": "Acme",
    "firstName": "Jane",
    "lastName": "Doe",
    "subject": "Broken widget",
    "description": "It does not spin",
    "callbackUrl": "https://hooks.example.com/uow",
}


@pytest.fixture
def uow_overrides(fake_data_api, mock_http_client):
    """Route the unit of work through the fake data API and a recording callback client."""
    app.dependency_overrides[get_data_api] = lambda: fake_data_api
    app.dependency_overrides[get_callback_dispatcher] = lambda: CallbackDispatcher(mock_http_client, 5)
    yield
    app.dependency_overrides.clear()


class TestRootAndHealth:
    """Test informational endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "Welcome" in response.json()["message"]

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_openapi_documents_callback_and_accounts(self, client):
        schema = client.get("/openapi.json").json()

        callbacks = schema["paths"]["/unitofwork"]["post"]["callbacks"]
        assert "unit_of_work_committed" in callbacks
        assert {"UnitOfWorkCallback", "CaseIdsSchema", "AccountRecord"} <= set(schema["components"]["schemas"])

    def test_detailed_health(self, client):
        response = client.get("/health/detailed")
        data = response.json()
        assert data["integrations"]["data_cloud"] is False
        assert data["integrations"]["alternate_org"] is None


class TestUnitOfWorkEndpoint:
    """Test POST /unitofwork."""

    def test_accepted_and_callback_delivered(
        self, client, uow_overrides, fake_data_api, recording_transport, client_context_header
    ):
        """201 is returned and exactly one callback carries the committed ids."""
        response = client.post(
            "/unitofwork", json=UOW_PAYLOAD, headers={"x-client-context": client_context_header}
        )

        assert response.status_code == 201
        assert response.json() == {"Code201": "Received!", "responseCode": 201}

        assert len(fake_data_api.commit_calls) == 1
        assert len(recording_transport.requests) == 1
        callback = recording_transport.requests[0]
        assert str(callback.url) == "https://hooks.example.com/uow"
        assert callback.headers["Content-Type"] == "application/json"
        assert json.loads(callback.content) == {
            "accountId": "001000000000000000",
            "contactId": "003000000000000001",
            "cases": {
                "serviceCaseId": "500000000000000002",
                "followupCaseId": "500000000000000003",
            },
        }

    def test_missing_last_name_makes_no_calls(
        self, client, uow_overrides, fake_data_api, recording_transport, client_context_header
    ):
        payload = {key: value for key, value in UOW_PAYLOAD.items() if key != "lastName"}

        response = client.post(
            "/unitofwork", json=payload, headers={"x-client-context": client_context_header}
        )

        assert response.status_code == 400
        assert response.json() == {"code": "400", "message": "Please provide lastName"}
        assert fake_data_api.commit_calls == []
        assert recording_transport.requests == []

    @pytest.mark.parametrize("callback_url", [
        "not a url",
        "https://hooks.example.com:abc/x",
        "https://hooks.example.com/a\x00b",
    ])
    def test_invalid_callback_url_makes_no_calls(
        self, callback_url, client, uow_overrides, fake_data_api, recording_transport, client_context_header
    ):
        response = client.post(
            "/unitofwork",
            json={**UOW_PAYLOAD, "callbackUrl": callback_url},
            headers={"x-client-context": client_context_header},
        )

        assert response.status_code == 400
        assert fake_data_api.commit_calls == []
        assert recording_transport.requests == []

    def test_empty_body(self, client, uow_overrides, client_context_header):
        response = client.post("/unitofwork", headers={"x-client-context": client_context_header})

        assert response.status_code == 400
        assert response.json()["message"] == "Please provide accountName"

    def test_missing_client_context(self, client, fake_data_api, mock_http_client):
        app.dependency_overrides[get_callback_dispatcher] = lambda: CallbackDispatcher(mock_http_client, 5)

        response = client.post("/unitofwork", json=UOW_PAYLOAD)

        assert response.status_code == 401
        assert response.json()["code"] == "401"

    def test_callback_failure_keeps_201(
        self, client, fake_data_api, transport_factory, client_context_header, caplog
    ):
        """An unreachable callback URL only shows up in the logs."""
        transport = transport_factory(error=httpx.ConnectError("unreachable"))
        failing_client = httpx.AsyncClient(transport=httpx.MockTransport(transport))
        app.dependency_overrides[get_data_api] = lambda: fake_data_api
        app.dependency_overrides[get_callback_dispatcher] = lambda: CallbackDispatcher(failing_client, 5)

        with caplog.at_level(logging.ERROR):
            response = client.post(
                "/unitofwork", json=UOW_PAYLOAD, headers={"x-client-context": client_context_header}
            )

        assert response.status_code == 201
        assert len(transport.requests) == 1
        assert "Callback to https://hooks.example.com/uow failed" in caplog.text

    def test_commit_failure_keeps_201_and_skips_callback(
        self, data_api_factory, recording_transport, mock_http_client, client_context_header, caplog
    ):
        failing_api = data_api_factory(fail_with=RuntimeError("UNABLE_TO_LOCK_ROW"))
        app.dependency_overrides[get_data_api] = lambda: failing_api
        app.dependency_overrides[get_callback_dispatcher] = lambda: CallbackDispatcher(mock_http_client, 5)
        client = TestClient(app, raise_server_exceptions=False)

        try:
            with caplog.at_level(logging.ERROR):
                response = client.post(
                    "/unitofwork", json=UOW_PAYLOAD, headers={"x-client-context": client_context_header}
                )
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 201
        assert len(failing_api.commit_calls) == 1
        assert recording_transport.requests == []
        assert "Failed to insert record. Root Cause : UNABLE_TO_LOCK_ROW" in caplog.text


class TestAccountsEndpoint:
    """Test GET /accounts."""

    def test_get_accounts(self, client, fake_data_api, client_context_header):
        app.dependency_overrides[get_data_api] = lambda: fake_data_api

        response = client.get("/accounts", headers={"x-client-context": client_context_header})

        assert response.status_code == 200
        assert response.json() == [{"Id": "001000000000001", "Name": "Acme"}]

    def test_alternate_org_failure_still_returns_accounts(self, client, fake_data_api, client_context_header):
        resolver = Mock(get_connection=AsyncMock(side_effect=UpstreamError("resolver down")))
        app.dependency_overrides[get_data_api] = lambda: fake_data_api
        app.dependency_overrides[get_alternate_org_lookup] = lambda: AlternateOrgLookup("other_org", resolver, Mock())

        response = client.get("/accounts", headers={"x-client-context": client_context_header})

        assert response.status_code == 200
        assert response.json() == fake_data_api.records
        resolver.get_connection.assert_awaited_once_with("other_org")

    def test_upstream_failure_is_502(self, client, client_context_header):
        service = Mock(spec=AccountService)
        service.list_accounts = AsyncMock(side_effect=UpstreamError("Query failed"))
        app.dependency_overrides[get_account_service] = lambda: service

        response = client.get("/accounts", headers={"x-client-context": client_context_header})

        assert response.status_code == 502
        assert response.json() == {"code": "502", "message": "Query failed"}

    def test_unhandled_error_is_500(self, client_context_header):
        service = Mock(spec=AccountService)
        service.list_accounts = AsyncMock(side_effect=RuntimeError("boom"))
        app.dependency_overrides[get_account_service] = lambda: service
        client = TestClient(app, raise_server_exceptions=False)

        try:
            response = client.get("/accounts", headers={"x-client-context": client_context_header})
        finally:
            app.dependency_overrides.clear()

        assert response.status_code == 500
        assert response.json() == {"code": "500", "message": "boom"}


class TestDataCloudEndpoint:
    """Test POST /handleDataCloudDataChangeEvent."""

    BODY = {
        "events": [{"ActionDeveloperName": "Order_Action", "EventType": "Update"}],
        "schemas": [{"schemaId": "sch_1"}],
    }

    def test_empty_body(self, client):
        response = client.post("/handleDataCloudDataChangeEvent", content=b"")

        assert response.status_code == 400
        assert response.content == b""

    def test_events_accepted(self, client):
        lookup = Mock(run=AsyncMock())
        app.dependency_overrides[get_data_action_service] = lambda: DataActionService(lookup)

        response = client.post("/handleDataCloudDataChangeEvent", json=self.BODY)

        assert response.status_code == 201
        lookup.run.assert_awaited_once()

    def test_malformed_body(self, client):
        response = client.post("/handleDataCloudDataChangeEvent", content=b"{oops")

        assert response.status_code == 400


class TestGeneratePdfEndpoint:
    """Test POST /generate-pdf."""

    def test_accepted_renders_and_uploads(self, client, fake_data_api, client_context_header):
        renderer = Mock(render=AsyncMock(return_value=b"%PDF-1.7"))
        app.dependency_overrides[get_data_api] = lambda: fake_data_api
        app.dependency_overrides[get_pdf_renderer] = lambda: renderer

        response = client.post(
            "/generate-pdf",
            json={"path": "https://example.com/invoice", "recordId": "001A", "filename": "invoice"},
            headers={"x-client-context": client_context_header},
        )

        assert response.status_code == 201
        renderer.render.assert_awaited_once()
        assert renderer.render.await_args.args[0].path == "https://example.com/invoice"
        assert fake_data_api.uploads == [{"filename": "invoice.pdf", "record_id": "001A", "data": b"%PDF-1.7"}]

    def test_missing_record_id(self, client, fake_data_api, client_context_header):
        renderer = Mock(render=AsyncMock())
        app.dependency_overrides[get_data_api] = lambda: fake_data_api
        app.dependency_overrides[get_pdf_renderer] = lambda: renderer

        response = client.post(
            "/generate-pdf",
            json={"path": "https://example.com/invoice"},
            headers={"x-client-context": client_context_header},
        )

        assert response.status_code == 400
        assert "recordId" in response.json()["message"]
        renderer.render.assert_not_called()
        assert fake_data_api.uploads == []

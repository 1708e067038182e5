"""Tests for application services."""
from __future__ import annotations

import asyncio
import json

import pytest
from unittest.mock import AsyncMock, Mock

from integration_api.application.account_service import ACCOUNTS_QUERY, AccountService, AlternateOrgLookup
from integration_api.application.commit_executor import GraphCommitExecutor
from integration_api.application.data_action_service import (
    DataActionService,
    DataCloudLookup,
    parse_data_action_event,
)
from integration_api.application.request_validation_service import (
    UnitOfWorkValidationService,
    validate_callback_url,
)
from integration_api.application.unit_of_work_service import UnitOfWorkService
from integration_api.domain.entities import OrgConnection, UnitOfWorkRequest
from integration_api.domain.errors import CommitError, UpstreamError, ValidationError
from integration_api.domain.events import DataActionEventsReceived, UnitOfWorkCommitted, event_publisher

VALID_PAYLOAD = {
    "accountName": "Acme",
    "firstName": "Jane",
    "lastName": "Doe",
    "subject": "Broken widget",
    "description": "It does not spin",
    "callbackUrl": "https://hooks.example.com/uow",
}

OTHER_ORG = OrgConnection(
    id="00Dyy0000002",
    name="other_org",
    instance_url="https://other.my.salesforce.com",
    access_token="token",
    api_version="62.0",
)


class TestUnitOfWorkValidationService:
    """Test /unitofwork payload validation."""

    def test_valid_payload(self):
        request = UnitOfWorkValidationService().validate(VALID_PAYLOAD)

        assert request.account_name == "Acme"
        assert request.first_name == "Jane"
        assert request.callback_url == "https://hooks.example.com/uow"

    @pytest.mark.parametrize("field", ["accountName", "lastName", "subject"])
    def test_missing_required_field(self, field):
        payload = dict(VALID_PAYLOAD)
        payload[field] = "  "

        with pytest.raises(ValidationError, match=f"Please provide {field}"):
            UnitOfWorkValidationService().validate(payload)

    def test_optional_fields_may_be_missing(self):
        payload = {key: value for key, value in VALID_PAYLOAD.items() if key not in ("firstName", "description")}

        request = UnitOfWorkValidationService().validate(payload)

        assert request.first_name is None
        assert request.description is None

    def test_callback_url_with_port(self):
        assert validate_callback_url(" https://hooks.example.com:8443/uow ") == "https://hooks.example.com:8443/uow"

    @pytest.mark.parametrize("url", [
        None,
        "",
        "hooks.example.com/uow",
        "/services/apexrest/uow",
        "ftp://x.com/a",
        "https://",
        "https://hooks.example.com:abc/x",
        "https://hooks.example.com:99999/x",
        "https://hooks.example.com/a\x00b",
    ])
    def test_invalid_callback_url(self, url):
        with pytest.raises(ValidationError):
            validate_callback_url(url)


class TestUnitOfWorkService:
    """Test the four-record workflow."""

    def make_service(self, data_api, dispatcher=None):
        dispatcher = dispatcher or Mock(notify=AsyncMock())
        executor = GraphCommitExecutor(data_api, timeout_seconds=5)
        return UnitOfWorkService(data_api, executor, dispatcher), dispatcher

    def request(self) -> UnitOfWorkRequest:
        return UnitOfWorkValidationService().validate(VALID_PAYLOAD)

    def test_build_graph_relationships(self, fake_data_api):
        service, _ = self.make_service(fake_data_api)

        graph, refs = service.build_graph(self.request())

        intents = graph.intents
        assert [intent.record_type for intent in intents] == ["Account", "Contact", "Case", "Case"]
        assert intents[1].fields["AccountId"] == refs.account
        assert intents[2].fields["ContactId"] == refs.contact
        assert intents[2].fields["Origin"] == "Web"
        assert intents[3].fields["ParentId"] == refs.service_case
        assert intents[3].fields["Subject"] == "Follow Up"
        assert intents[3].fields["Description"] == "Follow up with Customer"

    def test_run_notifies_with_committed_ids(self, fake_data_api, invocation_context):
        service, dispatcher = self.make_service(fake_data_api)
        committed = []
        event_publisher.subscribe(UnitOfWorkCommitted, committed.append)

        envelope = asyncio.run(service.run(self.request(), invocation_context))

        assert envelope == {
            "accountId": "001000000000000000",
            "contactId": "003000000000000001",
            "cases": {"serviceCaseId": "500000000000000002", "followupCaseId": "500000000000000003"},
        }
        dispatcher.notify.assert_awaited_once_with("https://hooks.example.com/uow", envelope, invocation_context)
        assert committed[0].org_id == invocation_context.org_id
        assert len(committed[0].record_ids) == 4

    def test_commit_failure_skips_callback(self, data_api_factory):
        data_api = data_api_factory(fail_with=RuntimeError("FIELD_INTEGRITY_EXCEPTION"))
        service, dispatcher = self.make_service(data_api)

        with pytest.raises(CommitError, match="FIELD_INTEGRITY_EXCEPTION"):
            asyncio.run(service.run(self.request()))
        dispatcher.notify.assert_not_called()


class TestAccountService:
    """Test Account queries."""

    def test_lists_invoking_org_accounts(self, fake_data_api):
        service = AccountService(fake_data_api)

        accounts = asyncio.run(service.list_accounts("00Dxx"))

        assert accounts == [{"Id": "001000000000001", "Name": "Acme"}]
        assert fake_data_api.query_calls == [ACCOUNTS_QUERY]

    def test_alternate_org_is_queried_first(self, fake_data_api, data_api_factory):
        other_api = data_api_factory(records=[{"Id": "001X", "Name": "Other"}] * 3)
        resolver = Mock(get_connection=AsyncMock(return_value=OTHER_ORG))
        lookup = AlternateOrgLookup("other_org", resolver, lambda connection: other_api)

        accounts = asyncio.run(AccountService(fake_data_api, lookup).list_accounts())

        resolver.get_connection.assert_awaited_once_with("other_org")
        assert other_api.query_calls == [ACCOUNTS_QUERY]
        assert accounts == fake_data_api.records

    def test_alternate_org_failure_is_logged(self, fake_data_api):
        resolver = Mock(get_connection=AsyncMock(side_effect=UpstreamError("resolver down")))
        lookup = AlternateOrgLookup("other_org", resolver, Mock())

        assert asyncio.run(lookup.count_accounts()) is None
        accounts = asyncio.run(AccountService(fake_data_api, lookup).list_accounts())
        assert accounts == fake_data_api.records


class TestDataActionService:
    """Test Data Cloud data action handling."""

    BODY = json.dumps({
        "events": [{
            "ActionDeveloperName": "Order_Action",
            "EventType": "Update",
            "EventPrompt": "Order changed",
            "SourceObjectDeveloperName": "Order__dlm",
            "EventPublishDateTime": "2024-05-01T10:00:00Z",
            "PayloadCurrentValue": {"Status": "Shipped"},
        }],
        "schemas": [{"schemaId": "sch_1"}],
    }).encode("utf-8")

    def test_parse(self):
        event = parse_data_action_event(self.BODY)

        assert event.count == 1
        assert event.schema_ids() == ["sch_1"]

    @pytest.mark.parametrize("body", [b"not json", b"[1, 2]", b'{"events": {}}'])
    def test_parse_invalid(self, body):
        with pytest.raises(ValidationError):
            parse_data_action_event(body)

    def test_handle_without_lookup(self):
        received = []
        event_publisher.subscribe(DataActionEventsReceived, received.append)

        asyncio.run(DataActionService().handle(parse_data_action_event(self.BODY)))

        assert received[0].count == 1
        assert received[0].schema_ids == ["sch_1"]

    def test_handle_runs_configured_query(self):
        cloud_api = Mock(query=AsyncMock(return_value={"data": [["row"]]}))
        resolver = Mock(get_connection=AsyncMock(return_value=OTHER_ORG))
        lookup = DataCloudLookup("dc_org", "SELECT 1", resolver, lambda connection: cloud_api)

        asyncio.run(DataActionService(lookup).handle(parse_data_action_event(self.BODY)))

        resolver.get_connection.assert_awaited_once_with("dc_org")
        cloud_api.query.assert_awaited_once_with("SELECT 1")

"""Application service for the /unitofwork Account, Contact and Case workflow."""
from __future__ import annotations

import logging
from typing import NamedTuple, Optional

from integration_api.application.callback_dispatcher import CallbackDispatcher
from integration_api.application.commit_executor import GraphCommitExecutor
from integration_api.domain.entities import CallbackEnvelope, InvocationContext, UnitOfWorkRequest
from integration_api.domain.errors import CommitError
from integration_api.domain.events import UnitOfWorkCommitted, event_publisher
from integration_api.domain.ports import DataApiPort
from integration_api.domain.record_graph import CommitResult, RecordGraph, RecordReference

logger = logging.getLogger(__name__)


class UnitOfWorkReferences(NamedTuple):
    """Temporary references of the four records in a unit of work."""

    account: RecordReference
    contact: RecordReference
    service_case: RecordReference
    followup_case: RecordReference


class UnitOfWorkService:
    """Builds the record graph, commits it and reports the ids to the caller's callback."""

    def __init__(
        self,
        data_api: DataApiPort,
        executor: GraphCommitExecutor,
        dispatcher: CallbackDispatcher,
    ) -> None:
        self._data_api = data_api
        self._executor = executor
        self._dispatcher = dispatcher

    def build_graph(self, request: UnitOfWorkRequest) -> tuple[RecordGraph, UnitOfWorkReferences]:
        graph = self._data_api.new_graph()

        account = graph.register_create("Account", {"Name": request.account_name})
        contact = graph.register_create("Contact", {
            "FirstName": request.first_name,
            "LastName": request.last_name,
            "AccountId": account,
        })
        service_case = graph.register_create("Case", {
            "Subject": request.subject,
            "Description": request.description,
            "Origin": "Web",
            "Status": "New",
            "AccountId": account,
            "ContactId": contact,
        })
        followup_case = graph.register_create("Case", {
            "ParentId": service_case,
            "Subject": "Follow Up",
            "Description": "Follow up with Customer",
            "Origin": "Web",
            "Status": "New",
            "AccountId": account,
            "ContactId": contact,
        })

        return graph, UnitOfWorkReferences(account, contact, service_case, followup_case)

    @staticmethod
    def build_envelope(result: CommitResult, refs: UnitOfWorkReferences) -> CallbackEnvelope:
        return {
            "accountId": result.id_of(refs.account),
            "contactId": result.id_of(refs.contact),
            "cases": {
                "serviceCaseId": result.id_of(refs.service_case),
                "followupCaseId": result.id_of(refs.followup_case),
            },
        }

    async def run(
        self, request: UnitOfWorkRequest, context: Optional[InvocationContext] = None
    ) -> CallbackEnvelope:
        """Commit the unit of work, then notify the callback URL.

        CommitError is logged and re-raised; callback failures are only logged.
        """
        graph, refs = self.build_graph(request)

        try:
            result = await self._executor.commit(graph)
        except CommitError as exc:
            logger.error(str(exc))
            raise

        envelope = self.build_envelope(result, refs)
        org_id = context.org_id if context else ""
        logger.info(f"Unit of work committed for org {org_id}: {envelope}")
        event_publisher.publish(UnitOfWorkCommitted(
            event_id="",
            timestamp=None,
            aggregate_id=envelope["accountId"],
            org_id=org_id,
            record_ids={reference_id: outcome.assigned_id for reference_id, outcome in result.items()},
        ))

        await self._dispatcher.notify(request.callback_url, envelope, context)
        return envelope

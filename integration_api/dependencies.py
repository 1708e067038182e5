from __future__ import annotations

import logging
from typing import Optional

import httpx
from fastapi import Depends, Header, Request

from integration_api.config import settings
from integration_api.domain.entities import InvocationContext, OrgConnection
from integration_api.infrastructure.client_context import CLIENT_CONTEXT_HEADER, resolve_invocation_context
from integration_api.infrastructure.connection_resolver import ConnectionResolver
from integration_api.infrastructure.data_cloud_api import DataCloudApi
from integration_api.infrastructure.http_client import get_http_client
from integration_api.infrastructure.pdf_renderer import PlaywrightPdfRenderer
from integration_api.infrastructure.salesforce_data_api import SalesforceDataApi
from integration_api.application.account_service import AccountService, AlternateOrgLookup
from integration_api.application.callback_dispatcher import CallbackDispatcher
from integration_api.application.commit_executor import GraphCommitExecutor
from integration_api.application.data_action_service import DataActionService, DataCloudLookup
from integration_api.application.pdf_generation_service import PdfGenerationService
from integration_api.application.request_validation_service import UnitOfWorkValidationService
from integration_api.application.unit_of_work_service import UnitOfWorkService

logger = logging.getLogger(__name__)


# Startup-time collaborators (stored on app.state by main.startup_event)

def build_connection_resolver(client: httpx.AsyncClient) -> Optional[ConnectionResolver]:
    if not settings.INTEGRATION_API_URL:
        return None
    return ConnectionResolver(
        api_url=settings.INTEGRATION_API_URL,
        token=settings.INTEGRATION_TOKEN,
        client=client,
        default_api_version=settings.SALESFORCE_API_VERSION,
    )


def build_alternate_org_lookup(client: httpx.AsyncClient) -> Optional[AlternateOrgLookup]:
    if not settings.SALESFORCE_ORG_NAME:
        return None
    resolver = build_connection_resolver(client)
    if resolver is None:
        logger.warning(
            f"SALESFORCE_ORG_NAME is set to '{settings.SALESFORCE_ORG_NAME}' but INTEGRATION_API_URL is empty; "
            "alternate org lookup disabled"
        )
        return None

    def data_api_for(connection: OrgConnection) -> SalesforceDataApi:
        return SalesforceDataApi(connection.as_context(), client)

    return AlternateOrgLookup(settings.SALESFORCE_ORG_NAME, resolver, data_api_for)


def build_data_cloud_lookup(client: httpx.AsyncClient) -> Optional[DataCloudLookup]:
    if not (settings.DATA_CLOUD_ORG and settings.DATA_CLOUD_QUERY):
        if settings.DATA_CLOUD_ORG or settings.DATA_CLOUD_QUERY:
            logger.warning("DATA_CLOUD_ORG and DATA_CLOUD_QUERY must both be set; Data Cloud lookup disabled")
        return None
    resolver = build_connection_resolver(client)
    if resolver is None:
        logger.warning("DATA_CLOUD_ORG is set but INTEGRATION_API_URL is empty; Data Cloud lookup disabled")
        return None

    def api_for(connection: OrgConnection) -> DataCloudApi:
        return DataCloudApi(connection, client)

    return DataCloudLookup(settings.DATA_CLOUD_ORG, settings.DATA_CLOUD_QUERY, resolver, api_for)


# Request-scoped dependencies

def get_invocation_context(
    x_client_context: Optional[str] = Header(None, alias=CLIENT_CONTEXT_HEADER),
) -> InvocationContext:
    return resolve_invocation_context(x_client_context)


def get_data_api(
    context: InvocationContext = Depends(get_invocation_context),
    client: httpx.AsyncClient = Depends(get_http_client),
) -> SalesforceDataApi:
    return SalesforceDataApi(context, client)


def get_alternate_org_lookup(request: Request) -> Optional[AlternateOrgLookup]:
    return getattr(request.app.state, "alternate_org", None)


def get_data_cloud_lookup(request: Request) -> Optional[DataCloudLookup]:
    return getattr(request.app.state, "data_cloud_lookup", None)


def get_account_service(
    data_api: SalesforceDataApi = Depends(get_data_api),
    alternate_org: Optional[AlternateOrgLookup] = Depends(get_alternate_org_lookup),
) -> AccountService:
    return AccountService(data_api, alternate_org)


def get_unit_of_work_validation_service() -> UnitOfWorkValidationService:
    return UnitOfWorkValidationService()


def get_callback_dispatcher(client: httpx.AsyncClient = Depends(get_http_client)) -> CallbackDispatcher:
    return CallbackDispatcher(client, timeout_seconds=settings.CALLBACK_TIMEOUT_SECONDS)


def get_unit_of_work_service(
    data_api: SalesforceDataApi = Depends(get_data_api),
    dispatcher: CallbackDispatcher = Depends(get_callback_dispatcher),
) -> UnitOfWorkService:
    executor = GraphCommitExecutor(data_api, timeout_seconds=settings.COMMIT_TIMEOUT_SECONDS)
    return UnitOfWorkService(data_api, executor, dispatcher)


def get_data_action_service(
    lookup: Optional[DataCloudLookup] = Depends(get_data_cloud_lookup),
) -> DataActionService:
    return DataActionService(lookup)


def get_pdf_renderer() -> PlaywrightPdfRenderer:
    return PlaywrightPdfRenderer(
        executable_path=settings.BROWSER_EXECUTABLE_PATH,
        timeout_seconds=settings.PDF_TIMEOUT_SECONDS,
    )


def get_pdf_generation_service(
    renderer: PlaywrightPdfRenderer = Depends(get_pdf_renderer),
    data_api: SalesforceDataApi = Depends(get_data_api),
) -> PdfGenerationService:
    return PdfGenerationService(renderer, data_api)

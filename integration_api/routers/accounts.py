import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends

from integration_api.dependencies import get_account_service, get_invocation_context
from integration_api.domain.entities import InvocationContext
from integration_api.application.account_service import AccountService
from integration_api.schemas.api_schemas import AccountRecord, ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter()

@router.get(
    "/accounts",
    response_model=List[AccountRecord],
    responses={500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def get_accounts(
    context: InvocationContext = Depends(get_invocation_context),
    service: AccountService = Depends(get_account_service),
) -> List[Dict[str, Any]]:
    """
    Return all Accounts in the invoking org.

    When an alternate org is configured its Accounts are queried and counted
    as well; only the invoking org's Accounts are returned.
    """
    logger.info(f"GET /accounts for org {context.org_id}")
    return await service.list_accounts(context.org_id)

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from integration_api.schemas.api_schemas import (
    AcceptedResponse,
    ErrorResponse,
    UnitOfWorkCallback,
    UnitOfWorkPayload,
)
from integration_api.dependencies import (
    get_invocation_context,
    get_unit_of_work_service,
    get_unit_of_work_validation_service,
)
from integration_api.domain.entities import InvocationContext
from integration_api.application.request_validation_service import UnitOfWorkValidationService
from integration_api.application.unit_of_work_service import UnitOfWorkService

logger = logging.getLogger(__name__)

router = APIRouter()

# Documents the POST sent to callbackUrl after the commit
callback_router = APIRouter()


@callback_router.post("{$request.body.callbackUrl}", status_code=200)
def unit_of_work_committed(body: UnitOfWorkCallback):
    """Receives the ids of the committed Account, Contact and Cases."""


@router.post(
    "/unitofwork",
    response_model=AcceptedResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    callbacks=callback_router.routes,
)
async def unit_of_work(
    background_tasks: BackgroundTasks,
    payload: Optional[UnitOfWorkPayload] = None,
    context: InvocationContext = Depends(get_invocation_context),
    validator: UnitOfWorkValidationService = Depends(get_unit_of_work_validation_service),
    service: UnitOfWorkService = Depends(get_unit_of_work_service),
):
    """
    Create an Account, a Contact, a service Case and a follow-up Case in one
    atomic unit of work.

    Responds 201 as soon as the input is valid. The commit runs afterwards and
    the created record ids are POSTed to ``callbackUrl``.
    """
    data = payload.model_dump() if payload else {}
    logger.info(f"POST /unitofwork {payload.model_dump(exclude_none=True) if payload else {}}")

    request = validator.validate(data)
    background_tasks.add_task(service.run, request, context)

    return AcceptedResponse()

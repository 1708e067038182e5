import logging

from fastapi import APIRouter, Depends, Request, Response

from integration_api.dependencies import get_data_action_service
from integration_api.application.data_action_service import DataActionService, parse_data_action_event

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post("/handleDataCloudDataChangeEvent", status_code=201)
async def handle_data_cloud_data_change_event(
    request: Request,
    service: DataActionService = Depends(get_data_action_service),
):
    """
    Handle a Data Cloud data change event delivered to a Data Action Target webhook.

    The body is the raw Data Cloud payload, not an org invocation, so no
    x-client-context is read.
    """
    logger.debug(f"x-signature: {request.headers.get('x-signature')}")

    body = await request.body()
    if not body or not body.strip():
        logger.warning("Empty body, no events found")
        return Response(status_code=400)

    action_event = parse_data_action_event(body)
    await service.handle(action_event)

    return Response(status_code=201)

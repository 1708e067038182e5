import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends

from integration_api.schemas.api_schemas import AcceptedResponse, ErrorResponse, GeneratePdfPayload
from integration_api.dependencies import get_pdf_generation_service
from integration_api.application.pdf_options import parse_pdf_options
from integration_api.application.pdf_generation_service import PdfGenerationService

logger = logging.getLogger(__name__)

router = APIRouter()

@router.post(
    "/generate-pdf",
    response_model=AcceptedResponse,
    status_code=201,
    responses={400: {"model": ErrorResponse}},
)
async def generate_pdf(
    background_tasks: BackgroundTasks,
    payload: Optional[GeneratePdfPayload] = None,
    service: PdfGenerationService = Depends(get_pdf_generation_service),
):
    """
    Render a URL to PDF with a headless browser and publish it to a record.

    Options are validated before responding; rendering and the ContentVersion
    upload happen after the 201 acknowledgement.
    """
    data = payload.model_dump(exclude_none=True) if payload else {}
    logger.info(f"POST /generate-pdf {data}")

    options = parse_pdf_options(data)
    background_tasks.add_task(service.generate, options)

    return AcceptedResponse()

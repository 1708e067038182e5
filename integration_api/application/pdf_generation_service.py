"""Application service rendering a URL to PDF and attaching it to a record."""
from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Dict

from integration_api.application.pdf_options import PdfOptions
from integration_api.domain.errors import PdfGenerationError, UpstreamError
from integration_api.domain.events import PdfGenerated, event_publisher
from integration_api.domain.ports import DataApiPort, PdfRendererPort

logger = logging.getLogger(__name__)


class PdfGenerationService:
    def __init__(self, renderer: PdfRendererPort, data_api: DataApiPort) -> None:
        self._renderer = renderer
        self._data_api = data_api

    async def generate(self, options: PdfOptions) -> Dict[str, Any]:
        """
        Render ``options.path`` and upload the PDF as a ContentVersion on ``options.record_id``.

        Returns:
            Timing summary of the generation

        Raises:
            PdfGenerationError: the browser failed to produce a PDF or the
                upload was rejected
        """
        invocation_start = datetime.now()
        started = time.monotonic()
        logger.info(f"Rendering {options.path} for record {options.record_id}")

        try:
            pdf_bytes = await self._renderer.render(options)
        except PdfGenerationError as exc:
            logger.error(str(exc))
            raise

        generation_ms = int((time.monotonic() - started) * 1000)
        logger.info(f"PDF generation time = {generation_ms}ms ({len(pdf_bytes)} bytes)")

        try:
            content_version_id = await self._data_api.upload_content_version(
                options.filename, options.record_id, pdf_bytes
            )
        except UpstreamError as exc:
            logger.error(str(exc))
            raise PdfGenerationError(f"Failed to attach {options.filename} to {options.record_id}: {exc}") from exc

        invocation_ms = int((time.monotonic() - started) * 1000)
        event_publisher.publish(PdfGenerated(
            event_id="",
            timestamp=None,
            aggregate_id=options.record_id,
            record_id=options.record_id,
            filename=options.filename,
            content_version_id=content_version_id,
            generation_ms=generation_ms,
        ))

        summary = {
            "Message": "PDF File Generated",
            "contentVersionId": content_version_id,
            "pdfGenerationTime": generation_ms,
            "invocationTime": invocation_ms,
            "invocationStart": invocation_start.isoformat(),
        }
        logger.info(f"PDF generation finished: {summary}")
        return summary

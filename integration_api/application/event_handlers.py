"""Event handlers for domain events."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from integration_api.domain.events import (
        UnitOfWorkCommitted,
        CallbackDelivered,
        CallbackFailed,
        DataActionEventsReceived,
        PdfGenerated,
    )

logger = logging.getLogger(__name__)


class AuditLogHandler:
    """Logs all domain events for audit trail."""

    def handle_unit_of_work_committed(self, event: UnitOfWorkCommitted) -> None:
        logger.info(f"[AUDIT] Unit of work committed in org {event.org_id}: {len(event.record_ids)} records")

    def handle_callback_delivered(self, event: CallbackDelivered) -> None:
        logger.info(f"[AUDIT] Callback delivered to {event.callback_url} ({event.status_code})")

    def handle_callback_failed(self, event: CallbackFailed) -> None:
        logger.warning(f"[AUDIT] Callback failed for {event.callback_url}: {event.reason}")

    def handle_data_action_events(self, event: DataActionEventsReceived) -> None:
        logger.info(f"[AUDIT] {event.count} data action events received")

    def handle_pdf_generated(self, event: PdfGenerated) -> None:
        logger.info(f"[AUDIT] PDF {event.filename} attached to {event.record_id} in {event.generation_ms}ms")


def register_event_handlers():
    """Register all event handlers with the publisher."""
    from integration_api.domain.events import (
        event_publisher,
        UnitOfWorkCommitted,
        CallbackDelivered,
        CallbackFailed,
        DataActionEventsReceived,
        PdfGenerated,
    )

    audit = AuditLogHandler()

    # Registration runs on every startup; avoid duplicate subscriptions
    event_publisher.clear_subscribers()

    event_publisher.subscribe(UnitOfWorkCommitted, audit.handle_unit_of_work_committed)
    event_publisher.subscribe(CallbackDelivered, audit.handle_callback_delivered)
    event_publisher.subscribe(CallbackFailed, audit.handle_callback_failed)
    event_publisher.subscribe(DataActionEventsReceived, audit.handle_data_action_events)
    event_publisher.subscribe(PdfGenerated, audit.handle_pdf_generated)

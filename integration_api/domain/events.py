"""Domain events for decoupled side effects and integrations."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, List, Optional
from uuid import uuid4

logger = logging.getLogger(__name__)


@dataclass
class DomainEvent:
    """Base class for all domain events."""
    event_id: str
    timestamp: datetime
    aggregate_id: str

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid4())
        if not self.timestamp:
            self.timestamp = datetime.now()


@dataclass
class UnitOfWorkCommitted(DomainEvent):
    """Raised when a record graph was committed."""
    org_id: str
    record_ids: Dict[str, str]


@dataclass
class CallbackDelivered(DomainEvent):
    """Raised when a callback POST was accepted."""
    callback_url: str
    status_code: int


@dataclass
class CallbackFailed(DomainEvent):
    """Raised when a callback POST could not be delivered."""
    callback_url: str
    reason: str


@dataclass
class DataActionEventsReceived(DomainEvent):
    """Raised when a Data Cloud data action webhook arrives."""
    count: int
    schema_ids: List[str] = field(default_factory=list)


@dataclass
class PdfGenerated(DomainEvent):
    """Raised when a PDF was rendered and uploaded to a record."""
    record_id: str
    filename: str
    content_version_id: Optional[str]
    generation_ms: int


class DomainEventPublisher:
    """Singleton publisher for domain events."""

    _instance: DomainEventPublisher | None = None
    _subscribers: Dict[type, List[Callable[[DomainEvent], None]]]

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._subscribers = {}
        return cls._instance

    def subscribe(self, event_type: type[DomainEvent], handler: Callable[[DomainEvent], None]) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._subscribers:
            self._subscribers[event_type] = []
        self._subscribers[event_type].append(handler)

    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        event_type = type(event)
        if event_type in self._subscribers:
            for handler in self._subscribers[event_type]:
                try:
                    handler(event)
                except Exception:
                    # Log error but don't fail the main operation
                    logger.exception("Event handler error for %s", event_type.__name__)

    def clear_subscribers(self) -> None:
        """Clear all subscribers (useful for testing)."""
        self._subscribers = {}


# Singleton instance
event_publisher = DomainEventPublisher()

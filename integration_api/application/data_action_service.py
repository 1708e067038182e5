"""Service handling Data Cloud data action target webhooks."""
from __future__ import annotations

import json
import logging
from typing import Any, Callable, Dict, Optional

from integration_api.domain.entities import DataActionEvent, OrgConnection
from integration_api.domain.errors import ValidationError
from integration_api.domain.events import DataActionEventsReceived, event_publisher
from integration_api.domain.ports import ConnectionResolverPort, DataCloudApiPort

logger = logging.getLogger(__name__)


def parse_data_action_event(body: bytes) -> DataActionEvent:
    """Parse a raw webhook body into a DataActionEvent."""
    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise ValidationError("Data action event body is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Data action event body must be a JSON object")

    events = payload.get("events") or []
    schemas = payload.get("schemas") or []
    if not isinstance(events, list) or not isinstance(schemas, list):
        raise ValidationError("Data action event 'events' and 'schemas' must be lists")
    return DataActionEvent(
        events=[event for event in events if isinstance(event, dict)],
        schemas=[schema for schema in schemas if isinstance(schema, dict)],
    )


class DataCloudLookup:
    """Configured Data Cloud org and query run for every incoming event batch."""

    def __init__(
        self,
        org_name: str,
        query: str,
        resolver: ConnectionResolverPort,
        api_factory: Callable[[OrgConnection], DataCloudApiPort],
    ) -> None:
        self.org_name = org_name
        self.query = query
        self._resolver = resolver
        self._api_factory = api_factory

    async def run(self) -> Dict[str, Any]:
        logger.info(f"Getting '{self.org_name}' org connection...")
        connection = await self._resolver.get_connection(self.org_name)

        logger.info(f"Querying org {connection.id}: {self.query}")
        response = await self._api_factory(connection).query(self.query)
        logger.info(f"Query response: {response.get('data') or {}}")
        return response


class DataActionService:
    def __init__(self, lookup: Optional[DataCloudLookup] = None) -> None:
        self._lookup = lookup

    async def handle(self, action_event: DataActionEvent) -> None:
        schema_ids = action_event.schema_ids()
        logger.info(
            f"POST /dataCloudDataChangeEvent: {action_event.count} events for schemas "
            f"{','.join(schema_ids) if schema_ids else 'n/a'}"
        )

        for evt in action_event.events:
            logger.info(
                f"Got action '{evt.get('ActionDeveloperName')}', event type '{evt.get('EventType')}' "
                f"triggered by {evt.get('EventPrompt')} on object '{evt.get('SourceObjectDeveloperName')}' "
                f"published on {evt.get('EventPublishDateTime')}"
            )

        event_publisher.publish(DataActionEventsReceived(
            event_id="",
            timestamp=None,
            aggregate_id=schema_ids[0] if schema_ids else "",
            count=action_event.count,
            schema_ids=schema_ids,
        ))

        if self._lookup is not None:
            await self._lookup.run()

"""Best-effort delivery of commit results to caller-supplied callback URLs."""
from __future__ import annotations

import logging
from typing import Dict, Optional
from urllib.parse import urlsplit

import httpx

from integration_api.domain.entities import CallbackEnvelope, InvocationContext
from integration_api.domain.errors import DeliveryError
from integration_api.domain.events import CallbackDelivered, CallbackFailed, event_publisher

logger = logging.getLogger(__name__)


class CallbackDispatcher:
    """POSTs a CallbackEnvelope once. Failures are logged, never raised."""

    def __init__(self, client: httpx.AsyncClient, timeout_seconds: float) -> None:
        self._client = client
        self._timeout = timeout_seconds

    def _headers(self, callback_url: str, context: Optional[InvocationContext]) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        # Callbacks into the invoking org itself need the org's token
        if context is not None and urlsplit(callback_url).netloc.lower() == context.host:
            headers["Authorization"] = f"Bearer {context.access_token}"
        return headers

    async def _post(self, callback_url: str, envelope: CallbackEnvelope, headers: Dict[str, str]) -> httpx.Response:
        try:
            response = await self._client.post(
                callback_url, json=envelope, headers=headers, timeout=self._timeout
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DeliveryError(f"Callback to {callback_url} failed: {exc!r}") from exc
        if response.is_error:
            raise DeliveryError(
                f"Callback to {callback_url} rejected: HTTP {response.status_code} {response.text}"
            )
        return response

    async def notify(
        self,
        callback_url: str,
        envelope: CallbackEnvelope,
        context: Optional[InvocationContext] = None,
    ) -> None:
        try:
            response = await self._post(callback_url, envelope, self._headers(callback_url, context))
        except DeliveryError as exc:
            logger.error(str(exc))
            event_publisher.publish(CallbackFailed(
                event_id="",
                timestamp=None,
                aggregate_id=callback_url,
                callback_url=callback_url,
                reason=str(exc),
            ))
            return

        logger.info(f"Callback to {callback_url} delivered: HTTP {response.status_code}")
        event_publisher.publish(CallbackDelivered(
            event_id="",
            timestamp=None,
            aggregate_id=callback_url,
            callback_url=callback_url,
            status_code=response.status_code,
        ))

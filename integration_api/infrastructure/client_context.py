"""Parsing of the x-client-context header sent with org invocations."""
from __future__ import annotations

import base64
import binascii
import json
from typing import Optional

from integration_api.config import settings
from integration_api.domain.entities import InvocationContext
from integration_api.domain.errors import UnauthorizedError

CLIENT_CONTEXT_HEADER = "x-client-context"


def parse_client_context(header_value: str, default_api_version: str) -> InvocationContext:
    """
    Decode a base64 JSON client context into an InvocationContext.

    Args:
        header_value: Raw x-client-context header value
        default_api_version: API version used when the context has none

    Returns:
        InvocationContext for the invoking org
    """
    try:
        raw = base64.b64decode(header_value, validate=True)
        payload = json.loads(raw)
    except (binascii.Error, ValueError) as exc:
        raise UnauthorizedError("Invalid x-client-context header") from exc

    if not isinstance(payload, dict):
        raise UnauthorizedError("Invalid x-client-context header")

    access_token = payload.get("accessToken")
    instance_url = payload.get("orgDomainUrl")
    if not access_token or not instance_url:
        raise UnauthorizedError("x-client-context is missing accessToken or orgDomainUrl")

    user = payload.get("userContext") or {}
    return InvocationContext(
        org_id=payload.get("orgId") or "",
        instance_url=instance_url.rstrip("/"),
        access_token=access_token,
        api_version=str(payload.get("apiVersion") or default_api_version),
        request_id=payload.get("requestId") or "",
        namespace=payload.get("namespace") or "",
        user_id=user.get("userId") or "",
        username=user.get("username") or "",
    )


def resolve_invocation_context(header_value: Optional[str]) -> InvocationContext:
    """Use the header when present, otherwise the configured default org."""
    if header_value:
        return parse_client_context(header_value, settings.SALESFORCE_API_VERSION)

    if settings.SALESFORCE_INSTANCE_URL and settings.SALESFORCE_ACCESS_TOKEN:
        return InvocationContext(
            org_id=settings.SALESFORCE_ORG_ID,
            instance_url=settings.SALESFORCE_INSTANCE_URL.rstrip("/"),
            access_token=settings.SALESFORCE_ACCESS_TOKEN,
            api_version=settings.SALESFORCE_API_VERSION,
        )

    raise UnauthorizedError("Missing x-client-context header")

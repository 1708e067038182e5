"""Service for inbound request validation."""
from __future__ import annotations

from typing import Any, Optional

import httpx

from integration_api.domain.entities import UnitOfWorkRequest
from integration_api.domain.errors import ValidationError


def validate_callback_url(url: Optional[str]) -> str:
    """Return ``url`` stripped if the HTTP client can send to it, else raise ValidationError."""
    if not url or not url.strip():
        raise ValidationError("Please provide callbackUrl")
    url = url.strip()
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        raise ValidationError(f"callbackUrl is not a valid URL: {exc}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise ValidationError(f"callbackUrl must be an absolute http(s) URL: {url}")
    if parsed.port is not None and not 0 < parsed.port < 65536:
        raise ValidationError(f"callbackUrl has an invalid port: {url}")
    return url


class UnitOfWorkValidationService:
    """Validates /unitofwork payloads before any remote side effect."""

    REQUIRED_FIELDS = ("accountName", "lastName", "subject")

    def _require(self, field: str, value: Any) -> str:
        if not value or not str(value).strip():
            raise ValidationError(f"Please provide {field}")
        return str(value).strip()

    def _optional(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def validate(self, data: dict) -> UnitOfWorkRequest:
        values = {field: self._require(field, data.get(field)) for field in self.REQUIRED_FIELDS}
        callback_url = validate_callback_url(data.get("callbackUrl"))

        return UnitOfWorkRequest(
            account_name=values["accountName"],
            last_name=values["lastName"],
            subject=values["subject"],
            callback_url=callback_url,
            first_name=self._optional(data.get("firstName")),
            description=self._optional(data.get("description")),
        )

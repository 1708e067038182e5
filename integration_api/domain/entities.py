"""Internal domain entities shared across layers."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict
from urllib.parse import urlsplit


@dataclass(frozen=True)
class InvocationContext:
    """Identity of the org that invoked this service, taken from x-client-context."""
    org_id: str
    instance_url: str
    access_token: str
    api_version: str
    request_id: str = ""
    namespace: str = ""
    user_id: str = ""
    username: str = ""

    @property
    def host(self) -> str:
        return urlsplit(self.instance_url).netloc.lower()


@dataclass(frozen=True)
class OrgConnection:
    """Authorized connection to a named org returned by the connection resolver."""
    id: str
    name: str
    instance_url: str
    access_token: str
    api_version: str
    username: str = ""

    def as_context(self) -> InvocationContext:
        return InvocationContext(
            org_id=self.id,
            instance_url=self.instance_url,
            access_token=self.access_token,
            api_version=self.api_version,
            username=self.username,
        )


class CaseIds(TypedDict):
    serviceCaseId: str
    followupCaseId: str


class CallbackEnvelope(TypedDict):
    accountId: str
    contactId: str
    cases: CaseIds


@dataclass(frozen=True)
class UnitOfWorkRequest:
    """Validated /unitofwork input."""
    account_name: str
    last_name: str
    subject: str
    callback_url: str
    first_name: Optional[str] = None
    description: Optional[str] = None


@dataclass
class DataActionEvent:
    """Parsed Data Cloud data action webhook payload."""
    events: List[Dict[str, Any]]
    schemas: List[Dict[str, Any]]

    @property
    def count(self) -> int:
        return len(self.events)

    def schema_ids(self) -> List[str]:
        return [str(schema.get("schemaId")) for schema in self.schemas if schema.get("schemaId")]

"""Abstractions for external collaborators (platform APIs, headless browser)."""
from __future__ import annotations

from typing import Any, Dict, List, Protocol, TYPE_CHECKING

from integration_api.domain.entities import OrgConnection
from integration_api.domain.record_graph import CommitResult, RecordGraph

if TYPE_CHECKING:
    from integration_api.application.pdf_options import PdfOptions


class DataApiPort(Protocol):
    """Record-level access to one org."""

    async def query(self, soql: str) -> List[Dict[str, Any]]:
        """Run a query and return every record's fields."""
        ...

    def new_graph(self) -> RecordGraph:
        ...

    async def commit_graph(self, graph: RecordGraph) -> CommitResult:
        """Submit the whole graph in one atomic round-trip."""
        ...

    async def create_record(self, record_type: str, fields: Dict[str, Any]) -> str:
        ...

    async def upload_content_version(self, filename: str, record_id: str, data: bytes) -> str:
        ...


class ConnectionResolverPort(Protocol):
    async def get_connection(self, name: str) -> OrgConnection:
        ...


class DataCloudApiPort(Protocol):
    async def query(self, sql: str) -> Dict[str, Any]:
        ...


class PdfRendererPort(Protocol):
    async def render(self, options: PdfOptions) -> bytes:
        """Navigate to ``options.path`` and return the rendered PDF."""
        ...

"""Atomic submission of a record graph to the backing store."""
from __future__ import annotations

import asyncio
import logging

from integration_api.domain.errors import CommitError, UnresolvedReferenceError
from integration_api.domain.ports import DataApiPort
from integration_api.domain.record_graph import CommitResult, RecordGraph

logger = logging.getLogger(__name__)


class GraphCommitExecutor:
    """Commits a RecordGraph in one round-trip and enforces all-or-nothing results.

    Atomicity itself belongs to the store's composite write; this class only
    makes sure a caller never sees identifiers from a partially failed commit.
    There is no retry.
    """

    def __init__(self, store: DataApiPort, timeout_seconds: float) -> None:
        self._store = store
        self._timeout = timeout_seconds

    async def commit(self, graph: RecordGraph) -> CommitResult:
        if len(graph) == 0:
            return CommitResult()

        try:
            result = await asyncio.wait_for(self._store.commit_graph(graph), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise CommitError(
                f"Failed to insert record. Root Cause : commit timed out after {self._timeout}s"
            ) from exc
        except UnresolvedReferenceError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise CommitError(f"Failed to insert record. Root Cause : {exc}") from exc

        failures = result.failures()
        if failures:
            causes = "; ".join(
                f"{reference_id}: {', '.join(outcome.errors) or 'not processed'}"
                for reference_id, outcome in failures.items()
            )
            raise CommitError(f"Failed to insert record. Root Cause : {causes}")

        missing = [reference_id for reference_id in graph.reference_ids() if reference_id not in result]
        if missing:
            raise CommitError(
                f"Failed to insert record. Root Cause : no result for {', '.join(missing)}"
            )

        logger.info(f"Committed {len(result)} records for graph {graph.graph_id}")
        return result

"""Serialization between RecordGraph and the Composite Graph REST resource."""
from __future__ import annotations

from typing import Any, Dict, List

from integration_api.domain.errors import CommitError
from integration_api.domain.record_graph import (
    CommitResult,
    RecordGraph,
    RecordOutcome,
    RecordReference,
)

GRAPH_ID = "1"


def _serialize_value(value: Any) -> Any:
    if isinstance(value, RecordReference):
        return f"@{{{value.reference_id}.id}}"
    return value


def to_composite_graph(graph: RecordGraph, api_version: str) -> Dict[str, Any]:
    """Build the composite graph request body for ``graph``."""
    composite_request: List[Dict[str, Any]] = []
    for intent in graph:
        composite_request.append({
            "method": "POST",
            "url": f"/services/data/v{api_version}/sobjects/{intent.record_type}/",
            "referenceId": intent.reference_id,
            "body": {name: _serialize_value(value) for name, value in intent.fields.items()},
        })
    return {"graphs": [{"graphId": GRAPH_ID, "compositeRequest": composite_request}]}


def _error_messages(body: Any) -> List[str]:
    # Failed nodes return a list of {errorCode, message}; successes a dict with "errors"
    if isinstance(body, list):
        entries = body
    elif isinstance(body, dict):
        entries = body.get("errors") or []
    else:
        entries = []

    messages = []
    for entry in entries:
        if isinstance(entry, dict):
            code = entry.get("errorCode")
            message = entry.get("message", "")
            messages.append(f"{code}: {message}" if code else message)
        else:
            messages.append(str(entry))
    return messages


def from_composite_graph(graph: RecordGraph, payload: Dict[str, Any]) -> CommitResult:
    """Map a composite graph response back onto the graph's temporary ids."""
    graphs = payload.get("graphs") if isinstance(payload, dict) else None
    if not graphs:
        raise CommitError("Composite graph response contained no graphs")

    graph_response = graphs[0]
    responses = (graph_response.get("graphResponse") or {}).get("compositeResponse") or []
    graph_ok = bool(graph_response.get("isSuccessful"))

    outcomes: Dict[str, RecordOutcome] = {}
    for entry in responses:
        reference_id = entry.get("referenceId")
        if not reference_id:
            continue
        body = entry.get("body")
        status = int(entry.get("httpStatusCode") or 0)
        success = graph_ok and 200 <= status < 300
        assigned_id = body.get("id") if isinstance(body, dict) else None
        outcomes[reference_id] = RecordOutcome(
            assigned_id=assigned_id,
            success=success and bool(assigned_id),
            errors=_error_messages(body),
        )

    return CommitResult(outcomes)

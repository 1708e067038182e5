"""Unit-of-work record graph.

A ``RecordGraph`` collects record creation intents in dependency order. Each
registration returns a ``RecordReference`` that later intents may use as a
field value to express a relationship to a record that has no id yet.

Intents live in an append-only list and a reference is simply an index into
it, so a reference can only ever point backwards. Checking the index at
registration time is enough to guarantee the graph is acyclic and can be
committed in a single pass.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Union
from uuid import uuid4

from integration_api.domain.errors import UnresolvedReferenceError, ValidationError

# Composite graph requests accept at most 500 nodes per graph
MAX_GRAPH_SIZE = 500

_RECORD_TYPE_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


@dataclass(frozen=True)
class RecordReference:
    """Handle to a registered intent, usable as a field value in later intents."""
    graph_id: str
    index: int
    reference_id: str

    def __str__(self) -> str:
        return self.reference_id


@dataclass(frozen=True)
class RecordIntent:
    reference_id: str
    record_type: str
    fields: Dict[str, Any]

    def references(self) -> List[RecordReference]:
        """Return the references this intent's fields point at."""
        return [value for value in self.fields.values() if isinstance(value, RecordReference)]


class RecordGraph:
    """Ordered collection of record intents; insertion order is dependency order."""

    def __init__(self, graph_id: str | None = None) -> None:
        self.graph_id = graph_id or uuid4().hex
        self._intents: List[RecordIntent] = []

    def register_create(self, record_type: str, fields: Dict[str, Any]) -> RecordReference:
        """Register a record for creation and return its temporary reference.

        Raises:
            ValidationError: record type is empty or not a valid object name,
                or the graph is full.
            UnresolvedReferenceError: a field references an intent that is not
                registered in this graph.
        """
        if not record_type or not _RECORD_TYPE_PATTERN.match(record_type):
            raise ValidationError(f"Invalid record type: {record_type!r}")
        if len(self._intents) >= MAX_GRAPH_SIZE:
            raise ValidationError(f"A record graph holds at most {MAX_GRAPH_SIZE} records")

        # Blank optional inputs are not sent
        clean_fields = {name: value for name, value in (fields or {}).items() if value is not None}
        for name, value in clean_fields.items():
            if isinstance(value, RecordReference):
                self._require_registered(name, value)

        index = len(self._intents)
        reference_id = f"referenceId{index}"
        self._intents.append(RecordIntent(reference_id, record_type, clean_fields))
        return RecordReference(self.graph_id, index, reference_id)

    def _require_registered(self, field_name: str, ref: RecordReference) -> None:
        if ref.graph_id != self.graph_id:
            raise UnresolvedReferenceError(
                f"Field '{field_name}' references {ref.reference_id} from another graph"
            )
        if ref.index >= len(self._intents) or self._intents[ref.index].reference_id != ref.reference_id:
            raise UnresolvedReferenceError(
                f"Field '{field_name}' references unregistered record {ref.reference_id}"
            )

    @property
    def intents(self) -> List[RecordIntent]:
        return list(self._intents)

    def reference_ids(self) -> List[str]:
        return [intent.reference_id for intent in self._intents]

    def __len__(self) -> int:
        return len(self._intents)

    def __iter__(self) -> Iterator[RecordIntent]:
        return iter(self._intents)


@dataclass(frozen=True)
class RecordOutcome:
    """Result of persisting one intent."""
    assigned_id: Optional[str]
    success: bool
    errors: List[str] = field(default_factory=list)


class CommitResult:
    """Outcomes of a graph commit keyed by temporary reference id."""

    def __init__(self, outcomes: Dict[str, RecordOutcome] | None = None) -> None:
        self._outcomes: Dict[str, RecordOutcome] = dict(outcomes or {})

    def get(self, ref: Union[RecordReference, str]) -> RecordOutcome:
        key = ref.reference_id if isinstance(ref, RecordReference) else ref
        try:
            return self._outcomes[key]
        except KeyError:
            raise UnresolvedReferenceError(f"No commit outcome for {key}") from None

    def id_of(self, ref: Union[RecordReference, str]) -> str:
        """Shortcut for the permanent id assigned to ``ref``."""
        return self.get(ref).assigned_id

    def failures(self) -> Dict[str, RecordOutcome]:
        return {key: outcome for key, outcome in self._outcomes.items() if not outcome.success}

    def __contains__(self, key: object) -> bool:
        if isinstance(key, RecordReference):
            key = key.reference_id
        return key in self._outcomes

    def __len__(self) -> int:
        return len(self._outcomes)

    def items(self):
        return self._outcomes.items()

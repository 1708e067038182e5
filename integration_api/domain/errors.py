"""Domain error hierarchy for clean exception handling."""
from __future__ import annotations


class DomainError(Exception):
    """Base for all domain errors."""


class NotFoundError(DomainError):
    """Resource not found."""


class ValidationError(DomainError):
    """Invalid input or state."""


class UnauthorizedError(DomainError):
    """Missing or unreadable invocation context."""


class UnresolvedReferenceError(DomainError):
    """A record intent references a temporary id not registered in its graph.

    This is a programming error in the code building the graph, never a
    problem with user input.
    """


class CommitError(DomainError):
    """The remote store rejected or failed an atomic graph write."""


class DeliveryError(DomainError):
    """A callback POST could not be delivered."""


class UpstreamError(DomainError):
    """A remote platform API call failed outside of a graph commit."""


class PdfGenerationError(DomainError):
    """Rendering a PDF or attaching it to its record failed."""

"""
Error taxonomy shared by the normalizer, the API client and review actions.

Operational failures travel inside result values (NormalizeResult,
ApiResult, ActionOutcome) rather than being raised across those boundaries.
"""

from enum import Enum


class ErrorKind(Enum):
    """Every failure the core can report."""

    # Content
    INVALID_FORMAT = "invalid_format"
    NO_INITIATIVE = "no_initiative"

    # Collaborator service
    UNREACHABLE = "unreachable"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    SERVICE_REJECTED = "service_rejected"
    UNKNOWN = "unknown"


class ReviewError(Exception):
    """Base error carrying an ErrorKind and a human-readable message."""

    def __init__(self, kind: ErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __eq__(self, other):
        if not isinstance(other, ReviewError):
            return NotImplemented
        return type(self) is type(other) and self.kind == other.kind and self.message == other.message

    def __hash__(self):
        return hash((type(self), self.kind, self.message))

    def __repr__(self):
        return f"{type(self).__name__}({self.kind.name}, {self.message!r})"


class ContentError(ReviewError):
    """Generated or edited content could not be normalized."""


class ApiError(ReviewError):
    """A collaborator service call failed."""

"""Review status model and derived workflow steps.

The collaborator service owns status transitions; this module only turns
the current status into something to render:
- ReviewStatus ordered enum (happy path pending < approved < created,
  with rejected on a branch after pending)
- derive_steps() for the progress view
- status_presentation() for badges and list rows

Usage:
    from pmreview.workflow.state_machine import derive_steps, parse_status

    for step in derive_steps(record.status):
        print(step.title, step.state.value)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import NamedTuple, Optional, Union

logger = logging.getLogger(__name__)


@total_ordering
class ReviewStatus(Enum):
    """All valid review statuses.

    Values match the collaborator service's status strings.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CREATED = "created"

    @property
    def ordinal(self) -> tuple[int, int]:
        """(position on happy path, branch). Rejected branches off after pending."""
        return _ORDINALS[self]

    def __lt__(self, other):
        if not isinstance(other, ReviewStatus):
            return NotImplemented
        return self.ordinal < other.ordinal


_ORDINALS = {
    ReviewStatus.PENDING: (0, 0),
    ReviewStatus.APPROVED: (1, 0),
    ReviewStatus.REJECTED: (1, 1),
    ReviewStatus.CREATED: (2, 0),
}

HAPPY_PATH = (ReviewStatus.PENDING, ReviewStatus.APPROVED, ReviewStatus.CREATED)
TERMINAL_STATUSES = frozenset({ReviewStatus.REJECTED, ReviewStatus.CREATED})


class StepState(Enum):
    """Where a workflow step sits relative to the current status."""
    COMPLETED = "completed"
    ACTIVE = "active"
    PENDING = "pending"


@dataclass(frozen=True)
class Step:
    status: ReviewStatus
    title: str
    description: str
    state: StepState


STEP_TEXT = {
    ReviewStatus.PENDING: ("Pending Review", "Generated content awaiting review"),
    ReviewStatus.APPROVED: ("Review Complete", "Content reviewed and approved"),
    ReviewStatus.CREATED: ("Jira Tickets Created", "Tickets successfully created in Jira"),
    ReviewStatus.REJECTED: ("Rejected", "Content rejected and workflow stopped"),
}


class StatusPresentation(NamedTuple):
    label: str
    style: str                                 # Rich style name
    symbol: str


_PRESENTATION = {
    ReviewStatus.PENDING: StatusPresentation("Pending", "yellow", "~"),
    ReviewStatus.APPROVED: StatusPresentation("Approved", "green", "+"),
    ReviewStatus.REJECTED: StatusPresentation("Rejected", "red", "x"),
    ReviewStatus.CREATED: StatusPresentation("Created", "blue", "*"),
}

UNKNOWN_PRESENTATION = StatusPresentation("Unknown", "dim", "?")


def parse_status(value: Union[str, ReviewStatus, None]) -> Optional[ReviewStatus]:
    """Parse a status string into ReviewStatus.

    Returns None if status is unknown.
    """
    if isinstance(value, ReviewStatus):
        return value
    if value is None:
        return None
    for status in ReviewStatus:
        if status.value == value:
            return status
    return None


def _make_step(status: ReviewStatus, state: StepState) -> Step:
    title, description = STEP_TEXT[status]
    return Step(status=status, title=title, description=description, state=state)


def derive_steps(current: Union[str, ReviewStatus, None]) -> list[Step]:
    """Derive the progress view for a review status.

    Rejected reviews show [pending (completed), rejected (active)]; the
    rejection branch replaces the rest of the happy path. Otherwise each
    happy-path step is completed, active or pending by ordinal comparison.
    Unknown statuses show the happy path with nothing reached.
    """
    status = parse_status(current)

    if status is None:
        logger.debug(f"Unknown review status {current!r}, rendering generic steps")
        return [_make_step(s, StepState.PENDING) for s in HAPPY_PATH]

    if status is ReviewStatus.REJECTED:
        return [
            _make_step(ReviewStatus.PENDING, StepState.COMPLETED),
            _make_step(ReviewStatus.REJECTED, StepState.ACTIVE),
        ]

    steps = []
    for step_status in HAPPY_PATH:
        if step_status < status:
            state = StepState.COMPLETED
        elif step_status == status:
            state = StepState.ACTIVE
        else:
            state = StepState.PENDING
        steps.append(_make_step(step_status, state))
    return steps


def status_presentation(value: Union[str, ReviewStatus, None]) -> StatusPresentation:
    """Badge label/style/symbol for a status. Unknown values get a generic badge."""
    status = parse_status(value)
    if status is None:
        return UNKNOWN_PRESENTATION
    return _PRESENTATION[status]


def is_terminal(value: Union[str, ReviewStatus, None]) -> bool:
    """True for rejected and created reviews."""
    return parse_status(value) in TERMINAL_STATUSES

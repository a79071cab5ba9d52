"""Review lifecycle state machine using transitions library.

Declares the legal review transitions. The collaborator service enforces
them; locally the FSM answers which actions a review offers and computes
the merged status after the service confirms an action.

Usage:
    from pmreview.workflow.fsm import ReviewFSM

    fsm = ReviewFSM(record.status, review_id=record.id)
    if fsm.can("approve"):
        fsm.approve()
"""

import logging
from typing import Callable, Iterable

from transitions import Machine

logger = logging.getLogger(__name__)


# State values must match ReviewStatus enum for compatibility
STATES = [
    "pending",
    "approved",
    "rejected",
    "created",
]

# Holding state for statuses the service reports that we don't recognize.
# It has no transitions, so no actions are offered.
UNKNOWN_STATE = "unknown"

# Transitions defined as (trigger, source, dest)
# Each trigger becomes a method on the FSM
TRANSITIONS = [
    # Human review outcomes
    {"trigger": "approve", "source": "pending", "dest": "approved"},
    {"trigger": "reject", "source": "pending", "dest": "rejected"},

    # Ticket creation after approval
    {"trigger": "create_tickets", "source": "approved", "dest": "created"},
]


class ReviewFSM:
    """State machine for a single review's status.

    Holds no persisted state of its own; it is built from the status the
    service last reported.
    """

    def __init__(
        self,
        status: str,
        review_id: str = "",
        on_transition: Callable[[str, str, str], None] | None = None,
    ):
        """Initialize FSM for a review.

        Args:
            status: Current status string from the service
            review_id: Review ID, for log messages
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.review_id = review_id
        self.on_transition = on_transition

        initial = status
        if initial not in STATES:
            logger.warning(f"[FSM] {review_id}: Unknown status '{status}', no actions available")
            initial = UNKNOWN_STATE

        self.machine = Machine(
            model=self,
            states=STATES + [UNKNOWN_STATE],
            transitions=TRANSITIONS,
            initial=initial,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",  # Callback after any transition
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.info(f"[FSM] {self.review_id}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

    def get_available_triggers(self) -> list[str]:
        """Get list of triggers available in current state."""
        return self.machine.get_triggers(self.state)


def apply_triggers(status: str, triggers: Iterable[str], review_id: str = "") -> str:
    """Run triggers in order from status and return the resulting state.

    Triggers not available in the current state are skipped with a warning.
    Used to merge a confirmed action into a record when the service
    response doesn't carry the updated record.
    """
    fsm = ReviewFSM(status, review_id=review_id)
    for trigger in triggers:
        if not fsm.can(trigger):
            logger.warning(f"[FSM] {review_id}: '{trigger}' not available from '{fsm.state}', skipping")
            continue
        getattr(fsm, trigger)()
    return fsm.state


def available_actions(status: str) -> list[str]:
    """Actions a reviewer can take on a review with this status."""
    return ReviewFSM(status).get_available_triggers()

"""Save, approve and reject flows for a single review.

Each action calls the service and, on success, produces a new ReviewRecord
(re-fetched, or merged locally through the FSM when the service doesn't
return one). On failure the caller gets the prior record back untouched
together with the error; nothing optimistic survives a failure.

Only one mutating action per review may be in flight. Callers check busy()
before dispatching; a second call while one is outstanding is refused
without touching the network.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.errors import ApiError, ErrorKind, ReviewError
from pmreview.pm.content import normalize
from pmreview.pm.models import ReviewRecord
from pmreview.workflow.fsm import apply_triggers

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActionOutcome:
    """Result of a review action.

    record is the record to display next: the updated one on success,
    the caller's original on failure.
    """
    record: ReviewRecord
    error: Optional[ReviewError] = None
    message: Optional[str] = None
    ticket_references: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.error is None


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ReviewActions:
    """Mutating review flows over a ReviewApiClient."""

    def __init__(self, client: ReviewApiClient):
        self.client = client
        self._in_flight: set[str] = set()

    def busy(self, review_id: str) -> bool:
        """True while a mutating action for this review is outstanding."""
        return review_id in self._in_flight

    def _refuse_busy(self, record: ReviewRecord, action: str) -> ActionOutcome:
        logger.warning(f"Review {record.id}: {action} refused, another action is in progress")
        return ActionOutcome(
            record=record,
            error=ApiError(
                ErrorKind.UNKNOWN,
                f"Another action is already in progress for review {record.id}",
            ),
        )

    async def save_edit(self, record: ReviewRecord, text: str) -> ActionOutcome:
        """Save edited JSON text as the review's edited content.

        Text that doesn't decode is refused locally with INVALID_FORMAT.
        """
        decoded = normalize(text)
        if decoded.error is not None and decoded.error.kind is ErrorKind.INVALID_FORMAT:
            return ActionOutcome(record=record, error=decoded.error)
        if self.busy(record.id):
            return self._refuse_busy(record, "save")

        self._in_flight.add(record.id)
        try:
            result = await self.client.update_review(record.id, text)
        finally:
            self._in_flight.discard(record.id)

        if not result.success:
            return ActionOutcome(record=record, error=result.error)

        logger.info(f"Review {record.id}: edits saved")
        return ActionOutcome(record=result.data, message="Changes saved")

    async def approve(self, record: ReviewRecord) -> ActionOutcome:
        """Approve a review and pick up the tickets the service created."""
        if self.busy(record.id):
            return self._refuse_busy(record, "approve")

        self._in_flight.add(record.id)
        try:
            result = await self.client.approve_review(record.id)
            if not result.success:
                return ActionOutcome(record=record, error=result.error)

            approval = result.data
            refreshed = await self.client.get_review(record.id)
        finally:
            self._in_flight.discard(record.id)

        tickets = approval.ticket_references
        message = approval.message or f"Approved! {len(tickets)} Jira tickets created."

        if refreshed.success:
            updated = refreshed.data
        else:
            # Approval went through; show it even though the refetch failed
            logger.warning(f"Review {record.id}: refetch after approve failed: {refreshed.error}")
            triggers = ["approve", "create_tickets"] if tickets else ["approve"]
            updated = replace(
                record,
                status=apply_triggers(record.status, triggers, review_id=record.id),
                reviewed_at=_now_iso(),
                ticket_references=tickets or record.ticket_references,
            )

        logger.info(f"Review {record.id}: approved ({len(tickets)} tickets)")
        return ActionOutcome(record=updated, message=message, ticket_references=tickets)

    async def reject(self, record: ReviewRecord, reason: Optional[str] = None) -> ActionOutcome:
        """Reject a review with an optional reason."""
        if self.busy(record.id):
            return self._refuse_busy(record, "reject")

        self._in_flight.add(record.id)
        try:
            result = await self.client.reject_review(record.id, reason)
        finally:
            self._in_flight.discard(record.id)

        if not result.success:
            return ActionOutcome(record=record, error=result.error)

        updated = result.data
        if updated is None:
            updated = replace(
                record,
                status=apply_triggers(record.status, ["reject"], review_id=record.id),
                reviewed_at=_now_iso(),
            )

        logger.info(f"Review {record.id}: rejected")
        return ActionOutcome(record=updated, message="Review rejected")

    async def refresh(self, record: ReviewRecord) -> ActionOutcome:
        """Re-fetch a review. Non-mutating; safe to retry."""
        result = await self.client.get_review(record.id)
        if not result.success:
            return ActionOutcome(record=record, error=result.error)
        return ActionOutcome(record=result.data)

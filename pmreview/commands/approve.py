"""
pmr approve/reject - Human approval commands.
"""

import asyncio

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.workflow.actions import ReviewActions
from pmreview.workflow.fsm import available_actions


async def _load_for_action(client: ReviewApiClient, review_id: str, action: str):
    """Fetch a review and check the action is offered for its status.

    Returns (record, exit_code); record is None when the command should stop.
    """
    result = await client.get_review(review_id)
    if not result.success:
        print(f"ERROR: {result.error}")
        return None, 1

    review = result.data
    if action not in available_actions(review.status):
        print(f"ERROR: Review is not pending (status: {review.status})")
        return None, 2
    return review, 0


async def _approve(args, config: ApiConfig) -> int:
    async with ReviewApiClient(config) as client:
        review, code = await _load_for_action(client, args.id, "approve")
        if review is None:
            return code
        outcome = await ReviewActions(client).approve(review)

    if not outcome.ok:
        print(f"ERROR: {outcome.error}")
        print(f"Review '{review.id}' is still {review.status}")
        return 1

    print(outcome.message)
    for ticket in outcome.ticket_references:
        print(f"  {ticket}")
    print(f"Status: {outcome.record.status}")
    return 0


async def _reject(args, config: ApiConfig) -> int:
    reason = getattr(args, "reason", None)
    async with ReviewApiClient(config) as client:
        review, code = await _load_for_action(client, args.id, "reject")
        if review is None:
            return code
        outcome = await ReviewActions(client).reject(review, reason)

    if not outcome.ok:
        print(f"ERROR: {outcome.error}")
        print(f"Review '{review.id}' is still {review.status}")
        return 1

    if reason:
        print(f"Rejected review '{review.id}' with reason:")
        print(f"  {reason}")
    else:
        print(f"Rejected review '{review.id}'")
    return 0


def cmd_approve(args, config: ApiConfig) -> int:
    """Approve a review and create tickets."""
    return asyncio.run(_approve(args, config))


def cmd_reject(args, config: ApiConfig) -> int:
    """Reject a review."""
    return asyncio.run(_reject(args, config))

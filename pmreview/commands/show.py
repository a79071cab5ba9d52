"""
pmr show - Show review details, workflow progress and content.
"""

import asyncio

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.lib.view import format_content, format_steps, format_timestamp, source_label
from pmreview.pm.content import active_content, editor_text, format_json
from pmreview.workflow.fsm import available_actions
from pmreview.workflow.state_machine import status_presentation


def _indent(text: str, prefix: str = "  ") -> str:
    return "\n".join(prefix + line if line else line for line in text.splitlines())


async def _show(args, config: ApiConfig) -> int:
    async with ReviewApiClient(config) as client:
        result = await client.get_review(args.id)

    if not result.success:
        print(f"ERROR: {result.error}")
        return 1

    review = result.data

    if getattr(args, "json", False):
        print(format_json(editor_text(review)))
        return 0

    badge = status_presentation(review.status)
    print(f"Review: {review.id}")
    print("=" * 60)
    print(f"Status:     {badge.label}")
    print(f"Type:       {review.content_type}")
    print(f"Source:     {source_label(review.source)}")
    print(f"Created:    {format_timestamp(review.created_at)}")
    if review.reviewed_at:
        print(f"Reviewed:   {format_timestamp(review.reviewed_at)}")
    if review.ticket_references:
        print(f"Tickets:    {', '.join(review.ticket_references)}")
    print()

    print("Workflow")
    print("-" * 40)
    print(_indent(format_steps(review.status)))
    actions = available_actions(review.status)
    if actions:
        print(f"  Actions: {', '.join(actions)}")
    print()

    print("Content (edited)" if review.has_edits else "Content")
    print("-" * 40)
    normalized = active_content(review)
    if normalized.ok:
        print(_indent(format_content(normalized.content)))
    else:
        print(f"  ERROR: {normalized.error}")
        print("  Use 'pmr show --json' to see the raw content, 'pmr edit' to fix it.")
    print()

    print("Original Input")
    print("-" * 40)
    print(_indent(review.input_content or "(empty)"))
    return 0


def cmd_show(args, config: ApiConfig) -> int:
    """Show a review."""
    return asyncio.run(_show(args, config))

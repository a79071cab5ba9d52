"""
pmr list - List reviews with previews.
"""

import asyncio

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.lib.view import format_timestamp, preview_text, source_label, stats_text
from pmreview.workflow.state_machine import status_presentation


async def _list(args, config: ApiConfig) -> int:
    async with ReviewApiClient(config) as client:
        result = await client.list_reviews()

    if not result.success:
        print(f"ERROR: {result.error}")
        print("Run 'pmr list' again to retry.")
        return 1

    reviews = result.data
    status_filter = getattr(args, "status", None)
    if status_filter:
        reviews = [r for r in reviews if r.status == status_filter]

    if not reviews:
        print("No reviews found.")
        print("Reviews appear here when generated through the n8n pipeline or 'pmr generate'.")
        return 0

    print("Reviews")
    print("-" * 60)
    for review in reviews:
        badge = status_presentation(review.status)
        created = format_timestamp(review.created_at)
        print(f"  {review.id:<12} [{badge.symbol}] {badge.label:<9} {source_label(review.source):<13} {created}")
        print(f"      {preview_text(review)}")
        stats = stats_text(review)
        if stats:
            print(f"      {stats}")
    print()
    print(f"{len(reviews)} review(s)")
    return 0


def cmd_list(args, config: ApiConfig) -> int:
    """List reviews."""
    return asyncio.run(_list(args, config))

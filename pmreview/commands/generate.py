"""
pmr generate - Submit free text for manual generation.
"""

import asyncio
import sys

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig


async def _generate(text: str, context: str | None, config: ApiConfig) -> int:
    async with ReviewApiClient(config) as client:
        result = await client.submit_manual_content(text, context)

    if not result.success:
        print(f"ERROR: {result.error}")
        return 1

    print(f"Submitted. Review ID: {result.data}")
    print(f"Run 'pmr show {result.data}' once generation completes")
    return 0


def cmd_generate(args, config: ApiConfig) -> int:
    """Submit content for generation. '-' reads the text from stdin."""
    text = sys.stdin.read() if args.text == "-" else args.text
    if not text.strip():
        print("ERROR: Nothing to submit")
        return 2
    return asyncio.run(_generate(text, getattr(args, "context", None), config))

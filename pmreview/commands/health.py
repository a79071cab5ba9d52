"""
pmr health - Check the review service is reachable.
"""

import asyncio

from pmreview.lib.api_client import ReviewApiClient
from pmreview.lib.config import ApiConfig
from pmreview.lib.view import format_timestamp


async def _health(config: ApiConfig) -> int:
    async with ReviewApiClient(config) as client:
        result = await client.health_check()

    if not result.success:
        print(f"API Error: {result.error}")
        return 1

    health = result.data
    print(f"API Connected: {config.base_url}")
    print(f"  Status:    {health.status}")
    print(f"  Database:  {health.database or 'unknown'}")
    if health.timestamp:
        print(f"  Timestamp: {format_timestamp(health.timestamp)}")
    return 0


def cmd_health(args, config: ApiConfig) -> int:
    """Check API health."""
    return asyncio.run(_health(config))

#!/usr/bin/env python3
"""
Script to clean up network stacks created during test runs.
This ensures no orphaned VPCs are left behind after end-to-end tests,
which could lead to unexpected costs and exhausted VPC quotas.
"""

import os
import logging
import datetime
import argparse
from typing import Any, Dict, Iterable, List, Optional

from rosa_network.cloud.aws_provider import AWSProvider
from rosa_network.errors import ProviderError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("cleanup")

# Constants
TEST_STACK_PREFIXES = ["ocp-", "rosa-network-stack-"]
RESOURCE_MAX_AGE_HOURS = 24


def find_expired_stacks(
    summaries: Iterable[Dict[str, Any]],
    max_age_hours: float,
    now: Optional[datetime.datetime] = None,
) -> List[Dict[str, Any]]:
    """
    Select stacks older than the max age that are not already being deleted.

    Args:
        summaries: Stack summaries as returned by list_stacks.
        max_age_hours: Maximum age in hours.
        now: Current time. Defaults to the current UTC time.

    Returns:
        The expired stack summaries.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    cutoff = now - datetime.timedelta(hours=max_age_hours)
    expired = []
    for summary in summaries:
        if summary.get("StackStatus") == "DELETE_IN_PROGRESS":
            continue
        created = summary.get("CreationTime")
        if created is not None and created <= cutoff:
            expired.append(summary)
    return expired


def cleanup_stacks(
    provider: AWSProvider,
    prefixes: Iterable[str],
    max_age_hours: float = RESOURCE_MAX_AGE_HOURS,
    dry_run: bool = False,
    now: Optional[datetime.datetime] = None,
) -> int:
    """
    Delete test stacks in the provider's region.

    Args:
        provider: AWS provider bound to the region to clean.
        prefixes: Stack name prefixes that mark test stacks.
        max_age_hours: Only stacks older than this are deleted.
        dry_run: Log what would be deleted without deleting.
        now: Current time, for age checks.

    Returns:
        int: Number of stacks deleted (or that would be deleted on a dry run)
    """
    logger.info(f"Starting stack cleanup in {provider.region}")
    stacks_cleaned = 0

    for prefix in prefixes:
        try:
            summaries = provider.list_stacks(prefix)
        except ProviderError as e:
            logger.error(f"Failed to list stacks with prefix {prefix}: {e}")
            continue

        for summary in find_expired_stacks(summaries, max_age_hours, now):
            name = summary["StackName"]
            if dry_run:
                logger.info(f"Would delete stack {name} ({summary.get('StackStatus')})")
                stacks_cleaned += 1
                continue
            try:
                provider.delete_stack(name)
                stacks_cleaned += 1
            except ProviderError as e:
                logger.error(f"Failed to delete stack {name}: {e}")

    logger.info(f"Cleanup completed in {provider.region}. {stacks_cleaned} stacks cleaned up.")
    return stacks_cleaned


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function to run the cleanup process.
    """
    parser = argparse.ArgumentParser(description="Clean up network stacks created during tests")
    parser.add_argument(
        "--region",
        action="append",
        default=None,
        help="Region to clean; repeat for multiple. Defaults to AWS_REGION or us-west-2",
    )
    parser.add_argument(
        "--prefix",
        action="append",
        default=None,
        help=f"Stack name prefix; repeat for multiple. Defaults to {', '.join(TEST_STACK_PREFIXES)}",
    )
    parser.add_argument("--max-age-hours", type=float, default=RESOURCE_MAX_AGE_HOURS, help="Minimum stack age")
    parser.add_argument("--profile", type=str, default=None, help="AWS profile to use")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be deleted without deleting")

    args = parser.parse_args(argv)

    regions = args.region or [os.environ.get("AWS_REGION", "us-west-2")]
    prefixes = args.prefix or TEST_STACK_PREFIXES

    logger.info("Starting cleanup of test stacks")
    total_cleaned = 0
    for region in regions:
        provider = AWSProvider({"region": region, "profile": args.profile})
        total_cleaned += cleanup_stacks(provider, prefixes, args.max_age_hours, args.dry_run)

    logger.info(f"Cleanup completed. Total stacks cleaned up: {total_cleaned}")


if __name__ == "__main__":
    main()

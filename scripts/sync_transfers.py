#!/usr/bin/env python3
"""
Run a transfer sync job inline, without the queue.

Usage:
    python scripts/sync_transfers.py --list
    python scripts/sync_transfers.py --job base-sync-transfers-cdp
    python scripts/sync_transfers.py --job solana-sync-transfers-bitquery \\
        --facilitator dexter --dry-run

A dry run still reads watermarks from the database but writes nothing.
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from loguru import logger

from jobs.utils.database import create_task_engine, create_task_session_maker
from transfer_sync.config.sync_jobs import find_job, scheduled_jobs
from transfer_sync.facilitators import default_registry
from transfer_sync.providers import ProviderClient, build_adapter_registry
from transfer_sync.services import PaginationDriver, SyncRunResult, TransferSyncService
from transfer_sync.utils.exceptions import SyncRunError, TransferSyncError
from transfer_sync.utils.logging import setup_logging


def list_jobs() -> None:
    """Print every scheduled job."""
    for job in scheduled_jobs(registry=default_registry()):
        config = job.config
        print(
            f"{job.job_id:<45} {config.cron:<15} "
            f"{config.pagination_strategy:<12} limit={config.limit}"
        )


def print_result(result: SyncRunResult) -> None:
    """Print per-address counts of a run."""
    for address in result.addresses:
        status = "ok" if address.ok else f"FAILED ({address.error})"
        print(
            f"{address.facilitator_id:<12} {address.address:<46} "
            f"fetched={address.fetched:<7} saved={address.saved:<7} {status}"
        )
    print(
        f"Total: {result.total_fetched} fetched, {result.total_saved} saved, "
        f"{len(result.failed)} failed, {result.skipped} disabled"
    )


async def run_job(
    job_id: str,
    facilitator_ids: list[str] | None = None,
    dry_run: bool = False,
) -> SyncRunResult:
    """
    Run one job in this process.

    Args:
        job_id: Scheduled job id
        facilitator_ids: Restrict the run to these facilitators
        dry_run: Fetch without persisting

    Returns:
        Run result
    """
    registry = default_registry()
    job = find_job(job_id, registry=registry)
    ids = facilitator_ids or job.facilitator_ids

    logger.info(f"Running {job.job_id}{' (dry run)' if dry_run else ''}")

    engine = create_task_engine()
    try:
        async with ProviderClient() as client:
            service = TransferSyncService(
                session_factory=create_task_session_maker(engine),
                registry=registry,
                driver=PaginationDriver(client, build_adapter_registry()),
                persist=not dry_run,
            )
            return await service.run(job.config, facilitator_ids=ids)
    finally:
        await engine.dispose()


def main() -> int:
    parser = argparse.ArgumentParser(description="Run facilitator transfer sync jobs")
    parser.add_argument("--job", help="Job id to run (see --list)")
    parser.add_argument("--list", action="store_true", help="List scheduled jobs")
    parser.add_argument(
        "--facilitator",
        action="append",
        dest="facilitators",
        help="Only sync this facilitator id (repeatable)",
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Fetch transfers without saving them"
    )
    args = parser.parse_args()

    if args.list:
        list_jobs()
        return 0
    if not args.job:
        parser.error("one of --job or --list is required")

    setup_logging("sync_transfers")

    try:
        result = asyncio.run(run_job(args.job, args.facilitators, args.dry_run))
    except SyncRunError as e:
        print_result(e.result)
        return 1
    except (TransferSyncError, KeyError) as e:
        logger.error(f"Sync failed: {e}")
        return 1

    print_result(result)
    return 0


if __name__ == "__main__":
    sys.exit(main())

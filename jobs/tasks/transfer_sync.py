"""
Transfer Sync Task.

Runs one scheduled sync job: facilitator transfers for a chain/provider
pair are fetched from the provider and stored idempotently.
"""

import dramatiq
import redis.asyncio as redis
from loguru import logger

from jobs.async_runner import run_async
from jobs.utils.database import create_task_engine, create_task_session_maker
from transfer_sync.config.constants import SYNC_LOCK_PREFIX
from transfer_sync.config.settings import settings
from transfer_sync.config.sync_jobs import ScheduledJob, find_job
from transfer_sync.facilitators import FacilitatorRegistry, default_registry
from transfer_sync.providers import ProviderClient, build_adapter_registry
from transfer_sync.services import PaginationDriver, SyncRunResult, TransferSyncService
from transfer_sync.utils.distributed_lock import DistributedLock


@dramatiq.actor(max_retries=3, time_limit=600_000)  # overridden per message
def sync_transfers(job_id: str) -> None:
    """
    Sync facilitator transfers for one scheduled job.

    Failures are re-raised so the broker's retry policy applies.
    """
    logger.info(f"[{job_id}] Starting transfer sync...")
    try:
        result = run_async(run_job(job_id))
    except Exception as e:
        logger.exception(f"[{job_id}] Transfer sync failed: {e}")
        raise

    if result is not None:
        logger.info(
            f"[{job_id}] Transfer sync complete: "
            f"{result.total_fetched} fetched, {result.total_saved} saved"
        )


async def run_job(job_id: str) -> SyncRunResult | None:
    """
    Resolve, lock and run a job.

    Returns:
        Run result, or None when the run was skipped
    """
    if settings.sync_maintenance_mode:
        logger.warning(f"[{job_id}] Sync maintenance mode active. Skipping run.")
        return None

    registry = default_registry()
    job = find_job(job_id, registry=registry)

    if not settings.sync_lock_enabled:
        return await _run_job(job, registry)

    redis_client = redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
    )
    try:
        lock = DistributedLock(redis_client, prefix=SYNC_LOCK_PREFIX)
        async with lock.lock(job_id, timeout=job.config.max_duration_seconds) as acquired:
            if not acquired:
                logger.info(f"[{job_id}] Previous run still active. Skipping.")
                return None
            return await _run_job(job, registry)
    finally:
        await redis_client.aclose()


async def _run_job(job: ScheduledJob, registry: FacilitatorRegistry) -> SyncRunResult:
    engine = create_task_engine()
    try:
        async with ProviderClient() as client:
            service = TransferSyncService(
                session_factory=create_task_session_maker(engine),
                registry=registry,
                driver=PaginationDriver(client, build_adapter_registry()),
            )
            result = await service.run(job.config, facilitator_ids=job.facilitator_ids)
    finally:
        await engine.dispose()

    return result

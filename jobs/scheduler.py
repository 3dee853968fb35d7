"""
Task scheduler.

Enqueues the transfer sync actor on each job's cron schedule and serves
the health endpoints. Run with ``python -m jobs.scheduler``.
"""

import asyncio
import signal

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from jobs.health import record_enqueue, set_scheduler, start_health_server, stop_health_server
from transfer_sync.config.settings import settings
from transfer_sync.config.sync_jobs import SYNC_CONFIGS, ScheduledJob, SyncConfig, scheduled_jobs
from transfer_sync.facilitators import FacilitatorRegistry
from transfer_sync.utils.logging import setup_logging

scheduler_instance: AsyncIOScheduler | None = None


def enqueue_sync(job_id: str, max_duration_seconds: int) -> str | None:
    """
    Enqueue one sync run.

    The message time limit matches the job's max duration.

    Returns:
        Dramatiq message id, or None when enqueueing failed
    """
    from jobs.tasks.transfer_sync import sync_transfers

    try:
        message = sync_transfers.send_with_options(
            args=(job_id,),
            time_limit=max_duration_seconds * 1000,
        )
    except Exception as e:
        logger.error(f"[{job_id}] Failed to enqueue transfer sync: {e}")
        record_enqueue(job_id, error=e)
        return None

    logger.info(f"[{job_id}] Enqueued transfer sync ({message.message_id})")
    record_enqueue(job_id, message_id=message.message_id)
    return message.message_id


def add_sync_job(scheduler: AsyncIOScheduler, job: ScheduledJob) -> None:
    """Register a scheduled job's cron trigger."""
    scheduler.add_job(
        enqueue_sync,
        CronTrigger.from_crontab(job.config.cron, timezone="UTC"),
        args=(job.job_id, job.config.max_duration_seconds),
        id=job.job_id,
        name=job.job_id,
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )


def build_scheduler(
    configs: tuple[SyncConfig, ...] = SYNC_CONFIGS,
    registry: FacilitatorRegistry | None = None,
) -> AsyncIOScheduler:
    """
    Build a scheduler with one cron job per enabled sync job.

    Args:
        configs: Sync configurations to schedule
        registry: Facilitator registry used to expand per-facilitator jobs

    Returns:
        Configured, not yet started scheduler
    """
    scheduler = AsyncIOScheduler(timezone="UTC")
    for job in scheduled_jobs(configs, registry):
        add_sync_job(scheduler, job)
        logger.info(f"{job.config.log_prefix} Scheduled {job.job_id} ({job.config.cron})")
    return scheduler


async def run_scheduler() -> None:
    """Run the scheduler and health server until a shutdown signal."""
    global scheduler_instance

    scheduler_instance = build_scheduler()
    set_scheduler(scheduler_instance)
    runner = await start_health_server(port=settings.health_check_port)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    scheduler_instance.start()
    logger.info(f"Scheduler started with {len(scheduler_instance.get_jobs())} job(s)")

    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down scheduler...")
        scheduler_instance.shutdown(wait=False)
        await stop_health_server(runner)


def main() -> None:
    """Entry point."""
    setup_logging("scheduler")
    # Importing the broker configures dramatiq before any actor is used
    import jobs.broker  # noqa: F401

    asyncio.run(run_scheduler())


if __name__ == "__main__":
    main()

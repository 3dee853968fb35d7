"""
Health check server for the sync scheduler.

Serves /health, /readiness and /liveness. /health lists every scheduled
sync job with its next run time and the outcome of its last enqueue.
"""

import asyncio
from dataclasses import asdict, dataclass
from datetime import datetime

from aiohttp import web
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from loguru import logger

from transfer_sync.utils.datetime_utils import format_iso_utc, utc_now

_scheduler: AsyncIOScheduler | None = None
_last_enqueues: dict[str, "EnqueueRecord"] = {}


@dataclass(frozen=True)
class EnqueueRecord:
    """Outcome of the most recent enqueue of a job."""

    at: str
    ok: bool
    message_id: str | None = None
    error: str | None = None


def set_scheduler(scheduler: AsyncIOScheduler) -> None:
    """
    Set the scheduler instance for health checks.

    Args:
        scheduler: AsyncIOScheduler instance to monitor
    """
    global _scheduler
    _scheduler = scheduler
    logger.info("Scheduler registered for health checks")


def record_enqueue(
    job_id: str,
    message_id: str | None = None,
    error: BaseException | None = None,
    at: datetime | None = None,
) -> EnqueueRecord:
    """
    Remember the outcome of enqueueing a job.

    Args:
        job_id: Scheduled job id
        message_id: Dramatiq message id on success
        error: Exception raised while enqueueing
        at: Enqueue time (defaults to now)

    Returns:
        The stored record
    """
    record = EnqueueRecord(
        at=format_iso_utc(at or utc_now()),
        ok=error is None,
        message_id=message_id,
        error=str(error) if error is not None else None,
    )
    _last_enqueues[job_id] = record
    return record


def last_enqueue(job_id: str) -> EnqueueRecord | None:
    """Last enqueue outcome recorded for a job, if any."""
    return _last_enqueues.get(job_id)


def reset() -> None:
    """Forget the scheduler and all recorded enqueues."""
    global _scheduler
    _scheduler = None
    _last_enqueues.clear()


def _job_info(job) -> dict:
    record = _last_enqueues.get(job.id)
    return {
        "id": job.id,
        "name": job.name,
        "next_run_time": (
            format_iso_utc(job.next_run_time) if job.next_run_time else None
        ),
        "last_enqueue": asdict(record) if record else None,
    }


async def health_handler(request: web.Request) -> web.Response:
    """
    Health check endpoint.

    Returns:
        JSON response with scheduler status and per-job details
    """
    if _scheduler is None:
        return web.json_response(
            {"status": "unhealthy", "error": "Scheduler not initialized"},
            status=503,
        )

    try:
        is_running = _scheduler.running
        jobs = [_job_info(job) for job in _scheduler.get_jobs()]
    except Exception as e:
        logger.error(f"Health check failed: {e}")
        return web.json_response({"status": "unhealthy", "error": str(e)}, status=503)

    failing = [job["id"] for job in jobs if job["last_enqueue"] and not job["last_enqueue"]["ok"]]
    if not is_running:
        status = "stopped"
    elif failing:
        status = "degraded"
    else:
        status = "healthy"

    return web.json_response(
        {
            "status": status,
            "scheduler_running": is_running,
            "jobs_count": len(jobs),
            "failing_jobs": failing,
            "jobs": jobs,
        },
        status=200 if is_running else 503,
    )


async def readiness_handler(request: web.Request) -> web.Response:
    """Ready once the scheduler is running."""
    if _scheduler is None or not _scheduler.running:
        return web.json_response({"status": "not_ready", "ready": False}, status=503)
    return web.json_response({"status": "ready", "ready": True})


async def liveness_handler(request: web.Request) -> web.Response:
    return web.json_response({"status": "alive", "alive": True})


def create_health_app() -> web.Application:
    """Build the aiohttp application with all health routes."""
    app = web.Application()
    app.router.add_get("/health", health_handler)
    app.router.add_get("/readiness", readiness_handler)
    app.router.add_get("/liveness", liveness_handler)
    return app


async def start_health_server(
    host: str = "0.0.0.0",
    port: int = 8081,
) -> web.AppRunner:
    """
    Start health check server.

    Args:
        host: Host to bind to
        port: Port to bind to

    Returns:
        AppRunner for cleanup
    """
    runner = web.AppRunner(create_health_app())
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()

    logger.info(f"Health check server started on http://{host}:{port}/health")
    return runner


async def stop_health_server(runner: web.AppRunner, timeout: int = 5) -> None:
    """
    Stop health check server gracefully.

    Args:
        runner: AppRunner to cleanup
        timeout: Maximum time to wait for cleanup in seconds
    """
    logger.info("Stopping health check server...")
    try:
        await asyncio.wait_for(runner.cleanup(), timeout=timeout)
    except TimeoutError:
        logger.warning(f"Health check server cleanup timed out after {timeout}s")

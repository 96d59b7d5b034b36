"""
Expiry Check Background Job - daily perishable expiry notifications.

Runs once a day at EXPIRY_CHECK_HOUR in EXPIRY_TIMEZONE (midnight in
Asia/Colombo by default) and notifies every user with groceries that are
expired or expire within the horizon.

Usage:
    # In-process (main.py lifespan)
    asyncio.create_task(start_expiry_check_scheduler())

    # Dedicated worker
    python -m app.jobs.worker expiry_notifications
"""

import asyncio
from datetime import datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from app.config import settings
from app.db.pool import db_pool
from app.features.expiry_notifications.domain import RunSummary
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

RETRY_DELAY_SECONDS = 3600


def seconds_until_next_run(now: datetime, hour: int, tz: tzinfo) -> float:
    """
    Seconds from `now` until the next `hour`:00 wall-clock time in `tz`.

    A run exactly at the scheduled instant is pushed to the following day.
    """
    local_now = now.astimezone(tz)
    next_run = local_now.replace(hour=hour, minute=0, second=0, microsecond=0)

    if local_now >= next_run:
        next_day = (next_run + timedelta(days=1)).date()
        next_run = datetime(next_day.year, next_day.month, next_day.day, hour, tzinfo=tz)

    return (next_run - local_now).total_seconds()


async def _ensure_pool() -> None:
    if not db_pool.is_ready:
        logger.info("Initializing database pool for expiry check job")
        await db_pool.initialize()


async def run_expiry_check_once() -> RunSummary:
    """Run a single expiry check (worker / manual ops use)."""
    from app.features.expiry_notifications.services import expiry_notification_service

    await _ensure_pool()
    summary = await expiry_notification_service.run_expiry_check()

    if not summary.success:
        logger.error("Expiry check failed", **summary.to_dict())
    return summary


async def start_expiry_check_scheduler() -> None:
    """
    Start the daily expiry check scheduler.

    Loops forever; cancel the task to stop it.
    """
    if not settings.EXPIRY_SCHEDULER_ENABLED:
        logger.info("Expiry check scheduler DISABLED", environment=settings.environment)
        return

    tz = ZoneInfo(settings.EXPIRY_TIMEZONE)
    schedule_hour = settings.EXPIRY_CHECK_HOUR

    logger.info(
        "Expiry check scheduler STARTED",
        schedule_hour=schedule_hour,
        timezone=settings.EXPIRY_TIMEZONE,
        environment=settings.environment,
    )

    while True:
        try:
            sleep_seconds = seconds_until_next_run(datetime.now(tz), schedule_hour, tz)

            logger.info(
                "Expiry check scheduled",
                next_run=(datetime.now(tz) + timedelta(seconds=sleep_seconds)).isoformat(),
                sleep_seconds=round(sleep_seconds, 1),
            )

            await asyncio.sleep(sleep_seconds)

            logger.info("Running scheduled expiry check")
            summary = await run_expiry_check_once()

            logger.info("Scheduled expiry check completed", **summary.to_dict())

        except asyncio.CancelledError:
            logger.info("Expiry check scheduler cancelled")
            break
        except Exception as e:
            logger.error("Error in expiry check scheduler, will retry", error=str(e))
            await asyncio.sleep(RETRY_DELAY_SECONDS)

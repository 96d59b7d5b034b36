"""
Fire-and-forget expiry check trigger.

Used by the grocery create path: the caller's response never waits on a
notification run. While a run is already in flight, further requests are
coalesced: they mark one follow-up run, started as soon as the current
run finishes, so records created mid-run are still scanned.
"""

import asyncio
from collections.abc import Awaitable, Callable

from app.features.expiry_notifications.domain import RunSummary
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

RunCallable = Callable[[], Awaitable[RunSummary]]

_current_task: asyncio.Task | None = None

# Runner for the single follow-up run owed to triggers that arrived mid-run
_rerun_pending: RunCallable | None = None


def _default_runner() -> RunCallable:
    from app.features.expiry_notifications.services.notification_service import (
        run_expiry_check,
    )

    return run_expiry_check


def _start(loop: asyncio.AbstractEventLoop, run: RunCallable, reason: str) -> None:
    global _current_task
    _current_task = loop.create_task(run(), name=f"expiry-check:{reason}")
    _current_task.add_done_callback(_on_done)
    logger.info("Background expiry check scheduled", reason=reason)


def _on_done(task: asyncio.Task) -> None:
    global _current_task, _rerun_pending
    if _current_task is task:
        _current_task = None

    if task.cancelled():
        logger.info("Background expiry check cancelled")
    elif task.exception() is not None:
        exc = task.exception()
        logger.error(
            "Background expiry check failed",
            error=str(exc),
            error_type=type(exc).__name__,
        )
    else:
        logger.info("Background expiry check finished", **task.result().to_dict())

    if _rerun_pending is not None and _current_task is None and not task.get_loop().is_closed():
        run, _rerun_pending = _rerun_pending, None
        _start(task.get_loop(), run, "rerun")


def schedule_expiry_check(reason: str, runner: RunCallable | None = None) -> bool:
    """
    Start an expiry check in the background.

    Returns:
        bool: True if a new run was started, False if it was folded into the
        follow-up of the run in flight or no event loop is available
    """
    global _rerun_pending

    if _current_task is not None and not _current_task.done():
        _rerun_pending = runner or _default_runner()
        logger.info("Expiry check already in flight, follow-up run queued", reason=reason)
        return False

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        logger.warning("No running event loop, background expiry check not scheduled", reason=reason)
        return False

    _start(loop, runner or _default_runner(), reason)
    return True


def notify_grocery_created(record_id: str, runner: RunCallable | None = None) -> bool:
    """Hook for the grocery create path."""
    return schedule_expiry_check(f"grocery_created:{record_id}", runner)


def is_check_in_flight() -> bool:
    return _current_task is not None and not _current_task.done()


def is_rerun_pending() -> bool:
    return _rerun_pending is not None

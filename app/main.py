"""
Homestock expiry notification service.

FastAPI app with database pool lifecycle management and the in-process
daily expiry check scheduler.
"""

import asyncio
import contextlib
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from app.config import settings
from app.db.pool import db_pool
from app.features.expiry_notifications import expiry_router, start_expiry_check_scheduler
from app.infrastructure.observability.logging import get_logger, log_request, setup_logging
from app.routes import health

# Setup logging before creating the app
setup_logging(log_level=settings.log_level)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle application startup and shutdown with proper resource management."""

    logger.info("Application starting", environment=settings.environment, debug=settings.debug)

    try:
        logger.info("Initializing database pool")
        await db_pool.initialize()
    except Exception as e:
        logger.error("Failed to initialize database pool", error=str(e))
        raise

    scheduler_task = None
    if settings.EXPIRY_SCHEDULER_ENABLED:
        scheduler_task = asyncio.create_task(
            start_expiry_check_scheduler(), name="expiry-check-scheduler"
        )

    logger.info("All services initialized successfully", scheduler=scheduler_task is not None)

    yield

    logger.info("Application shutting down")

    if scheduler_task is not None:
        scheduler_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await scheduler_task

    try:
        logger.info("Closing database pool")
        await db_pool.close()
        logger.info("All services closed successfully")
    except Exception as e:
        logger.error("Error closing database pool", error=str(e))


app = FastAPI(
    title="Homestock Expiry Notifications",
    description="Daily perishable expiry notices over email, WhatsApp and SMS",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(health.router)
app.include_router(expiry_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log HTTP requests with timing."""
    start_time = time.time()
    response = await call_next(request)
    process_time = (time.time() - start_time) * 1000

    log_request(
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round(process_time, 2),
    )
    return response


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)

"""
Expiry notification routes.

Manual trigger for the same check the daily scheduler runs.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from app.auth.verify import auth_dependency
from app.features.expiry_notifications.services import (
    ExpiryNotificationService,
    get_expiry_notification_service,
)
from app.infrastructure.observability.logging import get_logger

router = APIRouter(prefix="/api/groceries", tags=["groceries"])
logger = get_logger(__name__)


@router.get("/check-expiry")
async def check_expiry(
    claims: dict = Depends(auth_dependency),
    service: ExpiryNotificationService = Depends(get_expiry_notification_service),
):
    """
    Run an expiry check now.

    Returns the run summary; a run that could not read the store answers 500
    with `success: false` and the same summary shape.
    """
    logger.info("Manual expiry check requested", requested_by=claims.get("sub"))

    summary = await service.run_expiry_check()

    if not summary.success:
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=summary.to_dict(),
        )

    return summary.to_dict()

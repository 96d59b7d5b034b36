"""
Domain subpackage for the expiry notification feature.
"""

from .config import HORIZON_DAYS, ExpiryNotificationConfig
from .models import (
    DispatchResult,
    ExpiryCandidate,
    NotificationGroup,
    PerishableRecord,
    RunSummary,
    UserContact,
)

__all__ = [
    "HORIZON_DAYS",
    "DispatchResult",
    "ExpiryCandidate",
    "ExpiryNotificationConfig",
    "NotificationGroup",
    "PerishableRecord",
    "RunSummary",
    "UserContact",
]

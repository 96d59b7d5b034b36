"""
Service layer for the expiry notification feature.
"""

from .contact_formatter import format_phone_number
from .dispatcher import NotificationDispatcher
from .grouper import group_by_owner
from .notification_service import (
    ExpiryNotificationService,
    build_expiry_notification_service,
    expiry_notification_service,
    get_expiry_notification_service,
    run_expiry_check,
)
from .scanner import CandidateScanner
from .state_updater import DeliveryStateUpdater
from .trigger import notify_grocery_created, schedule_expiry_check

__all__ = [
    "CandidateScanner",
    "DeliveryStateUpdater",
    "ExpiryNotificationService",
    "NotificationDispatcher",
    "build_expiry_notification_service",
    "expiry_notification_service",
    "format_phone_number",
    "get_expiry_notification_service",
    "group_by_owner",
    "notify_grocery_created",
    "run_expiry_check",
    "schedule_expiry_check",
]

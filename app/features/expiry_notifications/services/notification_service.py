"""
Expiry notification run coordinator.

Scan -> group -> (dispatch -> update) per user, with every user's pipeline
running concurrently. This is the single entry point used by the daily
scheduler, the manual HTTP trigger and the post-create hook.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import date, datetime

from app.features.expiry_notifications.domain import (
    ExpiryNotificationConfig,
    NotificationGroup,
    RunSummary,
)
from app.features.expiry_notifications.repository import ExpiryStore
from app.features.expiry_notifications.services.dispatcher import NotificationDispatcher
from app.features.expiry_notifications.services.grouper import group_by_owner
from app.features.expiry_notifications.services.scanner import CandidateScanner
from app.features.expiry_notifications.services.state_updater import DeliveryStateUpdater
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SCAN_FAILED_MESSAGE = "Failed to check expiring groceries."


@dataclass(slots=True)
class GroupOutcome:
    user_id: str
    delivered: bool
    records_flagged: int


class ExpiryNotificationService:
    """
    Coordinates one expiry check run.

    Holds no state between runs; the store is the only durable state.
    """

    def __init__(
        self,
        store: ExpiryStore,
        dispatcher: NotificationDispatcher,
        config: ExpiryNotificationConfig,
    ):
        self.config = config
        self.scanner = CandidateScanner(store, config)
        self.dispatcher = dispatcher
        self.state_updater = DeliveryStateUpdater(store)

    async def run_expiry_check(self, now: datetime | None = None) -> RunSummary:
        """
        Run one full check.

        Never raises for channel or flag-write failures. A store failure
        during the scan yields a failed summary with the diagnostic.
        """
        start_time = time.time()
        today = self.config.today(now)

        try:
            candidates = await self.scanner.scan(now)
        except Exception as e:
            logger.error(
                "Error checking expiring groceries",
                error=str(e),
                error_type=type(e).__name__,
            )
            return RunSummary(success=False, message=SCAN_FAILED_MESSAGE, error=str(e))

        groups = group_by_owner(candidates)
        logger.info("Grouped groceries by user", candidates=len(candidates), users=len(groups))

        outcomes = await asyncio.gather(*(self._process_group(group, today) for group in groups))

        users_notified = sum(1 for outcome in outcomes if outcome.delivered)
        records_flagged = sum(outcome.records_flagged for outcome in outcomes)

        summary = RunSummary(
            success=True,
            message=(
                f"Checked {len(candidates)} expiring groceries and sent notifications "
                f"to {users_notified} users."
            ),
            candidates_found=len(candidates),
            users_notified=users_notified,
            groups=len(groups),
            records_flagged=records_flagged,
        )

        logger.info(
            "Expiry check completed",
            duration_seconds=round(time.time() - start_time, 2),
            **summary.to_dict(),
        )
        return summary

    async def _process_group(self, group: NotificationGroup, today: date) -> GroupOutcome:
        """Dispatch then update for one user; failures stay inside the group."""
        try:
            result = await self.dispatcher.dispatch(group, today)
            flagged = await self.state_updater.apply(group, result.overall_success)
            return GroupOutcome(group.user_id, result.overall_success, flagged)

        except Exception as e:
            logger.error(
                "Notification pipeline failed for user",
                user_id=group.user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            await self.state_updater.release(group)
            return GroupOutcome(group.user_id, False, 0)


def build_expiry_notification_service(
    config: ExpiryNotificationConfig | None = None,
    store: ExpiryStore | None = None,
) -> ExpiryNotificationService:
    """Wire the service from application settings."""
    from app.config import settings
    from app.features.expiry_notifications.repository import grocery_repository
    from app.features.expiry_notifications.services.channels import (
        ChatSender,
        EmailSender,
        SmtpEmailTransport,
        TextSender,
        TwilioMessagingClient,
    )

    config = config or settings.get_expiry_notification_config()
    twilio_client = TwilioMessagingClient.from_settings()

    dispatcher = NotificationDispatcher(
        email_sender=EmailSender(config, SmtpEmailTransport.from_settings()),
        chat_sender=ChatSender(config, twilio_client),
        text_sender=TextSender(config, twilio_client),
        config=config,
    )
    return ExpiryNotificationService(store or grocery_repository, dispatcher, config)


# Singleton instance for application use
expiry_notification_service = build_expiry_notification_service()


def get_expiry_notification_service() -> ExpiryNotificationService:
    """FastAPI dependency / import hook for the shared service."""
    return expiry_notification_service


async def run_expiry_check() -> RunSummary:
    """Run one expiry check with the shared service."""
    return await expiry_notification_service.run_expiry_check()

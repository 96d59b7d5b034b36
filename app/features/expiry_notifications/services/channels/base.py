"""
Common send() contract for channel senders.

A sender turns (user, records) into one outbound message and reports a
boolean outcome. Transport errors stop here: they are logged and become
False, never an exception for the dispatcher.
"""

from abc import ABC, abstractmethod
from datetime import date

from app.features.expiry_notifications.domain import (
    ExpiryNotificationConfig,
    PerishableRecord,
    UserContact,
)
from app.features.expiry_notifications.services.channels.errors import TransportError
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


def describe_days(days: int) -> str:
    """Human phrase for a days-until-expiry count."""
    if days > 1:
        return f"in {days} days"
    if days == 1:
        return "in 1 day"
    if days == 0:
        return "today"
    if days == -1:
        return "1 day ago"
    return f"{-days} days ago"


def days_until(expiry_date: date, today: date) -> int:
    """Whole days between today and the expiry day (both at day granularity)."""
    return (expiry_date - today).days


def format_expiry_date(expiry_date: date) -> str:
    return expiry_date.strftime("%B %d, %Y")


class ChannelSender(ABC):
    """Base class for the email, chat and text senders."""

    channel: str = "unknown"

    # Transport error codes meaning "this channel is not set up for this
    # sender/recipient"; logged as warnings instead of errors.
    recipient_condition_codes: frozenset = frozenset()

    def __init__(self, config: ExpiryNotificationConfig):
        self.config = config

    async def send(
        self,
        user: UserContact,
        records: list[PerishableRecord],
        today: date | None = None,
    ) -> bool:
        """
        Deliver one message covering every record.

        Returns:
            bool: True iff the transport accepted the message
        """
        if not records:
            return False

        today = today or self.config.today()

        try:
            receipt = await self._deliver(user, records, today)

        except TransportError as e:
            if e.error_code in self.recipient_condition_codes:
                logger.warning(
                    f"{self.channel} channel not available for recipient",
                    channel=self.channel,
                    user_id=user.id,
                    error_code=e.error_code,
                    error=str(e),
                )
            else:
                logger.error(
                    f"Error sending {self.channel} notification",
                    channel=self.channel,
                    user_id=user.id,
                    error_code=e.error_code,
                    status_code=e.status_code,
                    error=str(e),
                )
            return False

        except Exception as e:
            logger.error(
                f"Unexpected error sending {self.channel} notification",
                channel=self.channel,
                user_id=user.id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

        logger.info(
            f"{self.channel} notification sent",
            channel=self.channel,
            user_id=user.id,
            record_count=len(records),
            receipt=receipt,
        )
        return True

    @abstractmethod
    async def _deliver(
        self, user: UserContact, records: list[PerishableRecord], today: date
    ) -> str | None:
        """Compose and hand the message to the transport; return a receipt id."""

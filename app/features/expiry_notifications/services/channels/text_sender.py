"""
Text channel: a multi-line SMS sent through Twilio.
"""

from datetime import date

from app.features.expiry_notifications.domain import (
    ExpiryNotificationConfig,
    PerishableRecord,
    UserContact,
)
from app.features.expiry_notifications.services.channels.base import (
    ChannelSender,
    format_expiry_date,
)
from app.features.expiry_notifications.services.channels.errors import (
    TWILIO_UNVERIFIED_DESTINATION,
    TwilioError,
)
from app.features.expiry_notifications.services.channels.twilio_client import (
    TwilioMessagingClient,
)


def build_text_message(user: UserContact, records: list[PerishableRecord], horizon_days: int) -> str:
    message = (
        f"Hello {user.name}, the following grocery items in your Homestock inventory "
        f"will expire within {horizon_days} days:\n\n"
    )
    for record in records:
        message += f"• {record.name} - Expires on: {format_expiry_date(record.expiry_date)}\n"
    message += "\nPlease check your Homestock app for more details."
    return message


class TextSender(ChannelSender):
    channel = "text"
    recipient_condition_codes = frozenset({TWILIO_UNVERIFIED_DESTINATION})

    def __init__(self, config: ExpiryNotificationConfig, client: TwilioMessagingClient):
        super().__init__(config)
        self.client = client

    async def _deliver(
        self, user: UserContact, records: list[PerishableRecord], today: date
    ) -> str | None:
        if not user.has_phone:
            raise TwilioError("User has no phone number on file")
        if not self.config.sms_from:
            raise TwilioError("SMS sender number (TWILIO_PHONE_NUMBER) is not configured")

        return await self.client.create_message(
            from_=self.config.sms_from,
            to=user.phone_number,
            body=build_text_message(user, records, self.config.horizon_days),
        )

"""
Chat channel: a single WhatsApp message sent through Twilio.
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
    TWILIO_WHATSAPP_SENDER_UNPROVISIONED,
    TwilioError,
)
from app.features.expiry_notifications.services.channels.twilio_client import (
    TwilioMessagingClient,
)

WHATSAPP_PREFIX = "whatsapp:"


def build_chat_body(user: UserContact, records: list[PerishableRecord]) -> str:
    names = ", ".join(record.name for record in records)
    earliest = format_expiry_date(min(r.expiry_date for r in records))
    return (
        f"Hello {user.name}, your item(s) {names} will expire on {earliest}. "
        "Please check your Homestock inventory."
    )


class ChatSender(ChannelSender):
    channel = "chat"
    recipient_condition_codes = frozenset({TWILIO_WHATSAPP_SENDER_UNPROVISIONED})

    def __init__(self, config: ExpiryNotificationConfig, client: TwilioMessagingClient):
        super().__init__(config)
        self.client = client

    async def _deliver(
        self, user: UserContact, records: list[PerishableRecord], today: date
    ) -> str | None:
        # The dispatcher hands over contacts whose number is already normalized.
        if not user.has_phone:
            raise TwilioError("User has no phone number on file")

        return await self.client.create_message(
            from_=self.config.whatsapp_from,
            to=f"{WHATSAPP_PREFIX}{user.phone_number}",
            body=build_chat_body(user, records),
        )

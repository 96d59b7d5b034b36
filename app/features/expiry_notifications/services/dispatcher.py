"""
Notification dispatcher: fans one group out over every channel.

Email runs alongside the chat/text pair; chat and text run alongside each
other, so text is never held back waiting on chat. The group counts as
delivered when any single channel succeeds.
"""

import asyncio
from dataclasses import replace
from datetime import date

from app.features.expiry_notifications.domain import (
    DispatchResult,
    ExpiryNotificationConfig,
    NotificationGroup,
    UserContact,
)
from app.features.expiry_notifications.services.channels import ChannelSender
from app.features.expiry_notifications.services.contact_formatter import format_phone_number
from app.infrastructure.observability.logging import get_logger, log_channel_delivery

logger = get_logger(__name__)


class NotificationDispatcher:
    def __init__(
        self,
        email_sender: ChannelSender,
        chat_sender: ChannelSender,
        text_sender: ChannelSender,
        config: ExpiryNotificationConfig,
    ):
        self.email_sender = email_sender
        self.chat_sender = chat_sender
        self.text_sender = text_sender
        self.config = config

    async def dispatch(self, group: NotificationGroup, today: date | None = None) -> DispatchResult:
        today = today or self.config.today()

        logger.info(
            "Sending notifications to user",
            user_id=group.user_id,
            record_count=len(group.records),
            has_phone=group.user.has_phone,
        )

        email_sent, (chat_sent, text_sent) = await asyncio.gather(
            self._send(self.email_sender, group.user, group, today),
            self._send_messages(group, today),
        )

        result = DispatchResult(
            user_id=group.user_id, email=email_sent, chat=chat_sent, text=text_sent
        )

        log_channel_delivery("email", group.user_id, email_sent)
        if group.user.has_phone:
            log_channel_delivery("chat", group.user_id, bool(chat_sent))
            log_channel_delivery("text", group.user_id, bool(text_sent))
        else:
            logger.info("No phone number on file, chat and text skipped", user_id=group.user_id)

        return result

    async def _send_messages(
        self, group: NotificationGroup, today: date
    ) -> tuple[bool | None, bool | None]:
        """Chat and text in parallel; (None, None) when the user has no phone."""
        if not group.user.has_phone:
            return None, None

        # Normalized once per group, only now that a phone channel will run
        contact = replace(
            group.user,
            phone_number=format_phone_number(
                group.user.phone_number, self.config.country_code, self.config.trunk_prefix
            ),
        )

        chat_sent, text_sent = await asyncio.gather(
            self._send(self.chat_sender, contact, group, today),
            self._send(self.text_sender, contact, group, today),
        )
        return chat_sent, text_sent

    async def _send(
        self, sender: ChannelSender, contact: UserContact, group: NotificationGroup, today: date
    ) -> bool:
        """Run one sender under the per-channel timeout."""
        try:
            return await asyncio.wait_for(
                sender.send(contact, group.records, today),
                timeout=self.config.channel_timeout_seconds,
            )
        except TimeoutError:
            logger.warning(
                "Channel send timed out",
                channel=sender.channel,
                user_id=group.user_id,
                timeout_seconds=self.config.channel_timeout_seconds,
            )
            return False
        except Exception as e:
            logger.error(
                "Channel sender raised unexpectedly",
                channel=sender.channel,
                user_id=group.user_id,
                error=str(e),
                error_type=type(e).__name__,
            )
            return False

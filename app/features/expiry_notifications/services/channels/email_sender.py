"""
Email channel: one HTML digest per user listing every expiring grocery.
"""

import html
from datetime import date

from app.features.expiry_notifications.domain import (
    ExpiryNotificationConfig,
    PerishableRecord,
    UserContact,
)
from app.features.expiry_notifications.services.channels.base import (
    ChannelSender,
    days_until,
    describe_days,
    format_expiry_date,
)
from app.features.expiry_notifications.services.channels.smtp_transport import SmtpEmailTransport


def build_subject(records: list[PerishableRecord], today: date) -> str:
    """Subject keyed on the earliest expiry in the batch."""
    days = days_until(min(r.expiry_date for r in records), today)
    if days < 0:
        return f"Homestock: Grocery Items Expired {describe_days(days)}"
    return f"Homestock: Grocery Items Expiring {describe_days(days)}"


def build_html_body(user: UserContact, records: list[PerishableRecord], today: date) -> str:
    earliest_days = days_until(min(r.expiry_date for r in records), today)

    items = "".join(
        "<li><strong>{name}</strong> - Expires on: {date} ({when})</li>".format(
            name=html.escape(record.name),
            date=format_expiry_date(record.expiry_date),
            when=describe_days(days_until(record.expiry_date, today)),
        )
        for record in records
    )

    return (
        "<h2>Hello {name},</h2>"
        "<p>The following grocery items in your Homestock inventory need attention, "
        "the first one expires {when}:</p>"
        "<ul>{items}</ul>"
        "<p>Please check your Homestock app for more details.</p>"
        "<p>Thank you for using Homestock!</p>"
    ).format(name=html.escape(user.name), when=describe_days(earliest_days), items=items)


def build_text_body(user: UserContact, records: list[PerishableRecord], today: date) -> str:
    lines = [f"Hello {user.name},", "", "The following grocery items in your Homestock inventory need attention:", ""]
    for record in records:
        when = describe_days(days_until(record.expiry_date, today))
        lines.append(f"- {record.name} - Expires on: {format_expiry_date(record.expiry_date)} ({when})")
    lines += ["", "Please check your Homestock app for more details."]
    return "\n".join(lines)


class EmailSender(ChannelSender):
    channel = "email"

    def __init__(self, config: ExpiryNotificationConfig, transport: SmtpEmailTransport):
        super().__init__(config)
        self.transport = transport

    async def _deliver(
        self, user: UserContact, records: list[PerishableRecord], today: date
    ) -> str | None:
        receipt = await self.transport.send_email(
            user.email,
            build_subject(records, today),
            build_html_body(user, records, today),
            from_address=self.config.email_from,
            text_body=build_text_body(user, records, today),
        )
        return receipt.get("message_id")

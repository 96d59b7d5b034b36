"""
SMTP email transport.

Implicit SSL on port 465; STARTTLS on any other port when use_tls is set.
smtplib is blocking, so each send runs in a worker thread with its own
connection.
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage

from app.config import settings
from app.features.expiry_notifications.services.channels.errors import EmailTransportError
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

SMTP_TIMEOUT_SECONDS = 20


class SmtpEmailTransport:
    """Outbound email transport backed by an SMTP relay."""

    def __init__(
        self,
        host: str,
        port: int,
        username: str | None = None,
        password: str | None = None,
        use_tls: bool = True,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls

    @classmethod
    def from_settings(cls) -> "SmtpEmailTransport":
        return cls(
            host=settings.EMAIL_SMTP_HOST,
            port=settings.EMAIL_SMTP_PORT,
            username=settings.EMAIL_USERNAME,
            password=settings.EMAIL_PASSWORD,
            use_tls=settings.EMAIL_USE_TLS,
        )

    async def send_email(
        self,
        to: str | list[str],
        subject: str,
        html_body: str,
        *,
        from_address: str,
        text_body: str | None = None,
    ) -> dict:
        """
        Send one message.

        Returns:
            dict: delivery receipt with accepted recipients

        Raises:
            EmailTransportError: If the relay refuses the message or is unreachable
        """
        recipients = [to] if isinstance(to, str) else list(to)

        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = from_address
        msg["To"] = ", ".join(recipients)
        msg.set_content(text_body or "This message requires an HTML-capable email client.")
        msg.add_alternative(html_body, subtype="html")

        try:
            refused = await asyncio.to_thread(self._send_blocking, msg)
        except smtplib.SMTPResponseException as e:
            raise EmailTransportError(
                f"SMTP error {e.smtp_code}: {e.smtp_error!r}", error_code=e.smtp_code
            ) from e
        except (smtplib.SMTPException, OSError) as e:
            raise EmailTransportError(f"SMTP delivery failed: {e}") from e

        accepted = [r for r in recipients if r not in refused]
        if not accepted:
            raise EmailTransportError("All recipients were refused", response_data=refused)

        logger.debug("Email accepted by relay", recipients=accepted, subject=subject)
        return {"accepted": accepted, "refused": refused, "message_id": msg.get("Message-ID")}

    def _send_blocking(self, msg: EmailMessage) -> dict:
        if self.port == 465:
            with smtplib.SMTP_SSL(
                self.host, self.port, context=ssl.create_default_context(), timeout=SMTP_TIMEOUT_SECONDS
            ) as s:
                return self._login_and_send(s, msg)

        with smtplib.SMTP(self.host, self.port, timeout=SMTP_TIMEOUT_SECONDS) as s:
            if self.use_tls:
                s.ehlo()
                s.starttls(context=ssl.create_default_context())
                s.ehlo()
            return self._login_and_send(s, msg)

    def _login_and_send(self, s: smtplib.SMTP, msg: EmailMessage) -> dict:
        if self.username and self.password:
            s.login(self.username, self.password)
        return s.send_message(msg)

"""
Transport-level exceptions raised by the outbound email/messaging clients.
"""


class TransportError(Exception):
    """Raised when an outbound transport rejects or fails to accept a message."""

    def __init__(
        self,
        message: str,
        error_code: int | str | None = None,
        status_code: int | None = None,
        response_data: dict | None = None,
    ):
        super().__init__(message)
        self.error_code = error_code
        self.status_code = status_code
        self.response_data = response_data or {}


class EmailTransportError(TransportError):
    """SMTP delivery failure."""


class TwilioError(TransportError):
    """Twilio REST API failure carrying Twilio's numeric error code."""


# Twilio error codes for conditions tied to sender/recipient provisioning.
TWILIO_WHATSAPP_SENDER_UNPROVISIONED = 63007
TWILIO_UNVERIFIED_DESTINATION = 21608

"""
Twilio Programmable Messaging client for the chat (WhatsApp) and text
(SMS) channels. Talks to the REST API directly over httpx.
"""

import httpx

from app.config import settings
from app.features.expiry_notifications.services.channels.errors import TwilioError
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)

TWILIO_API_BASE_URL = "https://api.twilio.com/2010-04-01"
REQUEST_TIMEOUT = 15  # seconds


class TwilioMessagingClient:
    """
    Creates messages through the Twilio Messages resource.

    A fresh AsyncClient is opened per request so concurrent sends for
    different users share no connection state.
    """

    def __init__(
        self,
        account_sid: str | None,
        auth_token: str | None,
        base_url: str = TWILIO_API_BASE_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.base_url = base_url.rstrip("/")
        self._transport = transport

    @classmethod
    def from_settings(cls) -> "TwilioMessagingClient":
        return cls(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)

    @property
    def is_configured(self) -> bool:
        return bool(self.account_sid and self.auth_token)

    async def create_message(self, from_: str, to: str, body: str) -> str:
        """
        Send one message.

        Returns:
            str: Twilio message SID

        Raises:
            TwilioError: If credentials are missing, the request fails, or Twilio rejects it
        """
        if not self.is_configured:
            raise TwilioError("Twilio credentials are not configured")

        url = f"{self.base_url}/Accounts/{self.account_sid}/Messages.json"
        data = {"From": from_, "To": to, "Body": body}

        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(REQUEST_TIMEOUT), transport=self._transport
            ) as client:
                response = await client.post(url, data=data, auth=(self.account_sid, self.auth_token))
        except httpx.RequestError as e:
            raise TwilioError(f"Twilio request failed: {e}") from e

        return self._handle_response(response)

    def _handle_response(self, response: httpx.Response) -> str:
        if response.is_success:
            try:
                payload = response.json()
            except ValueError as e:
                raise TwilioError(f"Invalid Twilio response format: {e}") from e
            return payload.get("sid", "")

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            raise TwilioError(
                f"Twilio API error (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from None

        raise TwilioError(
            error_data.get("message", "Unknown Twilio API error"),
            error_code=error_data.get("code"),
            status_code=response.status_code,
            response_data=error_data,
        )

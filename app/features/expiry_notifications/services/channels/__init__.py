"""
Outbound channel senders and the transports behind them.
"""

from .base import ChannelSender
from .chat_sender import ChatSender
from .email_sender import EmailSender
from .errors import EmailTransportError, TransportError, TwilioError
from .smtp_transport import SmtpEmailTransport
from .text_sender import TextSender
from .twilio_client import TwilioMessagingClient

__all__ = [
    "ChannelSender",
    "ChatSender",
    "EmailSender",
    "EmailTransportError",
    "SmtpEmailTransport",
    "TextSender",
    "TransportError",
    "TwilioError",
    "TwilioMessagingClient",
]

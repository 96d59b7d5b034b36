"""
Engine configuration threaded into the run coordinator at construction.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

# Fixed notification horizon, not externally configurable.
HORIZON_DAYS = 7


@dataclass(slots=True, frozen=True)
class ExpiryNotificationConfig:
    timezone: str = "Asia/Colombo"
    country_code: str = "+94"
    trunk_prefix: str = "0"
    email_from: str = '"Homestock App" <notifications@homestock.app>'
    whatsapp_from: str = "whatsapp:+14155238886"
    sms_from: str | None = None
    horizon_days: int = HORIZON_DAYS
    channel_timeout_seconds: float = 30.0
    claim_lease_seconds: int = 300

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def today(self, now: datetime | None = None) -> date:
        """Calendar day of `now` in the configured timezone."""
        if now is None:
            return datetime.now(self.tz).date()
        if now.tzinfo is None:
            return now.date()
        return now.astimezone(self.tz).date()

    def window_end(self, now: datetime | None = None) -> date:
        """Last calendar day inside the notification window (inclusive)."""
        return self.today(now) + timedelta(days=self.horizon_days)

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_PATH = Path(__file__).resolve().parent.parent / ".env.local"

# Twilio WhatsApp sandbox number, used when no sender is provisioned.
DEFAULT_WHATSAPP_SANDBOX_FROM = "+14155238886"
DEFAULT_EMAIL_FROM = '"Homestock App" <notifications@homestock.app>'


class Settings(BaseSettings):
    # Environment settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # Database settings
    DATABASE_URL: str = "postgresql://localhost:5432/homestock"

    # Auth settings (manual trigger endpoint)
    AUTH_JWKS_URL: str = "http://localhost:8000/.well-known/jwks.json"
    AUTH_AUDIENCE: str = "authenticated"

    # Email (SMTP) settings
    EMAIL_SMTP_HOST: str = "smtp.ethereal.email"
    EMAIL_SMTP_PORT: int = 587
    EMAIL_USE_TLS: bool = True
    EMAIL_USERNAME: str | None = None
    EMAIL_PASSWORD: str | None = None
    EMAIL_FROM: str | None = None

    # Twilio settings (chat + text channels)
    TWILIO_ACCOUNT_SID: str | None = None
    TWILIO_AUTH_TOKEN: str | None = None
    TWILIO_WHATSAPP_FROM: str | None = None
    TWILIO_PHONE_NUMBER: str | None = None

    # =================================================================
    # EXPIRY NOTIFICATION SETTINGS
    # =================================================================
    PHONE_COUNTRY_CODE: str = "+94"
    EXPIRY_TIMEZONE: str = "Asia/Colombo"
    EXPIRY_CHECK_HOUR: int = 0  # midnight, local to EXPIRY_TIMEZONE
    EXPIRY_SCHEDULER_ENABLED: bool = True
    CHANNEL_SEND_TIMEOUT_SECONDS: float = 30.0
    EXPIRY_CLAIM_LEASE_SECONDS: int = 300

    # =================================================================
    # DATABASE POOL SETTINGS
    # =================================================================
    DB_POOL_MIN_SIZE: int = 2
    DB_POOL_MAX_SIZE: int = 10
    DB_POOL_TIMEOUT: float = 30.0
    DB_POOL_MAX_IDLE: float = 600.0  # 10 minutes
    DB_POOL_MAX_LIFETIME: float = 3600.0  # 1 hour

    model_config = SettingsConfigDict(
        env_file=str(ENV_PATH),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def email_from(self) -> str:
        """Email sender identity with fallback."""
        return self.EMAIL_FROM or self.EMAIL_USERNAME or DEFAULT_EMAIL_FROM

    def whatsapp_from(self) -> str:
        """
        WhatsApp sender address, always carrying the channel prefix, e.g.
        +14155238886 -> whatsapp:+14155238886
        """
        raw = self.TWILIO_WHATSAPP_FROM or DEFAULT_WHATSAPP_SANDBOX_FROM
        return raw if raw.startswith("whatsapp:") else f"whatsapp:{raw}"

    def get_db_pool_config(self) -> dict:
        """
        Get database pool configuration.
        Adjust environment-specific settings based on self.environment.
        """
        config = {
            "min_size": self.DB_POOL_MIN_SIZE,
            "max_size": self.DB_POOL_MAX_SIZE,
            "timeout": self.DB_POOL_TIMEOUT,
            "max_idle": self.DB_POOL_MAX_IDLE,
            "max_lifetime": self.DB_POOL_MAX_LIFETIME,
        }

        if self.environment == "development":
            config.update(
                {
                    "min_size": 1,
                    "max_size": 5,
                    "timeout": 15.0,
                }
            )

        return config

    def get_expiry_notification_config(self):
        """Build the engine configuration threaded into the run coordinator."""
        from app.features.expiry_notifications.domain.config import ExpiryNotificationConfig

        return ExpiryNotificationConfig(
            timezone=self.EXPIRY_TIMEZONE,
            country_code=self.PHONE_COUNTRY_CODE,
            email_from=self.email_from(),
            whatsapp_from=self.whatsapp_from(),
            sms_from=self.TWILIO_PHONE_NUMBER,
            channel_timeout_seconds=self.CHANNEL_SEND_TIMEOUT_SECONDS,
            claim_lease_seconds=self.EXPIRY_CLAIM_LEASE_SECONDS,
        )


settings = Settings()

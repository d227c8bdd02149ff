from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    log_level: str = "info"

    base_url: str = "http://localhost:8000"
    redis_url: str = "redis://redis:6379/0"

    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None
    stripe_api_version: str = "2024-06-20"
    stripe_signature_tolerance_seconds: int = 300
    # local testing only, ignored when app_env is prod
    allow_unsigned_webhooks: bool = False

    TELEGRAM_BOT_TOKEN: str | None = None
    TELEGRAM_CHAT_ID: str | None = None

    SLACK_BOT_TOKEN: str | None = None
    SLACK_CHANNEL_ID: str | None = None

    GOOGLE_SHEETS_DOC_ID: str | None = None
    GOOGLE_SERVICE_EMAIL: str | None = None
    GOOGLE_SERVICE_PRIVATE_KEY: str | None = None
    google_sheets_tab: str = "payments"

    notifications_disabled: bool = False
    http_timeout_seconds: float = 10.0

    # rate limiting (redis)
    rate_limit_enabled: bool = True
    # only behind a proxy that overwrites x-forwarded-for
    trust_proxy_headers: bool = False
    forwarded_allow_ips: str = "127.0.0.1"
    rate_limit_webhooks_per_min: int = 120
    rate_limit_checkout_per_min: int = 30

    # keys pasted into env files usually carry literal "\n"
    @field_validator("GOOGLE_SERVICE_PRIVATE_KEY")
    @classmethod
    def _unescape_newlines(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return v.replace("\\n", "\n")

    @property
    def telegram_configured(self) -> bool:
        return bool(self.TELEGRAM_BOT_TOKEN and self.TELEGRAM_CHAT_ID)

    @property
    def slack_configured(self) -> bool:
        return bool(self.SLACK_BOT_TOKEN and self.SLACK_CHANNEL_ID)

    @property
    def sheets_configured(self) -> bool:
        return bool(
            self.GOOGLE_SHEETS_DOC_ID
            and self.GOOGLE_SERVICE_EMAIL
            and self.GOOGLE_SERVICE_PRIVATE_KEY
        )

settings = Settings()

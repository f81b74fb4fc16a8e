import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="CLINICDESK_", extra="ignore")

    db_url: str = "sqlite:///clinicdesk.db"

    log_level: str = "INFO"
    log_json: bool = False

    timezone: str = "Asia/Kolkata"
    currency: str = "INR"
    currency_symbol: str = "₹"

    default_tax_rate: int = 18  # GST
    invoice_due_days: int = 7
    invoice_number_prefix: str = "INV"

    webhook_secret: str = ""

    def webhook_enabled(self) -> bool:
        if not self.webhook_secret:
            logger.warning(
                "CLINICDESK_WEBHOOK_SECRET is not set — payment webhooks will be rejected. "
                "Set CLINICDESK_WEBHOOK_SECRET in your environment or .env file."
            )
            return False
        return True


settings = Settings()

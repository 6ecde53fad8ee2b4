import logging

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SETTLEMENT_", extra="ignore")

    db_url: str = "sqlite:///settlement.db"

    reference_currency: str = "CNY"

    log_level: str = "INFO"
    log_json: bool = False

    default_created_by: str = "system (batch)"


settings = Settings()

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    app_name: str = "DataboxIntegration"
    app_version: str = "0.1.0"
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    # Upstream credentials; left unset rather than defaulted
    weatherstack_api_key: Optional[str] = None
    marketstack_api_key: Optional[str] = None

    # Databox ingestion
    databox_api_key: Optional[str] = None
    databox_weather_dataset_id: Optional[str] = None
    databox_market_dataset_id: Optional[str] = None

    weatherstack_base_url: str = "http://api.weatherstack.com"
    marketstack_base_url: str = "http://api.marketstack.com"
    databox_base_url: str = "https://api.databox.com"
    http_timeout_seconds: float = 30.0

    audit_log_path: str = "integration.log"

    # .env support and prefix for clarity, e.g. APP_DATABOX_API_KEY
    model_config = SettingsConfigDict(
        env_prefix="APP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Backend API
    api_url: str = "https://api.elbuenmenu.site/api"
    admin_token: Optional[str] = None
    admin_store_id: Optional[str] = None
    request_timeout_seconds: float = 30.0

    # WhatsApp bot
    bot_webhook_url: str = "http://localhost:3001"
    bot_api_key: Optional[str] = None

    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"
    log_file: Optional[str] = None
    data_backend: Literal["http", "local"] = "http"

    # Data paths
    data_dir: str = "sample_data"
    payment_config_file: str = ".elbuenmenu/payment_config.json"

    # Polling intervals (seconds)
    orders_poll_seconds: int = 10
    realtime_poll_seconds: int = 5
    sales_poll_seconds: int = 30
    system_qr_poll_seconds: int = 5

    # Store
    pickup_address: str = "Av. RIVADAVIA 2911"
    store_timezone: str = "America/Argentina/Buenos_Aires"
    public_site: str = "www.elbuenmenu.site"

    # UI settings
    default_top_n: int = 5
    top_product_name_length: int = 20
    system_log_lines: int = 100

    # Seed data settings
    default_seed_scale: str = "small"
    default_seed_days: int = 14
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config


def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)

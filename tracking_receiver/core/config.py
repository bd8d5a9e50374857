from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Order Tracking Receiver"
    debug: bool = False

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Database
    database_url: str = "sqlite+aiosqlite:///./tracking_receiver.db"
    create_tables_on_startup: bool = True

    # Webhook authentication
    api_key_header: str = "X-API-Key"
    api_key_param: str = "api_key"
    api_key_length: int = Field(default=24, ge=24)

    # Listing
    list_page_size: int = Field(default=20, ge=1, le=100)


@lru_cache
def get_settings() -> Settings:
    return Settings()

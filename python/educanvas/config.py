"""
Configuration for EduCanvas Live.

Settings are read from the environment and an optional ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADMIN_SECRET = "teach123"
DEFAULT_MAX_MESSAGE_SIZE = 64 * 1024  # 64KB max frame size
DEFAULT_KEEPALIVE_INTERVAL = 60.0  # seconds


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    admin_secret: str = Field(default=DEFAULT_ADMIN_SECRET, min_length=1, alias="ADMIN_SECRET")

    bind_host: str = Field(default="127.0.0.1", alias="BIND_HOST")
    bind_port: int = Field(default=5000, alias="BIND_PORT")
    ws_path: str = Field(default="/ws", alias="WS_PATH")
    cors_allow_origins: list[str] = Field(default=["http://localhost:3000"], alias="CORS_ALLOW_ORIGINS")

    max_message_size: int = Field(default=DEFAULT_MAX_MESSAGE_SIZE, gt=0, alias="MAX_MESSAGE_SIZE")
    keepalive_interval: float = Field(default=DEFAULT_KEEPALIVE_INTERVAL, gt=0, alias="KEEPALIVE_INTERVAL")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]

# app/core/config.py
import secrets
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MB = 1024 * 1024
GB = 1024 * MB


class Settings(BaseSettings):
    # storage
    storage_dir: Path = Path("./uploads")
    max_file_size: int = Field(default=16384 * MB, gt=0)       # per uploaded file
    max_file_count: int = Field(default=10, gt=0)              # per upload request
    max_storage_size: int = Field(default=1024 * GB, gt=0)     # soft quota, display only
    preview_max_bytes: int = Field(default=10240, gt=0)

    # reported when the disk probe fails
    disk_fallback_free_bytes: int = Field(default=250 * GB, ge=0)
    disk_fallback_total_bytes: int = Field(default=500 * GB, ge=0)

    # auth
    admin_username: str = "admin"
    admin_password: str = "admin"
    admin_password_hash: str = ""  # werkzeug hash, wins over admin_password
    secret_key: str = Field(default_factory=lambda: secrets.token_hex(32))
    session_cookie: str = "filecrate_session"

    # server
    debug: bool = False
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "INFO"

    # Tell pydantic-settings to load from .env at project root
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",  # ignore any extra stuff in .env
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()

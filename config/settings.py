from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

BASE_DIR = Path(__file__).resolve().parents[1]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=BASE_DIR / ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(default="sqlite://:memory:", validation_alias="DATABASE_URL")

    # outbound avatar fetch bounds
    avatar_fetch_timeout: float = Field(default=10.0, gt=0, validation_alias="AVATAR_FETCH_TIMEOUT")
    avatar_max_bytes: int = Field(default=5 * 1024 * 1024, gt=0, validation_alias="AVATAR_MAX_BYTES")

    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: Literal["console", "json"] = Field(default="console", validation_alias="LOG_FORMAT")

    host: str = Field(default="0.0.0.0", validation_alias="HOST")
    port: int = Field(default=3000, validation_alias="PORT")


settings = Settings()

DATABASE_URL = settings.database_url
AVATAR_FETCH_TIMEOUT = settings.avatar_fetch_timeout
AVATAR_MAX_BYTES = settings.avatar_max_bytes
LOG_LEVEL = settings.log_level
LOG_FORMAT = settings.log_format
HOST = settings.host
PORT = settings.port

FRONTPAGE_LOCATION = "/home"
DATA_LOCATION = "/data"

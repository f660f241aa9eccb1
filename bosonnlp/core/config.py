# File: bosonnlp/core/config.py
import logging
from typing import Optional
from pydantic import Field, field_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache

DEFAULT_BOSONNLP_URL = "https://api.bosonnlp.com"

class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_prefix='BOSONNLP_',
        case_sensitive=False,
        env_file_encoding='utf-8',
        extra='ignore'
    )

    PROJECT_NAME: str = "bosonnlp-py"
    LOG_LEVEL: str = "INFO"

    # --- BosonNLP HTTP API ---
    API_TOKEN: Optional[SecretStr] = Field(default=None, description="API token sent as the X-Token header.")
    API_URL: str = Field(default=DEFAULT_BOSONNLP_URL, min_length=8, description="Base URL of the BosonNLP HTTP API.")
    TIMEOUT_SECONDS: float = Field(default=30.0, gt=0, description="Timeout per request (seconds).")
    COMPRESS: bool = Field(default=True, description="Gzip request bodies larger than 10K.")

    # --- Cluster / comments tasks ---
    TASK_TIMEOUT_SECONDS: float = Field(default=30 * 60, gt=0, description="Default wait for cluster tasks (seconds).")
    TASK_PUSH_BATCH_SIZE: int = Field(default=100, ge=1, le=100, description="Documents per push request.")

    @field_validator('LOG_LEVEL')
    @classmethod
    def check_log_level(cls, v: str) -> str:
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid LOG_LEVEL '{v}'. Must be one of {valid_levels}")
        return v.upper()

    @field_validator('API_URL')
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip('/')


@lru_cache()
def get_settings() -> Settings:
    temp_log = logging.getLogger("bosonnlp.config.loader")
    settings_instance = Settings()
    temp_log.debug(
        "BosonNLP settings loaded: API_URL=%s TIMEOUT_SECONDS=%s COMPRESS=%s token_configured=%s",
        settings_instance.API_URL,
        settings_instance.TIMEOUT_SECONDS,
        settings_instance.COMPRESS,
        settings_instance.API_TOKEN is not None,
    )
    return settings_instance

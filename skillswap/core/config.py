import os
from functools import lru_cache

from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator


class Settings(BaseModel):
    """
    Runtime configuration, read from SKILLSWAP_* environment variables
    (a local .env file is honoured).
    """

    database_url: str = Field(default="sqlite+aiosqlite:///./skillswap.db", description="Async SQLAlchemy URL")
    echo_sql: bool = Field(default=False, description="Echo SQL statements to the log")
    log_level: str = Field(default="INFO", description="Root log level")
    default_page_size: int = Field(default=20, ge=1)
    max_page_size: int = Field(default=100, ge=1)
    recent_days: int = Field(default=30, ge=1, description="Window for 'recent registrations'")

    @model_validator(mode="after")
    def _check_page_sizes(self) -> "Settings":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        raw = {
            "database_url": os.getenv("SKILLSWAP_DATABASE_URL"),
            "echo_sql": os.getenv("SKILLSWAP_ECHO_SQL"),
            "log_level": os.getenv("SKILLSWAP_LOG_LEVEL"),
            "default_page_size": os.getenv("SKILLSWAP_DEFAULT_PAGE_SIZE"),
            "max_page_size": os.getenv("SKILLSWAP_MAX_PAGE_SIZE"),
            "recent_days": os.getenv("SKILLSWAP_RECENT_DAYS"),
        }
        return cls.model_validate({key: value for key, value in raw.items() if value is not None})


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()

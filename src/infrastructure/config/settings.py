from pathlib import Path
from dotenv import load_dotenv

ENV_PATH = Path(__file__).resolve().parents[3] / ".env"  # noqa: E402
load_dotenv(dotenv_path=ENV_PATH)  # noqa: E402

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator
from typing import List, Optional, Literal
from enum import Enum
import logging

from src.infrastructure.scheduler.cron_expression_enum import CronSchedule


logger = logging.getLogger(__name__)

SUPPORTED_DB_PREFIXES = (
    "postgresql://",
    "postgresql+asyncpg://",
    "postgresql+psycopg://",
    "sqlite+aiosqlite://",
)


class Environment(str, Enum):
    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    PRODUCTION = "production"


class Settings(BaseSettings):
    # ============= DATABASE =============
    db_url: str = Field(
        ...,
        description="PostgreSQL (or SQLite for development) connection URL"
    )
    db_pool_size: int = Field(
        default=5,
        ge=1,
        le=50
    )
    db_max_overflow: int = Field(
        default=10,
        ge=0,
        le=100
    )
    db_pool_timeout: int = Field(
        default=30,
        ge=1
    )
    db_pool_recycle: int = Field(
        default=3600,
        description="Recycle connections after N seconds"
    )
    db_echo: bool = Field(
        default=False,
        description="Log all SQL statements"
    )

    # ============= APPLICATION =============
    app_name: str = Field(default="Virtual Trading Ledger")
    app_version: str = Field(default="1.0.0")
    environment: Environment = Field(default=Environment.DEVELOPMENT)
    debug: bool = Field(default=False)

    # ============= LEDGER =============
    initial_balance: float = Field(
        default=100_000.0,
        gt=0,
        description="Virtual cash credited to every new portfolio"
    )

    # ============= MARKET DATA =============
    quote_timeout_seconds: float = Field(
        default=10.0,
        gt=0,
        description="Upper bound for a single quote lookup"
    )
    quote_cache_ttl_seconds: float = Field(
        default=60.0,
        ge=0,
        description="How long a fetched quote is served from cache (0 disables)"
    )
    quote_refresh_schedule: str = Field(
        default="EVERY_5_MINUTES",
        description="CronSchedule name for the quote refresh job"
    )

    # ============= LOGGING =============
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO"
    )
    log_format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    # ============= CORS =============
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:8000"
    )
    cors_allow_credentials: bool = Field(default=True)
    cors_allow_methods: List[str] = Field(default=["*"])
    cors_allow_headers: List[str] = Field(default=["*"])

    # ============= SCHEDULER  =============
    scheduler_enabled: bool = Field(default=True)
    scheduler_timezone: str = Field(default="UTC")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        validate_default=True,
        env_prefix="",
    )

    # ============= COMPUTED PROPERTIES =============
    @property
    def database_url(self) -> str:
        return self.db_url

    @property
    def async_database_url(self) -> str:
        if self.db_url.startswith("postgresql://"):
            return self.db_url.replace("postgresql://", "postgresql+asyncpg://")
        elif self.db_url.startswith("postgresql+psycopg://"):
            return self.db_url.replace("postgresql+psycopg://", "postgresql+asyncpg://")
        return self.db_url

    @property
    def cors_origin_list(self) -> List[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    @property
    def quote_refresh_cron(self) -> str:
        return CronSchedule.from_name(self.quote_refresh_schedule)

    # ============= VALIDATORS =============
    @field_validator("db_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v:
            raise ValueError("Database URL cannot be empty")
        if not v.startswith(SUPPORTED_DB_PREFIXES):
            raise ValueError(
                "Database URL must be a PostgreSQL or sqlite+aiosqlite URL")
        return v

    @field_validator("quote_refresh_schedule")
    @classmethod
    def validate_refresh_schedule(cls, v: str) -> str:
        # raises ValueError listing the valid names
        CronSchedule.from_name(v)
        return v

    def get_logging_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": self.log_format
                }
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "level": self.log_level,
                }
            },
            "root": {
                "level": self.log_level,
                "handlers": ["console"]
            },
            "loggers": {
                "uvicorn": {
                    "level": self.log_level,
                    "handlers": ["console"],
                    "propagate": False
                },
                "sqlalchemy": {
                    "level": "WARNING" if not self.db_echo else "INFO",
                    "handlers": ["console"],
                    "propagate": False
                },
                "sqlalchemy.engine": {
                    "level": "INFO" if self.db_echo else "WARNING",
                    "handlers": ["console"],
                    "propagate": False
                },
                "yfinance": {
                    "level": "WARNING",
                    "handlers": ["console"],
                    "propagate": False
                },
            }
        }


settings = Settings()

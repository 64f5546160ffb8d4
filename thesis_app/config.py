"""Application configuration with comprehensive validation."""
from typing import Optional, Literal
from functools import lru_cache
from pydantic import Field, field_validator, model_validator, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with production-grade validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Thesis Defense Platform"
    APP_VERSION: str = "1.0.0"
    APP_ENV: Literal["development", "staging", "production"] = "development"
    DEBUG: bool = False
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    LOG_FORMAT: Literal["json", "console"] = "json"
    SECRET_KEY: SecretStr

    # API
    API_V1_PREFIX: str = "/api/v1"
    DEFAULT_PAGE_LIMIT: int = Field(default=50, ge=1, le=200)
    MAX_PAGE_LIMIT: int = Field(default=200, ge=1, le=1000)

    # Snowflake
    SNOWFLAKE_ACCOUNT: str
    SNOWFLAKE_USER: str
    SNOWFLAKE_PASSWORD: SecretStr
    SNOWFLAKE_DATABASE: str
    SNOWFLAKE_SCHEMA: str
    SNOWFLAKE_WAREHOUSE: str
    SNOWFLAKE_ROLE: Optional[str] = None

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_RUBRICS: int = 3600   # 1 hour
    CACHE_TTL_RANKINGS: int = 120   # 2 minutes

    # Rankings
    RANKING_SCAN_LIMIT: int = Field(default=50_000, ge=1)

    # Reports
    REPORT_DEFAULT_DAYS: int = Field(default=30, ge=1, le=365)
    REPORT_TOP_N: int = Field(default=10, ge=1, le=100)

    # Dashboard
    DASHBOARD_API_URL: str = "http://localhost:8000"
    DASHBOARD_REQUEST_TIMEOUT: float = Field(default=15.0, gt=0, le=120)

    @field_validator("REDIS_URL")
    @classmethod
    def validate_redis_url(cls, v: str) -> str:
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("REDIS_URL must use redis://, rediss:// or unix://")
        return v

    @model_validator(mode="after")
    def validate_page_limits(self):
        """Default page size cannot exceed the hard maximum."""
        if self.DEFAULT_PAGE_LIMIT > self.MAX_PAGE_LIMIT:
            raise ValueError(
                f"DEFAULT_PAGE_LIMIT ({self.DEFAULT_PAGE_LIMIT}) exceeds MAX_PAGE_LIMIT ({self.MAX_PAGE_LIMIT})"
            )
        return self

    @model_validator(mode="after")
    def validate_production_settings(self):
        """Ensure production has required security settings."""
        if self.APP_ENV == "production":
            if self.DEBUG:
                raise ValueError("DEBUG must be False in production")
            if len(self.SECRET_KEY.get_secret_value()) < 32:
                raise ValueError("SECRET_KEY must be ≥32 characters in production")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()

settings = get_settings()

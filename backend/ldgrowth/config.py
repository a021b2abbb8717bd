# backend/ldgrowth/config.py
from typing import List, Optional, Union

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .enums import LogLevel
from .utils.time_utils import validate_timezone


class Settings(BaseSettings):
    environment: str = "development"
    # Database
    database_url: str = Field(..., description="PostgreSQL connection string")
    db_pool_size: int = Field(
        default=10,
        ge=2,
        le=100,
        description="Database connection pool size",
    )
    db_max_overflow: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Maximum overflow connections",
    )
    db_pool_timeout: int = Field(
        default=30,
        ge=5,
        le=300,
        description="Database connection timeout in seconds",
    )

    # API
    api_host: str = Field(default="0.0.0.0", description="API host to bind to")
    api_port: int = Field(
        default=8000, ge=1, le=65535, description="API port to bind to"
    )
    api_reload: bool = Field(
        default=False, description="Enable auto-reload for development"
    )

    # CORS - use Union to handle both string and list inputs
    # Can be set via CORS_ORIGINS env var as comma-separated string
    cors_origins: Union[str, List[str]] = Field(
        default=["http://localhost:3000"],
        description="Allowed CORS origins. Can be comma-separated string.",
    )

    @property
    def cors_origins_list(self) -> List[str]:
        """Convert cors_origins to a list of strings"""
        if isinstance(self.cors_origins, str):
            return [origin.strip() for origin in self.cors_origins.split(",")]
        return self.cors_origins

    # Used to build links in outgoing emails
    app_url: str = Field(
        default="http://localhost:3000",
        description="Public URL of the web application",
    )

    # Store defaults
    default_store_timezone: str = Field(
        default="America/New_York",
        description="IANA timezone used when a store has none configured",
    )
    business_hours_start: int = Field(
        default=9, ge=0, le=23, description="Default business day start hour"
    )
    business_hours_end: int = Field(
        default=17, ge=1, le=23, description="Default business day end hour"
    )

    # Scheduling worker
    scheduling_cron_hour: int = Field(
        default=0, ge=0, le=23, description="Hour of the daily scheduling run"
    )
    scheduling_cron_minute: int = Field(
        default=0, ge=0, le=59, description="Minute of the daily scheduling run"
    )
    reminder_interval_hours: int = Field(
        default=4, ge=1, le=24, description="Hours between reminder passes"
    )

    # Retry policy for persistence and email calls
    retry_max_attempts: int = Field(
        default=3, ge=1, le=10, description="Attempts before an operation fails"
    )
    retry_delay_seconds: float = Field(
        default=1.0,
        ge=0.0,
        le=60.0,
        description="Base delay, multiplied by the attempt number",
    )

    # Email (disabled when smtp_host is empty)
    smtp_host: str = Field(default="", description="SMTP server host")
    smtp_port: int = Field(default=587, ge=1, le=65535, description="SMTP port")
    smtp_username: str = Field(default="", description="SMTP username")
    smtp_password: str = Field(default="", description="SMTP password")
    smtp_use_tls: bool = Field(default=True, description="Use STARTTLS")
    smtp_from_email: str = Field(
        default="noreply@ldgrowth.local", description="Sender address"
    )

    @property
    def email_enabled(self) -> bool:
        return bool(self.smtp_host)

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    log_file: Optional[str] = Field(
        default=None, description="Log file path (optional)"
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v) -> LogLevel:
        """Validate log level is one of the allowed values"""
        if isinstance(v, LogLevel):
            return v
        allowed_levels = LogLevel.__members__.keys()
        v_upper = str(v).upper()
        if v_upper not in allowed_levels:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed_levels)}"
            )
        return LogLevel[v_upper]

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is one of the allowed values"""
        allowed_envs = ["development", "staging", "production"]
        v_lower = v.lower()
        if v_lower not in allowed_envs:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {', '.join(allowed_envs)}"
            )
        return v_lower

    @field_validator("default_store_timezone")
    @classmethod
    def validate_default_store_timezone(cls, v: str) -> str:
        """Validate the default timezone is a known IANA zone"""
        if not validate_timezone(v):
            raise ValueError(f"Invalid timezone '{v}'")
        return v

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )


# Global settings instance
settings = Settings()  # type: ignore[call-arg]

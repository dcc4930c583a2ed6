"""
Application configuration with Pydantic Settings for validation and type safety.
Supports environment-specific configurations and .env file loading.
"""

from enum import Enum
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Environment(str, Enum):
    """Application environment types"""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Settings(BaseSettings):
    """
    Application settings with validation.
    Settings are loaded from environment variables or .env file.
    """

    # Application settings
    app_name: str = Field(default="MealTracker", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: Environment = Field(
        default=Environment.DEVELOPMENT, description="Application environment"
    )
    debug: bool = Field(default=False, description="Debug mode")

    # Server settings
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, ge=1, le=65535, description="Server port")

    # Database settings
    database_url: str = Field(
        default="postgresql+psycopg2://user@localhost:5432/mealtracker",
        description="SQLAlchemy connection URL (PostgreSQL or SQLite)",
    )
    db_echo: bool = Field(default=False, description="SQLAlchemy echo SQL statements")
    db_init_attempts: int = Field(
        default=8, ge=1, description="Database initialization retry attempts"
    )
    db_init_delay_sec: float = Field(
        default=2.0, ge=0, description="Delay between DB init attempts"
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(
        default="%(asctime)s %(levelname)s %(name)s: %(message)s",
        description="Log format string",
    )

    # CORS settings
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=True, description="Allow CORS credentials"
    )
    cors_allow_methods: list[str] = Field(
        default=["*"], description="Allowed HTTP methods"
    )
    cors_allow_headers: list[str] = Field(
        default=["*"], description="Allowed HTTP headers"
    )

    # API settings
    api_prefix: str = Field(default="", description="API route prefix")
    api_title: str = Field(
        default="MealTracker API", description="API documentation title"
    )
    api_description: str = Field(
        default="Track the dishes you cook, where they come from and how often",
        description="API documentation description",
    )
    user_id_header: str = Field(
        default="X-User-Id",
        description="Header carrying the authenticated user's UUID",
    )

    # Retry defaults (seconds)
    retry_max_retries: int = Field(default=3, ge=0, description="Retries for transient errors")
    retry_initial_delay_sec: float = Field(
        default=1.0, ge=0, description="Initial retry backoff delay"
    )
    retry_max_delay_sec: float = Field(
        default=10.0, ge=0, description="Upper bound for retry backoff delay"
    )
    retry_backoff_multiplier: float = Field(
        default=2.0, ge=1, description="Backoff multiplier between attempts"
    )

    # Import / export
    import_batch_size: int = Field(
        default=50, ge=1, description="Records written per import batch"
    )
    export_page_size: int = Field(
        default=1000, ge=1, description="Rows fetched per export page"
    )
    export_version: str = Field(default="1.0", description="Export file format version")

    # Suggestions
    suggestions_per_category: int = Field(
        default=3, ge=1, description="Dishes returned per suggestion category"
    )
    weekly_menu_size: int = Field(
        default=7, ge=1, description="Dishes picked for a weekly menu"
    )

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v):
        """Validate and normalize environment value"""
        if isinstance(v, str):
            return Environment(v.lower())
        return v

    def is_production(self) -> bool:
        """Check if running in production environment"""
        return self.environment == Environment.PRODUCTION

    def is_development(self) -> bool:
        """Check if running in development environment"""
        return self.environment == Environment.DEVELOPMENT


# Global settings instance
settings = Settings()

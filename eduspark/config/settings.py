from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings - only define what needs validation."""

    # Critical configs that need validation/type conversion
    DATABASE_URL: str = "sqlite+aiosqlite:///./local.db"
    DEBUG: bool = False
    API_HOST: str = "127.0.0.1"
    API_PORT: int = 8080
    ENVIRONMENT: str = "development"  # "development", "production", "test"
    CORS_ORIGINS: list[str] = ["http://localhost:3000", "http://127.0.0.1:3000"]

    # Session cookie
    SECRET_KEY: str = "fallback-secret-key-for-development"  # noqa: S105
    SESSION_COOKIE_NAME: str = "session"
    SESSION_TTL_HOURS: int = 24

    # Input policy
    PASSWORD_MIN_LENGTH: int = 8
    SUBMISSION_MIN_LENGTH: int = 10
    COMMENT_MIN_LENGTH: int = 3

    RATE_LIMIT_ENABLED: bool = True

    # Upper bound for the "continue learning" recommendation, in seconds
    AI_RECOMMENDATION_TIMEOUT: float = 10.0

    # AI Configuration
    @property
    def primary_llm_model(self) -> str:
        """Get primary LLM model from environment - required configuration."""
        import os

        model = os.getenv("PRIMARY_LLM_MODEL")
        if not model:
            msg = "PRIMARY_LLM_MODEL environment variable is required"
            raise ValueError(msg)
        return model

    @property
    def ai_request_timeout(self) -> int:
        """Get AI request timeout from environment."""
        import os

        return int(os.getenv("AI_REQUEST_TIMEOUT", "60"))

    @property
    def ai_temperature_default(self) -> float:
        """Get default temperature for AI requests."""
        import os

        return float(os.getenv("AI_TEMPERATURE_DEFAULT", "0.7"))

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"),
        env_file_encoding="utf-8",
        extra="allow",
        case_sensitive=False,
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()
    if not settings.DATABASE_URL:
        msg = "DATABASE_URL environment variable is not set"
        raise ValueError(msg)
    return settings

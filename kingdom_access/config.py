from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be configured via .env file or environment variables.
    """

    # Database
    DATABASE_URL: str
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # JWT Authentication (shared with the identity provider)
    SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"

    # Application
    APP_NAME: str = "Kingdom Access API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # CORS
    CORS_ORIGINS: str = ""
    CORS_ALLOW_CREDENTIALS: bool = True

    # Sessions
    SESSION_COOKIE_NAME: str = "kingdom_session"
    SESSION_COOKIE_SECURE: bool = False
    SESSION_TTL_SECONDS: int = 7 * 24 * 60 * 60

    # View-as contexts older than this are ignored (0 = session lifetime only)
    VIEW_AS_TTL_SECONDS: int = 24 * 60 * 60

    # Metrics
    ACTIVE_WINDOW_DAYS: int = 30
    TOP_TENANTS_LIMIT: int = 5

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS from comma-separated string"""
        if not self.CORS_ORIGINS:
            return []
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


# Global settings instance
settings = Settings()

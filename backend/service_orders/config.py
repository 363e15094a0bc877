"""Application configuration."""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings."""

    # App
    APP_NAME: str = "Service Orders"
    ENV: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    ALLOWED_ORIGINS: str = "http://localhost:3000"

    # Database
    DATABASE_URL: str
    DATABASE_POOL_SIZE: int = 20
    DATABASE_MAX_OVERFLOW: int = 10

    # Report rendering (headless browser service, Gotenberg-compatible Chromium route)
    REPORT_BASE_URL: str = "http://localhost:8000"
    RENDERER_URL: str = "http://localhost:3000"
    RENDER_TIMEOUT_SECONDS: float = 60
    # A4 in inches
    REPORT_PAPER_WIDTH: float = 8.27
    REPORT_PAPER_HEIGHT: float = 11.7
    REPORT_MARGIN: float = 0.39

    # Mail transport
    SMTP_HOST: str | None = None
    SMTP_PORT: int = 587
    SMTP_USER: str | None = None
    SMTP_PASSWORD: str | None = None
    MAIL_SENDER_NAME: str = "Serviços"

    # WhatsApp Cloud API
    WHATSAPP_PHONE_ID: str | None = None
    WHATSAPP_TOKEN: str | None = None
    WHATSAPP_API_VERSION: str = "v18.0"
    WHATSAPP_COUNTRY_CODE: str = "55"
    MESSAGING_TIMEOUT_SECONDS: float = 30

    class Config:
        env_file = ".env"
        case_sensitive = True

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins as list."""
        return [origin.strip() for origin in self.ALLOWED_ORIGINS.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENV.lower() == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

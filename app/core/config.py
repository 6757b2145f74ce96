from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # Auth
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Database
    DATABASE_URL: str = "sqlite:///./reservations.db"

    # Availability
    # Every day key, weekday lookup and "now" comparison uses this zone.
    RESERVATION_TIMEZONE: str = "Asia/Manila"
    AVAILABILITY_SCAN_CAP_DAYS: int = 90

    # Notification queue
    NOTIFICATION_MAX_CONCURRENCY: int = 10
    NOTIFICATION_RETRY_BASE_DELAY_SECONDS: float = 5.0
    NOTIFICATION_RECHECK_DELAY_SECONDS: float = 1.0

    # Mail
    MAIL_BACKEND: str = "console"  # smtp | console
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_TLS: bool = True
    SMTP_TIMEOUT_SECONDS: float = 30.0
    EMAIL_FROM: str = "noreply@example.com"
    EMAIL_FROM_NAME: str = "Reservation System"

    # Reservation sessions
    RESERVATION_SESSION_MAX_ENTRIES: int = 1000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )


settings = Settings()

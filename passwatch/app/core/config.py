# passwatch/app/core/config.py
"""
Application configuration using pydantic-settings.

Security considerations:
- No hardcoded secrets in production (SECRET_KEY must be set via env)
- CORS_ORIGINS parsed from comma-separated env var, never defaults to "*"
- Forwarded client IP headers trusted only from TRUSTED_PROXIES
- Database URLs normalized for async drivers automatically
- Email delivery disabled unless RESEND_API_KEY is configured
"""
from functools import lru_cache
from typing import List, Optional, Set

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Strictly typed application settings.

    Priority for loading:
    1. Environment variables (highest priority)
    2. .env file (via pydantic-settings)
    3. Default values (lowest priority, dev-safe only)
    """

    # ─────────────────────────────────────────────────────────────
    # Application metadata
    # ─────────────────────────────────────────────────────────────
    PROJECT_NAME: str = "PassWatch"
    API_V1_STR: str = "/api/v1"

    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # ─────────────────────────────────────────────────────────────
    # Security: JWT Configuration
    # SECRET_KEY MUST be set in production via environment variable
    # ─────────────────────────────────────────────────────────────
    SECRET_KEY: str = "INSECURE_DEV_KEY_CHANGE_IN_PRODUCTION"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # ─────────────────────────────────────────────────────────────
    # Database Configuration
    # Priority: DATABASE_URL env var → SQLite fallback for local dev
    # ─────────────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./passwatch.db"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: str) -> str:
        """
        Normalize database URLs for async SQLAlchemy compatibility.

        Conversions:
        - postgres://     → postgresql+asyncpg://
        - postgresql://   → postgresql+asyncpg://
        - sqlite:///      → sqlite+aiosqlite:///
        """
        if v is None:
            return "sqlite+aiosqlite:///./passwatch.db"

        url = v.strip()

        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)

        if url.startswith("postgresql://") and "+asyncpg" not in url:
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)

        if url.startswith("sqlite:///") and "+aiosqlite" not in url:
            return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)

        return url

    # MUST be False in production to prevent SQL query exposure
    DATABASE_ECHO: bool = False

    # ─────────────────────────────────────────────────────────────
    # CORS Configuration
    # Empty string → empty list (NOT "*" for security)
    # ─────────────────────────────────────────────────────────────
    CORS_ORIGINS: str = "http://localhost:8081,http://127.0.0.1:8081,http://localhost:19006"

    @property
    def BACKEND_CORS_ORIGINS(self) -> List[str]:
        """Parse CORS_ORIGINS string into a list of allowed origins."""
        if not self.CORS_ORIGINS or not self.CORS_ORIGINS.strip():
            return []

        return [
            origin.strip()
            for origin in self.CORS_ORIGINS.split(",")
            if origin.strip()
        ]

    # ─────────────────────────────────────────────────────────────
    # Reverse proxies
    # X-Forwarded-For / X-Real-IP are read only when the direct peer is
    # listed here. Empty → the peer address is always the client IP.
    # ─────────────────────────────────────────────────────────────
    TRUSTED_PROXIES: str = ""

    @property
    def trusted_proxies(self) -> Set[str]:
        """Parse TRUSTED_PROXIES (comma-separated addresses) into a set."""
        return {
            proxy.strip()
            for proxy in self.TRUSTED_PROXIES.split(",")
            if proxy.strip()
        }

    # ─────────────────────────────────────────────────────────────
    # Login anomaly notifications
    # Repeated alerts for the same (user, IP) are suppressed for
    # NOTIFICATION_THROTTLE_SECONDS inside a single process.
    # ─────────────────────────────────────────────────────────────
    NOTIFICATION_THROTTLE_SECONDS: float = 10.0
    NOTIFICATION_TIMEZONE: str = "America/Sao_Paulo"

    # ─────────────────────────────────────────────────────────────
    # Email (Resend)
    # ─────────────────────────────────────────────────────────────
    RESEND_API_KEY: Optional[str] = None
    MAIL_FROM: str = "PassWatch <security@passwatch.local>"

    @property
    def email_enabled(self) -> bool:
        """Check if email sending is configured."""
        return bool(self.RESEND_API_KEY and self.RESEND_API_KEY.strip())

    # ─────────────────────────────────────────────────────────────
    # Credential audit history
    # ─────────────────────────────────────────────────────────────
    AUDIT_LIST_LIMIT: int = 50
    AUDIT_REDACTION_PLACEHOLDER: str = "********"
    AUDIT_TRUE_LABEL: str = "Sim"
    AUDIT_FALSE_LABEL: str = "Não"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Extra fields in .env are ignored (prevents config injection)
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached settings instance.

    Using lru_cache ensures settings are only loaded once,
    providing consistent configuration across the application.
    """
    return Settings()


settings = get_settings()

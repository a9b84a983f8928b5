from pydantic_settings import BaseSettings
from pydantic import field_validator
from typing import List, Any
import json
import re


def parse_cors_origins(v: Any) -> List[str]:
    """Parse CORS origins from string or list"""
    if isinstance(v, list):
        return v
    if isinstance(v, str):
        # Try JSON parsing first
        if v.startswith('['):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                pass
        # Fall back to comma-separated
        return [origin.strip() for origin in v.split(',') if origin.strip()]
    return []


class Settings(BaseSettings):
    """Application settings - all configurable via environment variables"""

    # ==========================================
    # Application
    # ==========================================
    APP_NAME: str = "FAST Finder"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_PREFIX: str = "/api"

    # Server Configuration
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # ==========================================
    # Database
    # ==========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./fastfinder.db"
    DB_ECHO: bool = False

    # ==========================================
    # Sessions (JWT in an HTTP-only cookie)
    # ==========================================
    JWT_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    SESSION_EXPIRE_DAYS: int = 7
    SESSION_COOKIE_NAME: str = "auth_token"
    BCRYPT_ROUNDS: int = 10  # 4 for tests (fast), 10+ for prod

    # ==========================================
    # One-time codes
    # ==========================================
    VERIFICATION_CODE_EXPIRE_MINUTES: int = 15
    RESET_CODE_EXPIRE_MINUTES: int = 15
    RESET_TOKEN_EXPIRE_MINUTES: int = 60
    # Codes are echoed back to the caller so the flow works without mail delivery
    EXPOSE_CODES_IN_RESPONSE: bool = True

    # ==========================================
    # Email (SMTP credential pair)
    # ==========================================
    EMAIL_USER: str = ""
    EMAIL_PASS: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    EMAIL_FROM_NAME: str = "FAST Finder"
    APP_URL: str = "http://localhost:3000"

    # ==========================================
    # CORS
    # ==========================================
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://127.0.0.1:3000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        """Parse CORS origins from comma-separated string"""
        return parse_cors_origins(self.CORS_ORIGINS_STR)

    # ==========================================
    # Rate limiting
    # ==========================================
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # ==========================================
    # Logging
    # ==========================================
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = "logs/app.log"

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"  # Ignore extra fields in .env that aren't defined in Settings

    @field_validator("JWT_SECRET")
    @classmethod
    def strip_secret_whitespace(cls, v: str) -> str:
        # Long secrets are often wrapped across lines by deployment tooling
        return re.sub(r"\s+", "", v)

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"

    @property
    def COOKIE_SECURE(self) -> bool:
        return self.is_production

    @property
    def SESSION_MAX_AGE_SECONDS(self) -> int:
        return self.SESSION_EXPIRE_DAYS * 24 * 60 * 60

    @property
    def email_configured(self) -> bool:
        return bool(self.EMAIL_USER and self.EMAIL_PASS)


settings = Settings()

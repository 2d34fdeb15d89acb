import json
from typing import FrozenSet, List, Optional

from pydantic import EmailStr, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "School Management API"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    HOST: str = "0.0.0.0"
    PORT: int = 5111

    # Database Settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./school_mgmt.db"
    DATABASE_ECHO: bool = False

    # Authentication Settings
    LONG_TOKEN_SECRET: str = Field(..., min_length=8)
    SHORT_TOKEN_SECRET: str = Field(..., min_length=8)
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    TOKEN_ISSUER: str = "school_mgmt"
    BCRYPT_ROUNDS: int = Field(12, ge=4, le=31)

    # Tenant signup key, required by the public signup operation
    ADMIN_SIGNUP_KEY: str = Field(..., min_length=4)

    # Bootstrap superadmin (optional)
    SUPER_ADMIN_EMAIL: Optional[EmailStr] = None
    SUPER_ADMIN_PASSWORD: Optional[str] = None
    SUPER_ADMIN_NAME: str = "Super Admin"

    # CORS Settings, comma separated or a JSON list
    ALLOWED_ORIGINS: str = "*"

    # Rate Limiting Settings
    RATE_LIMIT_MAX_REQUESTS: int = 100
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60
    SECURITY_LIMIT_MAX_REQUESTS: int = 20
    SECURITY_LIMIT_WINDOW_SECONDS: int = 60 * 60
    RATE_LIMIT_CLEANUP_SECONDS: int = 60 * 60
    REDIS_URL: Optional[str] = None
    # Proxy addresses whose X-Forwarded-For header is believed, comma separated
    TRUSTED_PROXIES: str = ""

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = 100

    # Logging Settings
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    @property
    def allowed_origins(self) -> List[str]:
        try:
            origins = json.loads(self.ALLOWED_ORIGINS)
        except json.JSONDecodeError:
            origins = self.ALLOWED_ORIGINS.split(",")
        if isinstance(origins, str):
            origins = [origins]
        return [origin.strip() for origin in origins if origin.strip()]

    @property
    def trusted_proxies(self) -> FrozenSet[str]:
        return frozenset(proxy.strip() for proxy in self.TRUSTED_PROXIES.split(",") if proxy.strip())

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        v = v.upper()
        if v not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Invalid LOG_LEVEL: {v}")
        return v

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True
    )


settings = Settings()

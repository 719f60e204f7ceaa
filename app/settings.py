from typing import Optional

from pydantic import Field, PostgresDsn, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: PostgresDsn = Field(..., alias="DATABASE_URL")
    DEBUG: bool = Field(default=False, alias="DEBUG")
    REDIS_URL: Optional[RedisDsn] = Field(
        default=None, alias="REDIS_URL"
    )  # without it rate-limit counters stay in process memory

    # Auth Configuration
    JWT_ACCESS_SECRET: str = Field(..., alias="JWT_ACCESS_SECRET")
    JWT_REFRESH_SECRET: str = Field(..., alias="JWT_REFRESH_SECRET")
    JWT_ALGORITHM: str = Field(default="HS256", alias="JWT_ALGORITHM")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(
        default=15, alias="ACCESS_TOKEN_EXPIRE_MINUTES"
    )
    REFRESH_TOKEN_EXPIRE_DAYS: int = Field(default=7, alias="REFRESH_TOKEN_EXPIRE_DAYS")
    REFRESH_COOKIE_NAME: str = Field(default="refresh_token", alias="REFRESH_COOKIE_NAME")
    REFRESH_COOKIE_SECURE: bool = Field(default=False, alias="REFRESH_COOKIE_SECURE")
    BCRYPT_ROUNDS: int = Field(default=12, alias="BCRYPT_ROUNDS")

    # Upload Configuration
    UPLOAD_DIR: str = Field(default="uploads", alias="UPLOAD_DIR")
    MAX_UPLOAD_SIZE: int = Field(default=5 * 1024 * 1024, alias="MAX_UPLOAD_SIZE")  # 5MB
    PUBLIC_BASE_URL: Optional[str] = Field(default=None, alias="PUBLIC_BASE_URL")

    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        alias="CORS_ORIGINS",
    )

    # reCAPTCHA is disabled while no secret is configured
    RECAPTCHA_SECRET_KEY: Optional[str] = Field(default=None, alias="RECAPTCHA_SECRET_KEY")
    RECAPTCHA_VERIFY_URL: str = Field(
        default="https://www.google.com/recaptcha/api/siteverify",
        alias="RECAPTCHA_VERIFY_URL",
    )

    # Rate Limit Configuration
    RATE_LIMIT_ENABLED: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    GLOBAL_RATE_LIMIT: int = Field(default=600, alias="GLOBAL_RATE_LIMIT")
    GLOBAL_RATE_WINDOW_SECONDS: int = Field(default=300, alias="GLOBAL_RATE_WINDOW_SECONDS")
    AUTH_RATE_LIMIT: int = Field(default=60, alias="AUTH_RATE_LIMIT")
    AUTH_RATE_WINDOW_SECONDS: int = Field(default=900, alias="AUTH_RATE_WINDOW_SECONDS")
    USER_RATE_LIMIT: int = Field(default=120, alias="USER_RATE_LIMIT")
    USER_RATE_WINDOW_SECONDS: int = Field(default=60, alias="USER_RATE_WINDOW_SECONDS")

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

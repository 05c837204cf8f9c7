from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import List


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = Field(default="development")
    APP_SECRET: str = Field(default="please-change-me")
    LOG_LEVEL: str = Field(default="INFO")
    SITE_URL: str = Field(default="http://localhost:8000")
    CORS_ORIGINS: str = Field(default="http://localhost:5173")

    DATABASE_URL: str | None = Field(default=None)
    DB_HOST: str = Field(default="localhost")
    DB_PORT: int = Field(default=5432)
    DB_USER: str = Field(default="agency")
    DB_PASSWORD: str = Field(default="agency")
    DB_NAME: str = Field(default="agency")
    DB_SYNC_ECHO: bool = Field(default=False)
    DB_POOL_SIZE: int = Field(default=10)
    DB_MAX_OVERFLOW: int = Field(default=20)

    TOKEN_TTL_HOURS: int = Field(default=24)
    LOGIN_MAX_ATTEMPTS: int = Field(default=5)
    LOGIN_LOCK_MINUTES: int = Field(default=30)

    REDIS_URL: str | None = Field(default=None)

    RATE_LIMIT_ENABLED: bool = Field(default=True)
    RATE_LIMIT_AUTH: str = Field(default="5/15minutes")
    RATE_LIMIT_CONTACT: str = Field(default="5/hour")
    RATE_LIMIT_NEWSLETTER: str = Field(default="10/hour")

    API_BASE_URL: str = Field(default="http://localhost:8000/api")
    API_TIMEOUT_SECONDS: float = Field(default=15.0)
    API_RETRY_COUNT: int = Field(default=1)

    EMAIL_HOST: str | None = Field(default=None)
    EMAIL_PORT: int = Field(default=587)
    EMAIL_HOST_USER: str | None = Field(default=None)
    EMAIL_HOST_PASSWORD: str | None = Field(default=None)
    EMAIL_FROM: str = Field(default="info@example.com")
    LEAD_EMAIL: str | None = Field(default=None)

    @property
    def sync_database_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql+psycopg2://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.strip().lower() in ("prod", "production")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()

from __future__ import annotations

import os
from decimal import Decimal
from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseAppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "CorpBooks"
    ENV: str = "dev"
    DATABASE_URL: str | None = None

    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "plain"

    # Jurisdiction defaults, used only when a company carries no rate of its own
    DEFAULT_TAX_RATE: Decimal = Decimal("0.13")
    DEFAULT_SMALL_BUSINESS_RATE: Decimal = Decimal("0.125")

    # Quantum for stored per-transaction tax amounts and income tax
    MONEY_QUANTUM: str = "0.01"

    # Invoice statuses that count as realised income
    SETTLED_SALE_STATUSES: list[str] = ["paid", "settled"]

    @field_validator("DEFAULT_TAX_RATE", "DEFAULT_SMALL_BUSINESS_RATE")
    @classmethod
    def _rate_in_unit_interval(cls, v: Decimal) -> Decimal:
        if v < 0 or v > 1:
            raise ValueError("rates must lie between 0 and 1")
        return v

    @model_validator(mode="after")
    def _validate_required_fields(self) -> BaseAppSettings:
        # Convert Heroku's postgres:// URL to postgresql://
        if self.DATABASE_URL and self.DATABASE_URL.startswith("postgres://"):
            self.DATABASE_URL = self.DATABASE_URL.replace("postgres://", "postgresql://", 1)

        if self.ENV.lower() == "prod" and not self.DATABASE_URL:
            raise ValueError("Missing required production settings: DATABASE_URL")
        return self


class DevSettings(BaseAppSettings):
    ENV: str = "dev"
    DATABASE_URL: str = "sqlite:///./storage/dev.db"


class TestSettings(BaseAppSettings):
    ENV: str = "test"
    DATABASE_URL: str = "sqlite:///:memory:"


class ProdSettings(BaseAppSettings):
    ENV: str = "prod"
    LOG_FORMAT: str = "json"


_ENV_TO_SETTINGS: dict[str, type[BaseAppSettings]] = {
    "dev": DevSettings,
    "development": DevSettings,
    "test": TestSettings,
    "testing": TestSettings,
    "prod": ProdSettings,
    "production": ProdSettings,
}


@lru_cache
def get_settings() -> BaseAppSettings:
    env_name = os.getenv("APP_ENV") or os.getenv("ENV") or "dev"
    env = env_name.lower()
    settings_cls = _ENV_TO_SETTINGS.get(env, DevSettings)
    return settings_cls()


settings = get_settings()

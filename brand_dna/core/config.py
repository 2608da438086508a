from __future__ import annotations

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    ENVIRONMENT: str = "development"
    SERVICE_NAME: str = "brand-dna-service"
    SERVICE_VERSION: str = "1.0.0"
    PORT: int = 8013
    LOG_LEVEL: str = "INFO"

    # memory://, redis://host:port/db, file:///path or a plain filesystem path
    BRAND_STORAGE_URL: str = "file://./data/brand-dna.json"
    BRAND_STORAGE_KEY: str = "brand-dna-storage"
    BRAND_SCHEMA_VERSION: int = 1
    EXPORT_VERSION: str = "1.0.0"

    # None keeps the stylesheet fetch unbounded
    FONT_LOAD_TIMEOUT: Optional[float] = None
    PREVIEW_SCOPE_SELECTOR: str = ".brand-preview-scope"
    FLUSH_ON_SHUTDOWN: bool = True

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()


def get_settings() -> Settings:
    return settings

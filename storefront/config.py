"""Runtime configuration read from the environment (``STOREFRONT_*``)."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .catalog.source import DEFAULT_BASE_URL, CatalogSource, FakeStoreSource, LocalCatalogSource

SAMPLE_DATA_FILE = Path(__file__).resolve().parent / "data" / "sample_products.json"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STOREFRONT_", env_file=".env", extra="ignore")

    CATALOG_SOURCE: Literal["remote", "local"] = Field(
        default="remote", description="Fetch the catalogue over HTTP or from CATALOG_DATA_FILE."
    )
    CATALOG_BASE_URL: str = Field(
        default=DEFAULT_BASE_URL, description="Root of the Fake Store compatible API."
    )
    CATALOG_DATA_FILE: Path = Field(
        default=SAMPLE_DATA_FILE, description="JSON list of products used by the local source."
    )
    HTTP_TIMEOUT: float = Field(default=10.0, gt=0, description="Seconds per HTTP request.")
    PAGE_SIZE: int = Field(default=5, gt=0, description="Items added to the list per page.")
    LOG_LEVEL: str = Field(default="INFO", description="Root logger level.")


@lru_cache
def get_settings() -> Settings:
    return Settings()


def build_source(settings: Settings) -> CatalogSource:
    if settings.CATALOG_SOURCE == "local":
        return LocalCatalogSource(settings.CATALOG_DATA_FILE)
    return FakeStoreSource(settings.CATALOG_BASE_URL, timeout=settings.HTTP_TIMEOUT)


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

"""Configuration for the PeoplePerHour API client."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BASE_URL = "https://api.peopleperhour.com/"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PPH_", case_sensitive=False, extra="ignore")

    api_id: Optional[str] = Field(default=None)
    api_key: Optional[str] = Field(default=None)
    api_base_url: str = Field(default=DEFAULT_BASE_URL)
    api_timeout_seconds: float = Field(default=20, gt=0)
    api_verify_ssl: bool = Field(default=True)

    persist_cookies: bool = Field(default=False)
    user_agent: str = Field(default="pph-api-python/0.1")

    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()

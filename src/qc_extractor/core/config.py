"""Application settings."""

import os
from functools import lru_cache

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


ENVIRONMENTS = {"development", "production", "test"}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env"), env_file_encoding="utf-8", extra="ignore"
    )

    # App
    APP_NAME: str = "QC Data Extractor"
    ENVIRONMENT: str = "development"  # development | production | test

    # AI / LLM provider configuration
    # A missing key fails each extraction call, not startup.
    # API_KEY is the older variable name and still accepted.
    GEMINI_API_KEY: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "API_KEY"),
    )
    EXTRACTION_MODEL: str = "gemini-3-flash-preview"

    # Export
    EXPORT_FILENAME: str = "质量数据报表.xlsx"

    @field_validator("ENVIRONMENT", mode="before")
    @classmethod
    def normalize_environment(cls, v: object) -> str:
        """Lower-case the environment name and reject unknown values."""
        env = str(v).strip().lower()
        if env not in ENVIRONMENTS:
            raise ValueError(
                "ENVIRONMENT must be 'development', 'production', or 'test'"
            )
        return env

    @field_validator("EXPORT_FILENAME")
    @classmethod
    def ensure_xlsx_suffix(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("EXPORT_FILENAME must not be empty")
        if not v.lower().endswith(".xlsx"):
            v += ".xlsx"
        return v


@lru_cache
def get_settings() -> Settings:
    env = os.getenv("ENVIRONMENT", "development").lower()
    if env not in ENVIRONMENTS:
        raise ValueError("ENVIRONMENT must be 'development', 'production', or 'test'")

    if env == "production":
        env_file = ".env.prod"
    elif env == "development":
        env_file = ".env.dev"
    else:
        # test environment - no env file needed, use defaults
        env_file = ""

    # pydantic-settings accepts a runtime-only `_env_file` kwarg; mypy's stub
    # doesn't allow it, so the ignore is scoped to `call-arg`.
    return Settings(_env_file=env_file or None)  # type: ignore[call-arg]

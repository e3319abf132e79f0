"""
Configuration settings for the legacy catalog importer.

Uses Pydantic Settings to load environment variables for the database
connection, logging, and import defaults (source directory, batch size and
the code page of the legacy files).
"""
from __future__ import annotations

import codecs
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("catalog", alias="DB_NAME")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Import defaults
    import_source_dir: Path = Field(Path("Posten"), alias="IMPORT_SOURCE_DIR")
    import_batch_size: int = Field(100, alias="IMPORT_BATCH_SIZE", gt=0)
    import_source_encoding: str = Field("cp437", alias="IMPORT_SOURCE_ENCODING")
    import_results_dir: Path = Field(Path("results"), alias="IMPORT_RESULTS_DIR")

    @field_validator("import_source_encoding")
    @classmethod
    def _known_codec(cls, value: str) -> str:
        try:
            return codecs.lookup(value).name
        except LookupError as exc:
            raise ValueError(f"unknown source encoding: {value}") from exc

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]

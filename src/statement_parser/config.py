"""
Runtime settings, read from STATEMENT_PARSER_* environment variables or a
local .env file.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .models import TabularConfig


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="STATEMENT_PARSER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Python log level")
    max_file_size_mb: int = Field(default=10, description="CLI refuses larger files")

    # Generic CSV extractor
    default_currency: str = Field(default="USD", pattern=r"^[A-Z]{3}$")
    csv_delimiter: str = ","
    csv_date_column: str = "Date"
    csv_amount_column: str = "Amount"
    csv_description_column: str = "Description"
    csv_currency_column: Optional[str] = None
    csv_date_format: Optional[str] = None
    probe_bytes: int = Field(default=1024, gt=0)

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024

    def tabular_config(self) -> TabularConfig:
        return TabularConfig(
            currency=self.default_currency,
            date_format=self.csv_date_format,
            date_column=self.csv_date_column,
            amount_column=self.csv_amount_column,
            description_column=self.csv_description_column,
            currency_column=self.csv_currency_column,
            delimiter=self.csv_delimiter,
            probe_bytes=self.probe_bytes,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()

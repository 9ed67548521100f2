"""
fin_quarterly/config.py
=======================
Environment configuration. A .env file in the working directory is honoured.

    DATABASE_URL   SQLAlchemy URL (default sqlite:///financials.db)
    CSV_PATH       root of the CSV export tree
    LOG_LEVEL      logging level name (default INFO)
"""
from __future__ import annotations
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///financials.db"


@dataclass
class IngestConfig:
    database_url: str = DEFAULT_DATABASE_URL
    csv_path: str = ""
    log_level: str = "INFO"


def _get_env(key: str, default: str) -> str:
    value = os.getenv(key)
    return value if value else default


def load_config() -> IngestConfig:
    load_dotenv()
    return IngestConfig(
        database_url=_get_env("DATABASE_URL", DEFAULT_DATABASE_URL),
        csv_path=_get_env("CSV_PATH", ""),
        log_level=_get_env("LOG_LEVEL", "INFO").upper(),
    )

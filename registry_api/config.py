"""
Configuration management for the company registry API.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

BASE_DIR: Path = Path(__file__).parent.parent
load_dotenv(BASE_DIR / ".env")


def _csv_env(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    """API server configuration."""

    # Paths
    BASE_DIR: Path = BASE_DIR
    DB_PATH: str = os.getenv("REGISTRY_DB_PATH", str(BASE_DIR / "data" / "companies.db"))

    # Server
    API_TITLE: str = "Company Registry API"
    API_DESCRIPTION: str = "REST API for browsing company financial records"
    API_VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"
    HOST: str = os.getenv("REGISTRY_HOST", "0.0.0.0")
    PORT: int = int(os.getenv("REGISTRY_PORT", "8000"))

    # CORS: the dashboard dev server only issues GETs
    CORS_ORIGINS: List[str] = _csv_env("REGISTRY_CORS_ORIGINS", "http://localhost:5173")
    CORS_METHODS: List[str] = ["GET"]

    # Database
    DB_TIMEOUT: int = 30  # SQLite connection timeout in seconds

    # Pagination
    DEFAULT_PAGE_SIZE: int = 10
    MAX_PAGE_SIZE: int = int(os.getenv("REGISTRY_MAX_PAGE_SIZE", "100"))
    MAX_OFFSET: int = 2**63 - 1  # SQLite binds 64-bit signed integers


settings = Settings()

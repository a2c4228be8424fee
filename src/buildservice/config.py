"""Configuration management for the build service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import quote_plus

from buildservice.db.session import DEFAULT_DATABASE_URL

SERVICE_NAME = "com.HailoOSS.build-service"
SERVICE_VERSION = "0.1.0"

DEFAULT_LIMIT = 10
DEFAULT_COVERAGE_TREND_WINDOW = timedelta(days=90)
SINCE_FORMAT = "%Y%m%d%H%M%S"

ENV_PREFIX = "BUILD_SERVICE_"


def _env(name: str, default: str | None = None) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    return value if value else default


@dataclass
class Settings:
    """Runtime settings, read from BUILD_SERVICE_* environment variables."""

    database_url: str = DEFAULT_DATABASE_URL
    github_token: str | None = None
    enrichment_workers: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> Settings:
        """Build settings from the environment.

        BUILD_SERVICE_DATABASE_URL wins; otherwise, if BUILD_SERVICE_SQL_SERVER
        is set, a MySQL URL is assembled from the BUILD_SERVICE_SQL_* variables.
        """
        database_url = _env("DATABASE_URL")
        server = _env("SQL_SERVER")
        if database_url is None and server is not None:
            user = quote_plus(_env("SQL_USERNAME", ""))
            password = quote_plus(_env("SQL_PASSWORD", ""))
            credentials = f"{user}:{password}" if password else user
            database_url = (
                f"mysql+pymysql://{credentials}@{server}:{_env('SQL_PORT', '3306')}"
                f"/{_env('SQL_DATABASE', '')}"
            )

        return cls(
            database_url=database_url or DEFAULT_DATABASE_URL,
            github_token=_env("GITHUB_TOKEN"),
            enrichment_workers=int(_env("ENRICHMENT_WORKERS", "4")),
            log_level=_env("LOG_LEVEL", "INFO").upper(),
        )

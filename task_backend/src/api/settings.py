from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TASK_MAX_RECORDS: maximum number of tasks kept in memory (default: 1000)
    - API_PREFIX: path prefix for the task routes (default: '/api/v1')
    - USER_ID_HEADER: request header carrying the pre-authenticated caller id (default: 'X-User-Id')
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - LOG_LEVEL: logging level name (default: 'INFO')
    """

    task_max_records: int = 1000
    api_prefix: str = "/api/v1"
    user_id_header: str = "X-User-Id"
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: int = logging.INFO


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_int(value: str, default: int) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= 0 else default


def _parse_log_level(value: str, default: int = logging.INFO) -> int:
    level = logging.getLevelName(value.strip().upper())
    return level if isinstance(level, int) else default


def _parse_prefix(value: str) -> str:
    """
    Normalize the API prefix: leading slash, no trailing slash, '' for root.
    """
    s = value.strip().strip("/")
    return f"/{s}" if s else ""


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        # Star will be handled in main via allow_origins=["*"]
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        task_max_records=_parse_int(_get_env("TASK_MAX_RECORDS", "1000"), 1000),
        api_prefix=_parse_prefix(_get_env("API_PREFIX", "/api/v1")),
        user_id_header=_get_env("USER_ID_HEADER", "X-User-Id").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
    )

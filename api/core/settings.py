"""
Environment-backed settings.

Values are read lazily so tests (and `docker compose` overrides) can change
them through the environment without re-importing modules.
"""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_MEDIA_BASE_URL = "http://localhost:8000/uploads"
DEFAULT_UPLOADS_DIR = "uploads"
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10 MiB


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default).strip() or default


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def app_env() -> str:
    return _env_str("APP_ENV", "production").lower()


def is_development() -> bool:
    return app_env() == "development"


def log_level() -> str:
    return _env_str("LOG_LEVEL", "INFO").upper()


def media_base_url() -> str:
    return _env_str("MEDIA_BASE_URL", DEFAULT_MEDIA_BASE_URL).rstrip("/")


def uploads_dir() -> Path:
    return Path(_env_str("UPLOADS_DIR", DEFAULT_UPLOADS_DIR))


def max_upload_bytes() -> int:
    value = _env_int("MAX_UPLOAD_BYTES", DEFAULT_MAX_UPLOAD_BYTES)
    return value if value > 0 else DEFAULT_MAX_UPLOAD_BYTES


def cors_origins() -> list[str]:
    raw = _env_str("CORS_ORIGINS", "*")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import List, Optional

PLACEHOLDER_API_KEY = "YOUR_API_KEY"


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - TRACKER_STORAGE_BACKEND: 'sqlite' (default) or 'memory' for the local blob storage
    - TRACKER_DB_PATH: path to the sqlite file holding the blob. Default './data/tracker.db'
    - TRACKER_STORAGE_KEY: key of the task blob. Default 'time-tracker-tasks'
    - TRACKER_PROFILE: 'daily' (default, minutes, date-aware) or 'rolling' (hours, 16h window)
    - TRACKER_REMOTE_API_KEY: credentials for the external document store (optional)
    - TRACKER_REMOTE_PROJECT_ID: project of the external document store (optional)
    - TRACKER_REMOTE_COLLECTION: collection name in the external store. Default 'tasks'
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - TRACKER_LOG_LEVEL: logging level name. Default 'INFO'
    """

    storage_backend: str
    db_path: str
    storage_key: str
    profile: str
    remote_api_key: Optional[str]
    remote_project_id: Optional[str]
    remote_collection: str
    cors_allow_origins: List[str]
    log_level: str

    @property
    def remote_configured(self) -> bool:
        """True when usable (non-placeholder) external store credentials are present."""
        key = (self.remote_api_key or "").strip()
        return bool(key) and key != PLACEHOLDER_API_KEY


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _optional_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or not value.strip():
        return None
    return value.strip()


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    backend = _get_env("TRACKER_STORAGE_BACKEND", "sqlite").strip().lower()
    if backend not in {"memory", "sqlite"}:
        backend = "sqlite"

    profile = _get_env("TRACKER_PROFILE", "daily").strip().lower()
    if profile not in {"daily", "rolling"}:
        profile = "daily"

    log_level = _get_env("TRACKER_LOG_LEVEL", "INFO").strip().upper()

    return Settings(
        storage_backend=backend,
        db_path=_get_env("TRACKER_DB_PATH", "./data/tracker.db").strip(),
        storage_key=_get_env("TRACKER_STORAGE_KEY", "time-tracker-tasks").strip(),
        profile=profile,
        remote_api_key=_optional_env("TRACKER_REMOTE_API_KEY"),
        remote_project_id=_optional_env("TRACKER_REMOTE_PROJECT_ID"),
        remote_collection=_get_env("TRACKER_REMOTE_COLLECTION", "tasks").strip(),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        log_level=log_level,
    )

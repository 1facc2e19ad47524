from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path

import pytest

# Keep the module-level app off the filesystem during tests.
os.environ.setdefault("TRACKER_STORAGE_BACKEND", "memory")

from time_tracker.db import InMemoryBlobStorage  # noqa: E402
from time_tracker.profiles import DAILY, ROLLING  # noqa: E402
from time_tracker.repositories import LocalTaskStore  # noqa: E402
from time_tracker.settings import Settings  # noqa: E402


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """
    Explicit settings for tests, independent of the environment.
    """
    return Settings(
        storage_backend="memory",
        db_path=str(tmp_path / "tracker.db"),
        storage_key="time-tracker-tasks",
        profile="daily",
        remote_api_key=None,
        remote_project_id=None,
        remote_collection="tasks",
        cors_allow_origins=["*"],
        log_level="DEBUG",
    )


@pytest.fixture()
def remote_settings(settings: Settings) -> Settings:
    return replace(settings, remote_api_key="test-key", remote_project_id="test-project")


@pytest.fixture()
def storage() -> InMemoryBlobStorage:
    return InMemoryBlobStorage()


@pytest.fixture()
def store(storage: InMemoryBlobStorage) -> LocalTaskStore:
    return LocalTaskStore(storage, DAILY)


@pytest.fixture()
def rolling_store(storage: InMemoryBlobStorage) -> LocalTaskStore:
    return LocalTaskStore(storage, ROLLING)

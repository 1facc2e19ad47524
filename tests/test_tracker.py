from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from time_tracker.classification import TaskFilter
from time_tracker.db import InMemoryBlobStorage
from time_tracker.profiles import ROLLING
from time_tracker.repositories import DEFAULT_STORAGE_KEY, LocalTaskStore
from time_tracker.tracker import Tracker

NOW = datetime(2025, 3, 10, 6, 0, tzinfo=timezone.utc)


def rolling_tracker(docs: list) -> Tracker:
    storage = InMemoryBlobStorage({DEFAULT_STORAGE_KEY: json.dumps(docs)})
    return Tracker(LocalTaskStore(storage, ROLLING))


def doc(task_id: str, hours_ago: float, completed: bool = False, **extra) -> dict:
    data = {
        "id": task_id,
        "text": task_id,
        "plannedTime": 1,
        "actualTime": 1,
        "completed": completed,
        "createdAt": (NOW - timedelta(hours=hours_ago)).isoformat(),
    }
    data.update(extra)
    return data


def test_rolling_bucket_follows_window_across_midnight() -> None:
    # "late" was created the previous calendar day but inside the 16h window.
    tracker = rolling_tracker(
        [doc("early", 1, completed=True), doc("late", 10), doc("old", 17, completed=True)]
    )

    assert [t["id"] for t in tracker.current_bucket(now=NOW)] == ["early", "late"]

    view = tracker.board(TaskFilter.ALL, now=NOW)
    assert view.counts == {"all": 2, "active": 1, "completed": 1}
    assert view.carryover == [] and view.scheduled == []
    assert view.analytics.completion_rate == 50
    assert view.analytics.progress == 65


def test_rolling_board_filters_within_window() -> None:
    tracker = rolling_tracker([doc("done", 2, completed=True), doc("open", 3)])

    view = tracker.board(TaskFilter.ACTIVE, now=NOW)

    assert [t["id"] for t in view.tasks] == ["open"]
    assert view.unit == "hours"
    assert tracker.analytics(now=NOW).total_count == 2

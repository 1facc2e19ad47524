from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from time_tracker.classification import (
    TaskFilter,
    carryover_tasks,
    filter_counts,
    filtered_tasks,
    recent_tasks,
    scheduled_tasks,
    todays_tasks,
)

TODAY = date(2025, 3, 10)
NOW = datetime(2025, 3, 10, 12, 0, tzinfo=timezone.utc)


def task(task_id: str, day=None, completed: bool = False, created_at: datetime = NOW) -> dict:
    return {
        "id": task_id,
        "text": task_id,
        "planned_time": 15.0,
        "actual_time": 0.0,
        "completed": completed,
        "date": day,
        "created_at": created_at,
    }


def ids(tasks) -> list:
    return [t["id"] for t in tasks]


@pytest.fixture()
def snapshot() -> list:
    return [
        task("undated"),
        task("today", TODAY),
        task("today-done", TODAY, completed=True),
        task("yesterday", TODAY - timedelta(days=1)),
        task("yesterday-done", TODAY - timedelta(days=1), completed=True),
        task("next-week", TODAY + timedelta(days=7)),
        task("tomorrow", TODAY + timedelta(days=1)),
        task("tomorrow-2", TODAY + timedelta(days=1)),
    ]


def test_todays_tasks_include_undated(snapshot) -> None:
    assert ids(todays_tasks(snapshot, TODAY)) == ["undated", "today", "today-done"]


def test_carryover_excludes_completed(snapshot) -> None:
    assert ids(carryover_tasks(snapshot, TODAY)) == ["yesterday"]


def test_scheduled_sorted_by_date_stable_within_day(snapshot) -> None:
    scheduled = scheduled_tasks(snapshot, TODAY)

    assert ids(scheduled) == ["tomorrow", "tomorrow-2", "next-week"]
    days = [t["date"] for t in scheduled]
    assert days == sorted(days)


def test_partition_of_dated_tasks(snapshot) -> None:
    buckets = [
        set(ids(todays_tasks(snapshot, TODAY))),
        set(ids(carryover_tasks(snapshot, TODAY))),
        set(ids(scheduled_tasks(snapshot, TODAY))),
    ]
    for t in snapshot:
        hits = sum(t["id"] in b for b in buckets)
        if t["date"] is not None and t["date"] < TODAY and t["completed"]:
            assert hits == 0
        else:
            assert hits == 1, t["id"]


@pytest.mark.parametrize(
    "task_filter, expected",
    [
        (TaskFilter.ALL, ["undated", "today", "today-done"]),
        (TaskFilter.ACTIVE, ["undated", "today"]),
        (TaskFilter.COMPLETED, ["today-done"]),
    ],
)
def test_filtered_tasks_only_look_at_today(snapshot, task_filter, expected) -> None:
    assert ids(filtered_tasks(snapshot, task_filter, TODAY)) == expected


def test_filter_counts(snapshot) -> None:
    assert filter_counts(todays_tasks(snapshot, TODAY)) == {"all": 3, "active": 2, "completed": 1}


def test_recent_tasks_window_is_inclusive() -> None:
    tasks = [
        task("fresh", created_at=NOW - timedelta(hours=1)),
        task("edge", created_at=NOW - timedelta(hours=16)),
        task("stale", created_at=NOW - timedelta(hours=16, seconds=1)),
    ]

    assert ids(recent_tasks(tasks, NOW)) == ["fresh", "edge"]
    assert ids(recent_tasks(tasks, NOW, timedelta(hours=2))) == ["fresh"]


def test_completing_overdue_task_drops_it_from_carryover() -> None:
    overdue = task("overdue", TODAY - timedelta(days=1))
    assert ids(carryover_tasks([overdue], TODAY)) == ["overdue"]

    overdue["completed"] = True
    assert carryover_tasks([overdue], TODAY) == []

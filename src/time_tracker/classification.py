"""
Date classification of a task snapshot.

Every function here is pure: it takes the snapshot plus "today" (or "now")
and returns new lists, leaving the records untouched.
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Dict, Iterable, List, Optional

from .models import TaskEntity
from .utils import today as local_today

RECENCY_WINDOW = timedelta(hours=16)


class TaskFilter(str, Enum):
    ALL = "all"
    ACTIVE = "active"
    COMPLETED = "completed"


# PUBLIC_INTERFACE
def todays_tasks(tasks: Iterable[TaskEntity], today: Optional[date] = None) -> List[TaskEntity]:
    """Tasks dated today, plus undated tasks."""
    day = today or local_today()
    return [t for t in tasks if t["date"] is None or t["date"] == day]


# PUBLIC_INTERFACE
def carryover_tasks(tasks: Iterable[TaskEntity], today: Optional[date] = None) -> List[TaskEntity]:
    """Unfinished tasks from an earlier day. Completed overdue tasks are dropped."""
    day = today or local_today()
    return [t for t in tasks if t["date"] is not None and t["date"] < day and not t["completed"]]


# PUBLIC_INTERFACE
def scheduled_tasks(tasks: Iterable[TaskEntity], today: Optional[date] = None) -> List[TaskEntity]:
    """Tasks for a later day, earliest first (snapshot order kept within a day)."""
    day = today or local_today()
    upcoming = [t for t in tasks if t["date"] is not None and t["date"] > day]
    return sorted(upcoming, key=lambda t: t["date"])


# PUBLIC_INTERFACE
def recent_tasks(
    tasks: Iterable[TaskEntity],
    now: Optional[datetime] = None,
    window: timedelta = RECENCY_WINDOW,
) -> List[TaskEntity]:
    """Tasks created within the trailing window ending at now."""
    instant = now or datetime.now(timezone.utc)
    return [t for t in tasks if instant - t["created_at"] <= window]


# PUBLIC_INTERFACE
def apply_filter(bucket: Iterable[TaskEntity], task_filter: TaskFilter) -> List[TaskEntity]:
    """Restrict a bucket by completion state."""
    if task_filter == TaskFilter.ACTIVE:
        return [t for t in bucket if not t["completed"]]
    if task_filter == TaskFilter.COMPLETED:
        return [t for t in bucket if t["completed"]]
    return list(bucket)


# PUBLIC_INTERFACE
def filtered_tasks(
    tasks: Iterable[TaskEntity],
    task_filter: TaskFilter,
    today: Optional[date] = None,
) -> List[TaskEntity]:
    """Today's tasks restricted by completion state."""
    return apply_filter(todays_tasks(tasks, today), task_filter)


# PUBLIC_INTERFACE
def filter_counts(bucket: Iterable[TaskEntity]) -> Dict[str, int]:
    """Number of tasks each filter would show for the bucket."""
    items = list(bucket)
    done = sum(1 for t in items if t["completed"])
    return {
        TaskFilter.ALL.value: len(items),
        TaskFilter.ACTIVE.value: len(items) - done,
        TaskFilter.COMPLETED.value: done,
    }

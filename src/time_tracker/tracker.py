from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from .analytics import Analytics, compute_analytics
from .classification import (
    TaskFilter,
    apply_filter,
    carryover_tasks,
    filter_counts,
    recent_tasks,
    scheduled_tasks,
    todays_tasks,
)
from .models import TaskEntity
from .profiles import TrackerProfile
from .repositories import TaskStore


@dataclass
class TrackerState:
    """The whole application state: the store (which owns the snapshot) and the active filter."""

    store: TaskStore
    current_filter: TaskFilter = TaskFilter.ALL


@dataclass
class BoardView:
    profile: str
    unit: str
    filter: TaskFilter
    tasks: List[TaskEntity]
    carryover: List[TaskEntity]
    scheduled: List[TaskEntity]
    counts: Dict[str, int]
    analytics: Analytics = field(repr=False)


class Tracker:
    """
    Controller over the tracker state.

    Mutations go straight to the store; every read is computed fresh from the
    store's current snapshot by the classification and analytics functions.
    """

    def __init__(self, store: TaskStore) -> None:
        self.state = TrackerState(store=store)

    @property
    def store(self) -> TaskStore:
        return self.state.store

    @property
    def profile(self) -> TrackerProfile:
        return self.state.store.profile

    def close(self) -> None:
        self.state.store.close()

    def set_filter(self, task_filter: TaskFilter) -> None:
        self.state.current_filter = TaskFilter(task_filter)

    def current_bucket(self, today: Optional[date] = None, now: Optional[datetime] = None) -> List[TaskEntity]:
        """Today's tasks for dated profiles, the recency window otherwise."""
        tasks = self.store.tasks
        if self.profile.date_aware:
            return todays_tasks(tasks, today)
        return recent_tasks(tasks, now, self.profile.recency_window)

    def analytics(self, today: Optional[date] = None, now: Optional[datetime] = None) -> Analytics:
        return compute_analytics(self.current_bucket(today, now), self.profile)

    def board(
        self,
        task_filter: Optional[TaskFilter] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> BoardView:
        """
        Build the full board for the given filter (the current one when omitted).

        Carryover and scheduled sections are hidden under the completed filter
        and are always empty for undated profiles.
        """
        if task_filter is not None:
            self.set_filter(task_filter)
        active_filter = self.state.current_filter

        snapshot = self.store.tasks
        if self.profile.date_aware:
            bucket = todays_tasks(snapshot, today)
            carryover = carryover_tasks(snapshot, today)
            scheduled = scheduled_tasks(snapshot, today)
        else:
            bucket = recent_tasks(snapshot, now, self.profile.recency_window)
            carryover, scheduled = [], []

        if active_filter == TaskFilter.COMPLETED:
            carryover, scheduled = [], []

        return BoardView(
            profile=self.profile.name,
            unit=self.profile.unit,
            filter=active_filter,
            tasks=apply_filter(bucket, active_filter),
            carryover=carryover,
            scheduled=scheduled,
            counts=filter_counts(bucket),
            analytics=compute_analytics(bucket, self.profile),
        )

from __future__ import annotations

from datetime import date, datetime
from typing import Optional, TypedDict


# PUBLIC_INTERFACE
class TaskEntity(TypedDict):
    """
    In-memory task record shared by every store implementation.

    Fields:
    - id: Opaque unique identifier, assigned at creation and never changed
    - text: Non-empty, trimmed label
    - planned_time: Planned effort in the profile's unit, never below the profile floor
    - actual_time: Logged effort in the same unit, never negative
    - completed: Completion flag
    - date: Calendar day the task is for; None means "today"
    - created_at: Timezone-aware creation instant
    """

    id: str
    text: str
    planned_time: float
    actual_time: float
    completed: bool
    date: Optional[date]
    created_at: datetime

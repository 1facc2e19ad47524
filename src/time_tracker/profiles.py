from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from enum import Enum


class EfficiencyPolicy(str, Enum):
    """How the efficiency percentage is derived from planned vs. actual time."""

    COMPLETED_ONLY = "completed-only"
    WHOLE_BUCKET = "whole-bucket"


class ProgressMode(str, Enum):
    COMPLETION = "completion"
    WEIGHTED = "weighted"


@dataclass(frozen=True)
class TrackerProfile:
    """
    One coherent set of units, floors and analytics formulas.

    A running tracker uses exactly one profile, so the two efficiency
    policies are never mixed inside one set of numbers.
    """

    name: str
    unit: str
    planned_floor: float
    planned_default: float
    step: float
    date_aware: bool
    efficiency_policy: EfficiencyPolicy
    progress_mode: ProgressMode
    recency_window: timedelta = timedelta(hours=16)


DAILY = TrackerProfile(
    name="daily",
    unit="minutes",
    planned_floor=5,
    planned_default=15,
    step=5,
    date_aware=True,
    efficiency_policy=EfficiencyPolicy.COMPLETED_ONLY,
    progress_mode=ProgressMode.COMPLETION,
)

# Hour-based, undated tasks bucketed by a trailing window instead of calendar days.
ROLLING = TrackerProfile(
    name="rolling",
    unit="hours",
    planned_floor=0.5,
    planned_default=1,
    step=0.5,
    date_aware=False,
    efficiency_policy=EfficiencyPolicy.WHOLE_BUCKET,
    progress_mode=ProgressMode.WEIGHTED,
)

PROFILES = {p.name: p for p in (DAILY, ROLLING)}


# PUBLIC_INTERFACE
def get_profile(name: str) -> TrackerProfile:
    """Return the profile registered under name, defaulting to the daily profile."""
    return PROFILES.get((name or "").strip().lower(), DAILY)

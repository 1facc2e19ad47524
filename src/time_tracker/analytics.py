from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Tuple

from .models import TaskEntity
from .profiles import EfficiencyPolicy, ProgressMode, TrackerProfile
from .utils import round_half_up

# Smallest divisor used by the whole-bucket efficiency policy.
MIN_ACTUAL = 0.1

COMPLETION_WEIGHT = 0.7
EFFICIENCY_WEIGHT = 0.3


class ProgressTier(str, Enum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    LOW = "low"


# Checked top to bottom; the first threshold reached wins.
TIER_THRESHOLDS: Tuple[Tuple[int, ProgressTier], ...] = (
    (80, ProgressTier.EXCELLENT),
    (60, ProgressTier.GOOD),
    (40, ProgressTier.FAIR),
)


@dataclass(frozen=True)
class Analytics:
    total_count: int
    completed_count: int
    pending_count: int
    total_planned: float
    total_actual: float
    completion_rate: int
    efficiency: int
    efficiency_policy: str
    progress: int
    tier: str

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


# PUBLIC_INTERFACE
def completion_rate(bucket: Iterable[TaskEntity]) -> int:
    """Percentage of completed tasks, 0 for an empty bucket."""
    items = list(bucket)
    if not items:
        return 0
    done = sum(1 for t in items if t["completed"])
    return round_half_up(100 * done / len(items))


# PUBLIC_INTERFACE
def efficiency(bucket: Iterable[TaskEntity], policy: EfficiencyPolicy) -> int:
    """
    Planned vs. actual time as a percentage.

    COMPLETED_ONLY looks at completed tasks only and yields 0 until some
    actual time was logged on them. WHOLE_BUCKET uses every task and guards the
    division with MIN_ACTUAL.
    """
    items = list(bucket)
    if policy == EfficiencyPolicy.COMPLETED_ONLY:
        done = [t for t in items if t["completed"]]
        planned = sum(t["planned_time"] for t in done)
        actual = sum(t["actual_time"] for t in done)
        if actual <= 0:
            return 0
        return round_half_up(100 * planned / actual)

    planned = sum(t["planned_time"] for t in items)
    actual = sum(t["actual_time"] for t in items)
    return round_half_up(100 * planned / max(actual, MIN_ACTUAL))


# PUBLIC_INTERFACE
def weighted_progress(completed_fraction: float, efficiency_pct: int) -> int:
    """Blend of completion (70%) and capped efficiency (30%), at most 100."""
    capped = min(efficiency_pct, 100) / 100
    value = round_half_up(100 * (COMPLETION_WEIGHT * completed_fraction + EFFICIENCY_WEIGHT * capped))
    return min(value, 100)


# PUBLIC_INTERFACE
def progress_tier(percentage: float) -> ProgressTier:
    """Map a percentage onto the four presentation tiers."""
    for threshold, tier in TIER_THRESHOLDS:
        if percentage >= threshold:
            return tier
    return ProgressTier.LOW


# PUBLIC_INTERFACE
def compute_analytics(bucket: Iterable[TaskEntity], profile: TrackerProfile) -> Analytics:
    """Compute the analytics panel for a bucket under the profile's formulas."""
    items: List[TaskEntity] = list(bucket)
    total = len(items)
    done = sum(1 for t in items if t["completed"])
    rate = completion_rate(items)
    eff = efficiency(items, profile.efficiency_policy)

    if profile.progress_mode == ProgressMode.WEIGHTED:
        fraction = done / total if total else 0.0
        progress = weighted_progress(fraction, eff)
    else:
        progress = rate

    return Analytics(
        total_count=total,
        completed_count=done,
        pending_count=total - done,
        total_planned=float(sum(t["planned_time"] for t in items)),
        total_actual=float(sum(t["actual_time"] for t in items)),
        completion_rate=rate,
        efficiency=eff,
        efficiency_policy=profile.efficiency_policy.value,
        progress=progress,
        tier=progress_tier(progress).value,
    )

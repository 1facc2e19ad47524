from __future__ import annotations

import math
import re
import sys
from datetime import date, datetime
from typing import Any, Dict, Optional

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


# PUBLIC_INTERFACE
def parse_number(raw: Any) -> Optional[float]:
    """
    Parse user input into a finite number, or None when it cannot be parsed.

    Strings are read by their leading numeric prefix ("12abc" -> 12.0,
    " 7.5 min" -> 7.5, "abc" -> None). Booleans, NaN and infinities are
    rejected.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        match = _LEADING_NUMBER.match(raw)
        if not match:
            return None
        try:
            value = float(match.group(1))
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(value):
        return None
    return value


# PUBLIC_INTERFACE
def parse_day(raw: Any) -> Optional[date]:
    """Parse an ISO YYYY-MM-DD day; empty or invalid input gives None."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    s = str(raw).strip()
    if not s:
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


# PUBLIC_INTERFACE
def round_half_up(value: float) -> int:
    """
    Round to the nearest integer with halves going up (2.5 -> 3, -2.5 -> -2).

    Infinities saturate at +/- sys.maxsize and NaN rounds to 0.
    """
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return sys.maxsize if value > 0 else -sys.maxsize
    return int(math.floor(value + 0.5))


# PUBLIC_INTERFACE
def today() -> date:
    """Current local calendar date."""
    return date.today()


# PUBLIC_INTERFACE
def mutation_envelope(accepted: bool, task: Optional[Any] = None) -> Dict[str, Any]:
    """
    Build the standard response body for mutation endpoints.

    Args:
        accepted: False when the store silently ignored the request.
        task: The resulting record, or None when there is none to show yet.

    Returns:
        Dict with keys: accepted, task.
    """
    return {"accepted": bool(accepted), "task": task}

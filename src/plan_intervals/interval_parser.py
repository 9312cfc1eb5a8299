"""Recover structured intervals from free-text workout descriptions.

Handles the common one-line form used by most plans:

    5x1000m at 5K pace with 400m jog recovery
    8 x 2min @ threshold with 1min easy
"""

import re

from loguru import logger

from plan_intervals.models.plan import DurationType, Interval

_UNIT = r"(minutes|minute|mins|min|seconds|secs|sec|s|km|m)"

# groups: (1) reps, (2) work amount, (3) work unit, (4) intensity,
#         (5) recovery amount, (6) recovery unit, (7) recovery intensity
_INTERVAL_RE = re.compile(
    rf"(\d+)\s*x\s*(\d+(?:\.\d+)?)\s*{_UNIT}\b\s*(?:at\s+|@\s*)?(.*?)"
    rf"(?:\s*,?\s*with\s+(\d+(?:\.\d+)?)\s*{_UNIT}\b\s*(.*))?$",
    re.IGNORECASE,
)


def _to_base_unit(amount: float, unit: str) -> tuple[float, DurationType]:
    """Convert to seconds (time) or metres (distance)."""
    unit = unit.lower()
    if unit.startswith("min"):
        return amount * 60, "time"
    if unit.startswith("s"):
        return amount, "time"
    if unit == "km":
        return amount * 1000, "distance"
    return amount, "distance"


def _clean(text: str | None) -> str:
    return (text or "").strip().rstrip(".,;").strip()


def parse_interval_description(description: str) -> list[Interval]:
    """Extract every ``NxD<unit> at <intensity> [with R<unit> <intensity>]`` line.

    A recovery measured in a different kind of unit than its work step
    (e.g. 400m work with 90s rest) is dropped, since recovery is always
    read in the work step's unit.
    """
    intervals: list[Interval] = []
    for line in (description or "").splitlines():
        m = _INTERVAL_RE.search(line.strip())
        if not m or int(m.group(1)) < 1:
            continue

        duration, duration_type = _to_base_unit(float(m.group(2)), m.group(3))
        interval = Interval(
            repeat=int(m.group(1)),
            duration=duration,
            duration_type=duration_type,
            intensity=_clean(m.group(4)),
        )

        if m.group(5):
            recovery, recovery_type = _to_base_unit(float(m.group(5)), m.group(6))
            if recovery_type == duration_type:
                interval.recovery = recovery
                interval.recovery_intensity = _clean(m.group(7)) or None
            else:
                logger.debug(
                    "Dropping {} recovery from {} interval: {!r}",
                    recovery_type,
                    duration_type,
                    line,
                )

        intervals.append(interval)
    return intervals

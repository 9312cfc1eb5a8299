"""Render workouts as Intervals.icu structured-workout text.

Intervals.icu parses the event description into step blocks, which is what
ends up on the watch. The syntax used here:

    Warmup
    - 10m Easy pace

    Main Set
    5x
    - 1.0km 5K pace
    - 200m Easy pace

    Cooldown
    - 5m Easy pace
"""

import re
from dataclasses import dataclass

from plan_intervals.models.plan import Interval, Workout
from plan_intervals.pace import PaceMapping

_MI_TO_KM = 1.609344

# ---------------------------------------------------------------------------
# Intensity vocabulary
# ---------------------------------------------------------------------------

_ZONE_RE = re.compile(r"^Z[1-5]$", re.IGNORECASE)
_PACE_PREFIX_RE = re.compile(r"^\d+:\d+")

# "easy" is resolved separately since its target depends on the sport.
_INTENSITY_LEXICON: dict[str, str] = {
    # General
    "recovery": "Z1",
    "endurance": "Z2",
    "aerobic": "Z2",
    "tempo": "Z3",
    "threshold": "Z4",
    "lactate threshold": "Z4",
    "lt": "Z4",
    "vo2 max": "Z5",
    "vo2max": "Z5",
    "intervals": "Z5",
    # Running
    "5k pace": "5K pace",
    "10k pace": "10K pace",
    "marathon pace": "Marathon pace",
    "half marathon pace": "Half Marathon pace",
    # Cycling
    "ftp": "100%",
    "sweet spot": "88-93%",
}

# ---------------------------------------------------------------------------
# Warmup / cooldown detection
# ---------------------------------------------------------------------------

_WARMUP_RE = re.compile(r"^(?:warmup|warm-up|warm up):?\s*(.+)", re.IGNORECASE)
_COOLDOWN_RE = re.compile(r"^(?:cooldown|cool-down|cool down):?\s*(.+)", re.IGNORECASE)

# "10 min", "10 minutes"
_PHASE_TIME_RE = re.compile(r"(\d+)\s*(?:minutes|minute|mins|min)\b", re.IGNORECASE)
# "2km", "2 k", "800m", "1.5 miles"
_PHASE_DISTANCE_RE = re.compile(
    r"(\d+(?:\.\d+)?)\s*(km|k|miles|mile|mi|m)\b", re.IGNORECASE
)
# Connective left in front of the intensity once the token is removed
_LEADING_FILLER_RE = re.compile(r"^(?:at\b|@|-|,)\s*", re.IGNORECASE)


@dataclass
class WorkoutPhases:
    warmup: str | None = None
    cooldown: str | None = None


# ---------------------------------------------------------------------------
# Durations
# ---------------------------------------------------------------------------


def _fmt_km(km: float) -> str:
    """Format a km distance compactly: 2km, 2.4km."""
    rounded = round(km, 1)
    if rounded == int(rounded):
        return f"{int(rounded)}km"
    return f"{rounded}km"


def format_duration(value: float, duration_type: str = "time") -> str:
    """Format a work or recovery amount.

    Distance (metres): 1000 and above as kilometres with one decimal
    (``1.0km``), below as whole metres (``400m``).
    Time (seconds): 60 and above as minutes plus leftover seconds
    (``2m``, ``1m30s``), below as whole seconds (``45s``).
    """
    if duration_type == "distance":
        if value >= 1000:
            return f"{value / 1000:.1f}km"
        return f"{int(value)}m"

    if value >= 60:
        minutes, seconds = divmod(int(value), 60)
        return f"{minutes}m{seconds}s" if seconds else f"{minutes}m"
    return f"{int(value)}s"


# ---------------------------------------------------------------------------
# Intensities
# ---------------------------------------------------------------------------


def _looks_like_pace(value: str) -> bool:
    return "/km" in value or "/mi" in value or bool(_PACE_PREFIX_RE.match(value))


def format_intensity(
    label: str | None,
    workout_type: str,
    pace_mapping: PaceMapping | None = None,
) -> str:
    """Translate an intensity label into an Intervals.icu target.

    Precedence: user pace mapping (exact label), zone tokens and
    percentages, the built-in lexicon, then the label unchanged.
    """
    if not label:
        return "Easy pace" if workout_type == "run" else "moderate"

    mapped = (pace_mapping or {}).get(label)
    if mapped:
        if _looks_like_pace(mapped) and "pace" not in mapped.lower():
            return f"{mapped} Pace"
        return mapped

    if _ZONE_RE.match(label):
        return label.upper()
    if "%" in label:
        return label

    normalized = label.lower().strip()
    if normalized == "easy":
        return "Easy pace" if workout_type == "run" else "Z2"
    return _INTENSITY_LEXICON.get(normalized, label)


# ---------------------------------------------------------------------------
# Phases
# ---------------------------------------------------------------------------


def _phase_intensity(text: str, token: str) -> str:
    rest = text.replace(token, "", 1).strip()
    rest = _LEADING_FILLER_RE.sub("", rest).strip()
    return rest or "Easy"


def _format_phase_text(
    text: str, workout_type: str, pace_mapping: PaceMapping
) -> str:
    """Turn "10 minutes easy" into "- 10m Easy pace"."""
    m = _PHASE_TIME_RE.search(text)
    if m:
        intensity = _phase_intensity(text, m.group(0))
        return f"- {m.group(1)}m {format_intensity(intensity, workout_type, pace_mapping)}"

    m = _PHASE_DISTANCE_RE.search(text)
    if m:
        value = float(m.group(1))
        unit = m.group(2).lower()
        if unit in ("km", "k"):
            distance = _fmt_km(value)
        elif unit.startswith("mi"):
            distance = _fmt_km(value * _MI_TO_KM)
        else:
            distance = f"{int(value)}m"
        intensity = _phase_intensity(text, m.group(0))
        return f"- {distance} {format_intensity(intensity, workout_type, pace_mapping)}"

    return f"- {text}"


def detect_workout_phases(
    description: str,
    workout_type: str = "run",
    pace_mapping: PaceMapping | None = None,
) -> WorkoutPhases:
    """Find "Warmup: ..." / "Cooldown: ..." lines in a free-text description."""
    mapping = pace_mapping or {}
    phases = WorkoutPhases()
    for raw_line in (description or "").splitlines():
        line = raw_line.strip()
        if not line:
            continue
        m = _WARMUP_RE.match(line)
        if m:
            phases.warmup = _format_phase_text(m.group(1), workout_type, mapping)
            continue
        m = _COOLDOWN_RE.match(line)
        if m:
            phases.cooldown = _format_phase_text(m.group(1), workout_type, mapping)
    return phases


# ---------------------------------------------------------------------------
# Intervals
# ---------------------------------------------------------------------------


def _synthesize_interval(workout: Workout) -> Interval | None:
    """Single implicit step for a workout with only a scalar duration/distance."""
    if workout.distance:
        return Interval(
            repeat=1,
            duration=workout.distance * 1000,
            duration_type="distance",
            intensity=workout.intensity or "Easy",
        )
    if workout.duration:
        return Interval(
            repeat=1,
            duration=workout.duration * 60,
            duration_type="time",
            intensity=workout.intensity or "Easy",
        )
    return None


def _format_interval(
    interval: Interval, workout_type: str, pace_mapping: PaceMapping
) -> list[str]:
    lines: list[str] = []
    if interval.repeat > 1:
        lines.append(f"{interval.repeat}x")

    work = format_duration(interval.duration, interval.duration_type)
    if interval.ramp is not None:
        lines.append(f"- {work} Ramp {interval.ramp.start}-{interval.ramp.end}")
    else:
        target = format_intensity(interval.intensity, workout_type, pace_mapping)
        lines.append(f"- {work} {target}")

    if interval.recovery:
        rest = format_duration(interval.recovery, interval.duration_type)
        target = format_intensity(
            interval.recovery_intensity or "Easy", workout_type, pace_mapping
        )
        lines.append(f"- {rest} {target}")
    return lines


def format_intervals(
    intervals: list[Interval],
    workout_type: str,
    pace_mapping: PaceMapping | None = None,
) -> str:
    mapping = pace_mapping or {}
    lines: list[str] = []
    for interval in intervals:
        lines.extend(_format_interval(interval, workout_type, mapping))
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def format_workout(workout: Workout, pace_mapping: PaceMapping | None = None) -> str:
    """Render a workout as Intervals.icu structured-workout text.

    Args:
        workout: The workout to render.
        pace_mapping: Session-scoped intensity label → target overrides,
            e.g. ``{"Easy": "5:30-6:00/km"}``. Keys match labels exactly.

    Returns:
        The structured text, or the workout's description unchanged when
        there is nothing to structure.
    """
    mapping = pace_mapping or {}
    intervals = list(workout.intervals or [])
    if not intervals:
        synthetic = _synthesize_interval(workout)
        if synthetic is None:
            return workout.description
        intervals = [synthetic]

    phases = detect_workout_phases(workout.description, workout.type, mapping)

    sections: list[str] = []
    if phases.warmup:
        sections.extend(["Warmup", phases.warmup, ""])

    # A lone step reads better without a header
    if phases.warmup or phases.cooldown or len(intervals) > 1:
        sections.append("Main Set")
    sections.extend([format_intervals(intervals, workout.type, mapping), ""])

    if phases.cooldown:
        sections.extend(["Cooldown", phases.cooldown, ""])

    formatted = "\n".join(sections).strip()
    return formatted or workout.description

"""Session-scoped pace mapping: intensity label → user target.

A mapping lives for one upload session and is never stored with the plan.
"""

from plan_intervals.models.plan import TrainingPlan

PaceMapping = dict[str, str]

# Labels containing these words are listed first, in this order.
_PRIORITY_WORDS = ("easy", "recovery", "warmup", "cooldown")


def _sort_key(label: str) -> tuple[int, str]:
    lower = label.lower()
    for rank, word in enumerate(_PRIORITY_WORDS):
        if word in lower:
            return (rank, "")
    return (len(_PRIORITY_WORDS), label)


def collect_intensity_labels(plan: TrainingPlan) -> list[str]:
    """Distinct intensity labels used anywhere in the plan, common ones first."""
    labels: set[str] = set()
    for workout in plan.workouts:
        if workout.intensity:
            labels.add(workout.intensity)
        for interval in workout.intervals or []:
            if interval.intensity:
                labels.add(interval.intensity)
            if interval.recovery_intensity:
                labels.add(interval.recovery_intensity)
    # sorted() is stable, so equally ranked priority labels keep alphabetical order
    return sorted(sorted(labels), key=_sort_key)


def parse_pace_options(options: list[str] | None) -> PaceMapping:
    """Build a mapping from ``LABEL=VALUE`` strings.

    Raises:
        ValueError: if an entry has no ``=`` or an empty label or value.
    """
    mapping: PaceMapping = {}
    for option in options or []:
        label, sep, value = option.partition("=")
        label, value = label.strip(), value.strip()
        if not sep or not label or not value:
            raise ValueError(f"Invalid pace mapping '{option}', expected LABEL=VALUE")
        mapping[label] = value
    return mapping

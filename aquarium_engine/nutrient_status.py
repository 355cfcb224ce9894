"""Classify weekly nutrient totals against EI target bands.

Possible labels are ``low``, ``optimal`` and ``high``. Bands are inclusive:
a total equal to either bound is ``optimal``.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .models import NUTRIENTS, InvalidInputError, NutrientStatus, NutrientTotals, TargetRange

__all__ = [
    "as_target_range",
    "classify_value",
    "classify",
    "progress_value",
    "progress_values",
    "summarize_status",
]


def as_target_range(value: TargetRange | Any) -> TargetRange:
    """Return ``value`` as a validated :class:`TargetRange`.

    ``(min, max)`` pairs and ``{"min": .., "max": ..}`` mappings are accepted;
    a reversed pair is rejected rather than repaired.
    """

    if isinstance(value, TargetRange):
        return value
    if isinstance(value, Mapping):
        return TargetRange(value["min"], value["max"])
    try:
        low, high = value
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid target range {value!r}") from None
    return TargetRange(low, high)


def classify_value(value: float, target: TargetRange) -> NutrientStatus:
    if value < target.min:
        return NutrientStatus.LOW
    if value > target.max:
        return NutrientStatus.HIGH
    return NutrientStatus.OPTIMAL


def classify(
    totals: NutrientTotals, targets: Mapping[str, TargetRange | Any]
) -> Dict[str, NutrientStatus]:
    """Return a status label for each element with a target.

    Every range is validated before the first comparison so a bad band never
    yields a partial result.
    """

    ranges = {n: as_target_range(targets[n]) for n in NUTRIENTS if n in targets}
    unknown = set(targets) - set(NUTRIENTS)
    if unknown:
        raise InvalidInputError(f"Unknown nutrients in targets: {', '.join(sorted(unknown))}")
    return {n: classify_value(totals.get(n), r) for n, r in ranges.items()}


def progress_value(value: float, target: TargetRange) -> float:
    """Return a 0-100 gauge position for ``value`` within ``target``.

    ``[0, min]`` maps onto ``[0, 33]``, the band itself onto ``[33, 67]`` and
    anything above ``max`` is pinned at ``100``.
    """

    if value > target.max:
        return 100.0
    if value < target.min:
        return max(0.0, value / target.min * 33) if target.min > 0 else 0.0
    span = target.max - target.min
    if span == 0:
        return 50.0
    return 33 + (value - target.min) / span * 34


def progress_values(
    totals: NutrientTotals, targets: Mapping[str, TargetRange | Any]
) -> Dict[str, float]:
    return {
        n: round(progress_value(totals.get(n), as_target_range(targets[n])), 1)
        for n in NUTRIENTS
        if n in targets
    }


def summarize_status(status: Mapping[str, NutrientStatus]) -> Dict[str, Any]:
    """Return counts per label and whether every element is optimal."""

    counts = {s.value: 0 for s in NutrientStatus}
    for label in status.values():
        counts[NutrientStatus.normalize(label).value] += 1
    return {
        "counts": counts,
        "all_optimal": bool(status) and counts["optimal"] == len(status),
        "low": sorted(n for n, s in status.items() if s == NutrientStatus.LOW),
        "high": sorted(n for n, s in status.items() if s == NutrientStatus.HIGH),
    }

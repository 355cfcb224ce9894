"""Sum logged fertilizer doses into per-element weekly totals."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, Mapping

from .models import (
    NUTRIENTS,
    AggregationResult,
    DosingEvent,
    FertilizerComposition,
    InvalidInputError,
    NutrientTotals,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 7

__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "window_dates",
    "events_in_window",
    "aggregate",
    "aggregate_with_report",
    "weekly_amounts",
]


def window_dates(window_days: int = DEFAULT_WINDOW_DAYS, today: date | None = None) -> list[date]:
    """Return the calendar dates in the trailing window ending ``today``.

    The window is inclusive on both ends, so ``window_days=7`` yields today
    and the six preceding days.
    """

    if window_days < 1:
        raise InvalidInputError("window_days must be at least 1")
    end = today or date.today()
    return [end - timedelta(days=offset) for offset in range(window_days)]


def events_in_window(
    events: Iterable[DosingEvent],
    window_days: int = DEFAULT_WINDOW_DAYS,
    today: date | None = None,
) -> list[DosingEvent]:
    """Return ``events`` dated inside the trailing window."""

    dates = set(window_dates(window_days, today))
    return [e for e in events if e.date in dates]


def aggregate_with_report(
    events: Iterable[DosingEvent],
    compositions: Mapping[str, FertilizerComposition],
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    today: date | None = None,
    volume_liters: float | None = None,
) -> AggregationResult:
    """Return weekly totals along with counts of used and skipped events.

    Each event contributes ``amount * ppm_per_unit`` for every element. When
    ``volume_liters`` is given the compositions are treated as ppm per unit
    per liter and each contribution is divided by the tank volume. Events
    referencing a fertilizer missing from ``compositions`` are skipped: the
    product may have been deleted while its history is still displayed.
    """

    if volume_liters is not None and volume_liters <= 0:
        raise InvalidInputError("volume_liters must be positive")

    sums = {n: 0.0 for n in NUTRIENTS}
    used = 0
    skipped: list[str] = []
    for event in events_in_window(events, window_days, today):
        fert = compositions.get(event.fertilizer_id)
        if fert is None:
            skipped.append(event.fertilizer_id)
            continue
        used += 1
        for nutrient in NUTRIENTS:
            sums[nutrient] += event.amount * fert.ppm_for(nutrient)

    if volume_liters is not None:
        sums = {n: v / volume_liters for n, v in sums.items()}

    if skipped:
        _LOGGER.debug(
            "Skipped %d dosing events for unknown fertilizers: %s",
            len(skipped),
            ", ".join(sorted(set(skipped))),
        )

    return AggregationResult(
        totals=NutrientTotals(**sums),
        used_events=used,
        skipped_events=len(skipped),
        skipped_ids=tuple(sorted(set(skipped))),
    )


def aggregate(
    events: Iterable[DosingEvent],
    compositions: Mapping[str, FertilizerComposition],
    window_days: int = DEFAULT_WINDOW_DAYS,
    *,
    today: date | None = None,
    volume_liters: float | None = None,
) -> NutrientTotals:
    """Return per-element totals dosed during the trailing window."""

    return aggregate_with_report(
        events,
        compositions,
        window_days,
        today=today,
        volume_liters=volume_liters,
    ).totals


def weekly_amounts(
    events: Iterable[DosingEvent],
    window_days: int = DEFAULT_WINDOW_DAYS,
    today: date | None = None,
) -> Dict[str, float]:
    """Return the summed dose amount per fertilizer id inside the window."""

    totals: Dict[str, float] = {}
    for event in events_in_window(events, window_days, today):
        totals[event.fertilizer_id] = totals.get(event.fertilizer_id, 0.0) + event.amount
    return dict(sorted(totals.items()))

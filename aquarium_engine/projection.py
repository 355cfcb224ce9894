"""Day-by-day projection of nutrient levels between water changes."""

from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Iterable

import pandas as pd

from .consumption import consumption_multiplier
from .models import NUTRIENTS, InvalidInputError, NutrientTotals, ProjectionPoint, TankSetup, WaterSourceProfile
from .water_contribution import check_fraction, contribution

_LOGGER = logging.getLogger(__name__)

__all__ = ["project", "daily_rates_from_weekly", "projection_frame"]


def _point(day: int, levels: NutrientTotals, start_date: date | None) -> ProjectionPoint:
    when = start_date + timedelta(days=day) if start_date else None
    return ProjectionPoint(day=day, date=when, **levels.as_dict())


def project(
    current_levels: NutrientTotals,
    daily_dose_rates: NutrientTotals,
    setup: TankSetup,
    horizon_days: int = 7,
    water_change_fraction: float = 0.5,
    water_change_day: int | None = 7,
    source: WaterSourceProfile | None = None,
    *,
    start_date: date | None = None,
) -> list[ProjectionPoint]:
    """Return projected levels for day ``0`` through ``horizon_days``.

    Each simulated day adds ``daily_dose_rates``. Plant uptake is already part
    of the (multiplier scaled) target bands, so nothing is subtracted here. On
    ``water_change_day`` the levels are diluted by ``water_change_fraction``
    and, when ``source`` is known, topped up with what the fresh water
    carries. Without a source the new water is assumed nutrient free.

    Day ``0`` is the starting snapshot and is returned unchanged, so a water
    change scheduled for day ``0`` or past the horizon never applies.
    ``water_change_day=None`` disables the water change entirely.
    """

    if horizon_days < 0:
        raise InvalidInputError("horizon_days must be non-negative")
    fraction = check_fraction(water_change_fraction)
    if water_change_day is not None and water_change_day < 0:
        raise InvalidInputError("water_change_day must be non-negative")

    # Water change inputs are resolved once; every step reuses them.
    incoming = contribution(source, fraction) if source is not None else NutrientTotals()
    keep = 1 - fraction

    _LOGGER.debug(
        "Projecting %d days for %.1f L tank (multiplier %.2f, water change day %s)",
        horizon_days,
        setup.volume_liters,
        consumption_multiplier(setup),
        water_change_day,
    )

    points = [_point(0, current_levels, start_date)]
    levels = current_levels.as_dict()
    for day in range(1, horizon_days + 1):
        for n in NUTRIENTS:
            levels[n] += daily_dose_rates.get(n)
        if day == water_change_day:
            for n in NUTRIENTS:
                levels[n] = levels[n] * keep + incoming.get(n)
        if any(v < 0 for v in levels.values()):
            _LOGGER.debug("Clamped negative projected levels on day %d", day)
        clamped = NutrientTotals.clamped(levels)
        levels = clamped.as_dict()
        points.append(_point(day, clamped, start_date))
    return points


def daily_rates_from_weekly(weekly_totals: NutrientTotals) -> NutrientTotals:
    """Return an even daily dose rate delivering ``weekly_totals`` over 7 days."""

    return weekly_totals.scale(1 / 7)


def projection_frame(points: Iterable[ProjectionPoint]) -> pd.DataFrame:
    """Return projection ``points`` as a :class:`pandas.DataFrame` indexed by day."""

    rows = [p.as_dict() for p in points]
    if not rows:
        return pd.DataFrame(columns=["day", *NUTRIENTS]).set_index("day")
    df = pd.DataFrame(rows)
    if "date" in df.columns:
        df["date"] = pd.to_datetime(df["date"])  # type: ignore[arg-type]
    return df.set_index("day")

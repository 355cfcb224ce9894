"""Nutrients imported into the tank by a partial water change."""

from __future__ import annotations

from typing import Dict

from .models import NUTRIENTS, InvalidInputError, NutrientTotals, WaterSourceProfile
from .targets import from_display_unit

__all__ = ["source_nutrients", "contribution", "check_fraction"]

# Analyte measured in the source profile for each tracked element. Nitrogen
# and phosphorus are tested as nitrate and phosphate and must be converted
# back to the elemental family used by the EI targets.
SOURCE_ANALYTES: Dict[str, str] = {
    "nitrogen": "nitrate",
    "phosphorus": "phosphate",
    "potassium": "potassium",
    "iron": "iron",
    "magnesium": "magnesium",
}


def check_fraction(water_change_fraction: float) -> float:
    """Return ``water_change_fraction`` as float, rejecting values outside 0-1."""

    try:
        fraction = float(water_change_fraction)
    except (TypeError, ValueError):
        raise InvalidInputError("water_change_fraction must be a number") from None
    if not 0 <= fraction <= 1:
        raise InvalidInputError("water_change_fraction must be between 0 and 1")
    return fraction


def source_nutrients(source: WaterSourceProfile) -> NutrientTotals:
    """Return elemental ppm of the tracked nutrients present in ``source``."""

    levels: Dict[str, float] = {}
    for nutrient in NUTRIENTS:
        analyte = SOURCE_ANALYTES[nutrient]
        value = source.value(analyte)
        levels[nutrient] = from_display_unit(analyte, value) if value else 0.0
    return NutrientTotals(**levels)


def contribution(source: WaterSourceProfile, water_change_fraction: float) -> NutrientTotals:
    """Return ppm added to the tank when ``water_change_fraction`` is replaced.

    A water change is modeled as volumetric mixing: replacing a fraction of
    the tank carries that fraction of the source concentration. Existing
    in-tank levels are not considered here.
    """

    fraction = check_fraction(water_change_fraction)
    return source_nutrients(source).scale(fraction)

"""Dosing suggestions for elements below their EI band."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping

from .models import (
    NUTRIENTS,
    DosingRecommendation,
    FertilizerComposition,
    InvalidInputError,
    NutrientStatus,
    NutrientTotals,
    PlantDensity,
    LightLevel,
    TankSetup,
)
from .nutrient_status import as_target_range
from .utils import lazy_dataset

TIPS_FILE = "ei_tips.yaml"

# Days over which a deficit is closed by daily dosing.
DOSING_DAYS = 7

_tips = lazy_dataset(TIPS_FILE)

__all__ = ["DOSING_DAYS", "daily_dose_for_deficit", "recommend", "generate_tips"]


def daily_dose_for_deficit(deficit_ppm: float, volume_liters: float, ppm_per_unit: float) -> float:
    """Return the daily amount of product closing ``deficit_ppm`` in a week."""

    if ppm_per_unit <= 0:
        raise InvalidInputError("ppm_per_unit must be positive")
    if volume_liters <= 0:
        raise InvalidInputError("volume_liters must be positive")
    return max(0.0, deficit_ppm) * volume_liters / (DOSING_DAYS * ppm_per_unit)


def recommend(
    status: Mapping[str, NutrientStatus],
    targets: Mapping[str, Any],
    totals: NutrientTotals,
    compositions: Mapping[str, FertilizerComposition] | Iterable[FertilizerComposition],
    volume_liters: float,
) -> List[DosingRecommendation]:
    """Return one suggestion per fertilizer able to supply each low element.

    The deficit is measured to the midpoint of the element's target band.
    Several fertilizers may be suggested for the same element; choosing
    between them is left to the caller. Elements above their band never
    produce a suggestion and products supplying nothing are ignored.
    """

    if volume_liters <= 0:
        raise InvalidInputError("volume_liters must be positive")
    if isinstance(compositions, Mapping):
        products = list(compositions.values())
    else:
        products = list(compositions)
    products = sorted((p for p in products if not p.is_empty), key=lambda p: p.id)

    recommendations: List[DosingRecommendation] = []
    for nutrient in NUTRIENTS:
        if nutrient not in status or NutrientStatus.normalize(status[nutrient]) is not NutrientStatus.LOW:
            continue
        if nutrient not in targets:
            raise InvalidInputError(f"No target range for low nutrient {nutrient}")
        target = as_target_range(targets[nutrient])
        current = totals.get(nutrient)
        deficit = target.midpoint - current
        if deficit <= 0:
            continue
        for fert in products:
            ppm = fert.ppm_for(nutrient)
            if ppm <= 0:
                continue
            daily = daily_dose_for_deficit(deficit, volume_liters, ppm)
            recommendations.append(
                DosingRecommendation(
                    fertilizer_id=fert.id,
                    fertilizer_name=fert.display_name,
                    element=nutrient,
                    recommended_daily_dose=daily,
                    recommended_weekly_dose=daily * DOSING_DAYS,
                    unit=fert.unit,
                    reasoning=(
                        f"{nutrient.capitalize()} is {deficit:.2f} ppm below the "
                        f"{target.midpoint:.2f} ppm weekly target midpoint "
                        f"(currently {current:.2f} ppm)"
                    ),
                )
            )
    return recommendations


def generate_tips(
    setup: TankSetup,
    status: Mapping[str, NutrientStatus],
    totals: NutrientTotals,
    multiplier: float,
) -> List[str]:
    """Return advice for the analysis panel based on setup and verdicts."""

    text: Dict[str, Any] = _tips()
    setup_tips = text.get("setup", {})
    low_tips = text.get("low", {})
    high_tips = text.get("high", {})
    verdict = {n: NutrientStatus.normalize(s) for n, s in status.items()}
    low = {n for n, s in verdict.items() if s is NutrientStatus.LOW}
    high = {n for n, s in verdict.items() if s is NutrientStatus.HIGH}

    tips: List[str] = []

    def _add(source: Mapping[str, str], key: str) -> None:
        value = source.get(key)
        if value:
            tips.append(str(value))

    if not setup.has_co2 and totals.nitrogen > 20:
        _add(setup_tips, "no_co2_high_nitrogen")
    if setup.plant_density is PlantDensity.LOW and "nitrogen" in high:
        _add(setup_tips, "low_density_high_nitrogen")
    if setup.plant_density is PlantDensity.DUTCH and low & {"nitrogen", "phosphorus"}:
        _add(setup_tips, "dutch_low_macros")
    if setup.has_co2 and setup.light_level is LightLevel.HIGH and "iron" in low:
        _add(setup_tips, "high_light_co2_low_iron")
    if multiplier >= 3:
        _add(setup_tips, "high_tech")
    if multiplier <= 0.5:
        _add(setup_tips, "low_tech")

    for nutrient in NUTRIENTS:
        if nutrient in low:
            _add(low_tips, nutrient)
        elif nutrient in high:
            _add(high_tips, nutrient)

    if verdict and all(s is NutrientStatus.OPTIMAL for s in verdict.values()):
        _add(text, "all_optimal")
    _add(text, "water_change")
    return tips

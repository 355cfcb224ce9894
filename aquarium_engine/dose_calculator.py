"""Helpers for the dosage and fertilizer label calculators.

These are the forward and reverse forms of the same relation: a dose of
``amount`` units of a product carrying ``ppm_per_unit`` raises a tank of
``volume_liters`` by ``amount * ppm_per_unit / volume_liters`` ppm.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from .consumption import consumption_multiplier
from .models import NUTRIENTS, FertilizerComposition, FertilizerUnit, InvalidInputError, TankSetup
from .targets import doses_per_week, scaled_targets, target_midpoint

__all__ = [
    "FullDose",
    "nutrient_addition",
    "ppm_per_unit_from_label",
    "calculate_full_dose",
]


@dataclass(slots=True, frozen=True)
class FullDose:
    """Dose of one product reaching the scaled EI midpoint of its limiting element."""

    fertilizer_id: str
    fertilizer_name: str
    limiting_element: str
    weekly_dose: float
    daily_dose: float
    unit: FertilizerUnit
    delivered_ppm: Dict[str, float]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "fertilizer_id": self.fertilizer_id,
            "fertilizer_name": self.fertilizer_name,
            "limiting_element": self.limiting_element,
            "weekly_dose": self.weekly_dose,
            "daily_dose": self.daily_dose,
            "unit": self.unit.value,
            "delivered_ppm": dict(self.delivered_ppm),
        }


def nutrient_addition(amount: float, ppm_per_unit: float, volume_liters: float) -> float:
    """Return ppm added to ``volume_liters`` by ``amount`` units of product."""

    if volume_liters <= 0:
        raise InvalidInputError("volume_liters must be positive")
    if amount < 0 or ppm_per_unit < 0:
        raise InvalidInputError("amount and ppm_per_unit must be non-negative")
    return amount * ppm_per_unit / volume_liters


def ppm_per_unit_from_label(
    element: str,
    dose_amount: float,
    volume_liters: float,
    frequency: str,
    ei_fraction: float = 1.0,
) -> float:
    """Back out ppm per unit from a manufacturer's dosing instruction.

    The label is assumed to deliver ``ei_fraction`` of the weekly EI midpoint
    for ``element`` when dosing ``dose_amount`` per dose at ``frequency``
    into ``volume_liters``.
    """

    if dose_amount <= 0 or volume_liters <= 0 or ei_fraction <= 0:
        raise InvalidInputError("dose_amount, volume_liters and ei_fraction must be positive")
    weekly_target = target_midpoint(element) * ei_fraction
    return weekly_target * volume_liters / (dose_amount * doses_per_week(frequency))


def calculate_full_dose(
    composition: FertilizerComposition,
    setup: TankSetup,
    ei_fraction: float = 1.0,
) -> FullDose | None:
    """Return the weekly dose of ``composition`` for ``setup``.

    A dose is computed for every element the product supplies and the
    smallest one is used so no element overshoots its target. ``None`` is
    returned for products supplying none of the tracked elements.
    """

    if composition.is_empty:
        return None
    targets = scaled_targets(consumption_multiplier(setup), ei_fraction)
    volume = setup.volume_liters

    doses = {
        n: targets[n].midpoint * volume / composition.ppm_for(n)
        for n in NUTRIENTS
        if composition.ppm_for(n) > 0
    }
    limiting = min(doses, key=doses.__getitem__)
    weekly = doses[limiting]
    delivered = {n: nutrient_addition(weekly, composition.ppm_for(n), volume) for n in NUTRIENTS}
    return FullDose(
        fertilizer_id=composition.id,
        fertilizer_name=composition.display_name,
        limiting_element=limiting,
        weekly_dose=weekly,
        daily_dose=weekly / 7,
        unit=composition.unit,
        delivered_ppm=delivered,
    )

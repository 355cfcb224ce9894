"""Nutrient demand of a tank derived from its plant, light and CO2 setup.

The multiplier is the product of three independent uptake factors. The
factor table lives in ``consumption_factors.json`` and can be tuned through
the overlay directory. Unrecognized settings are rejected.
"""

from __future__ import annotations

from typing import Dict, Mapping

from .models import DemandLevel, InvalidInputError, LightLevel, PlantDensity, TankSetup
from .utils import lazy_dataset

DATA_FILE = "consumption_factors.json"

_factors = lazy_dataset(DATA_FILE)

__all__ = [
    "density_factor",
    "light_factor",
    "co2_factor",
    "consumption_multiplier",
    "multiplier_breakdown",
    "classify_demand",
    "describe_consumption",
]


def _table(section: str) -> Mapping[str, float]:
    table = _factors().get(section)
    if not isinstance(table, Mapping):
        raise ValueError(f"{DATA_FILE} is missing the {section!r} table")
    return table


def _factor(section: str, key: str) -> float:
    value = _table(section).get(key)
    if value is None:
        raise InvalidInputError(f"No {section} factor defined for {key!r}")
    factor = float(value)
    if factor <= 0:
        raise ValueError(f"{section} factor for {key!r} must be positive")
    return factor


def density_factor(density: PlantDensity | str) -> float:
    return _factor("plant_density", PlantDensity.normalize(density).value)


def light_factor(light: LightLevel | str) -> float:
    return _factor("light_level", LightLevel.normalize(light).value)


def co2_factor(has_co2: bool) -> float:
    return _factor("co2", "enabled" if has_co2 else "disabled")


def multiplier_breakdown(setup: TankSetup) -> Dict[str, float]:
    """Return the individual factors and their product for ``setup``."""

    density = density_factor(setup.plant_density)
    light = light_factor(setup.light_level)
    co2 = co2_factor(setup.has_co2)
    return {
        "density": density,
        "light": light,
        "co2": co2,
        "multiplier": density * light * co2,
    }


def consumption_multiplier(setup: TankSetup) -> float:
    """Return the demand multiplier applied to EI target bands.

    The result is not clamped; with the bundled factors it ranges from
    ``0.42`` (low density, low light, no CO2) to ``5.4`` (dutch, high light,
    CO2).
    """

    return multiplier_breakdown(setup)["multiplier"]


def classify_demand(multiplier: float) -> DemandLevel:
    """Return the presentation band for ``multiplier``.

    Below the ``medium`` threshold demand is low, from ``medium`` up to but
    excluding ``high`` it is medium and anything above is high.
    """

    if multiplier <= 0:
        raise InvalidInputError("multiplier must be positive")
    bands = _table("demand_bands")
    if multiplier >= float(bands["high"]):
        return DemandLevel.HIGH
    if multiplier >= float(bands["medium"]):
        return DemandLevel.MEDIUM
    return DemandLevel.LOW


def describe_consumption(multiplier: float) -> str:
    """Return a human readable consumption label for ``multiplier``."""

    if multiplier <= 0:
        raise InvalidInputError("multiplier must be positive")
    steps = _factors().get("descriptions", [])
    for step in steps:
        limit = step.get("max")
        if limit is None or multiplier <= float(limit):
            return str(step["label"])
    return str(steps[-1]["label"]) if steps else ""

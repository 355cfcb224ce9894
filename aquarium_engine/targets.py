"""Estimative Index reference ranges and water chemistry presets.

Weekly EI bands are defined per element (N, P, K, Fe, Mg) in
``ei_targets.json``. Test kits and charts usually report nitrate (NO3) and
phosphate (PO4) instead of elemental nitrogen and phosphorus, so the
conversion factors in ``unit_conversions.json`` are the only place where the
two unit families meet. Values are never converted implicitly: callers state
which form they hold through :func:`to_display_unit` and
:func:`from_display_unit`.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from .models import NUTRIENTS, InvalidInputError, TargetRange
from .utils import lazy_dataset, list_dataset_entries, normalize_key, parse_range

TARGET_FILE = "ei_targets.json"
CONVERSION_FILE = "unit_conversions.json"
PRESET_FILE = "water_presets.json"
FREQUENCY_FILE = "dosing_frequencies.json"

_targets = lazy_dataset(TARGET_FILE)
_conversions = lazy_dataset(CONVERSION_FILE)
_presets = lazy_dataset(PRESET_FILE)
_frequencies = lazy_dataset(FREQUENCY_FILE)

__all__ = [
    "get_target_range",
    "base_targets",
    "scaled_targets",
    "target_midpoint",
    "list_display_forms",
    "get_conversion",
    "to_display_unit",
    "from_display_unit",
    "get_display_range",
    "list_mix_presets",
    "get_mix_preset",
    "list_livestock_presets",
    "get_livestock_preset",
    "match_livestock_presets",
    "list_dosing_frequencies",
    "doses_per_week",
]


def _check_nutrient(nutrient: str) -> str:
    key = normalize_key(nutrient)
    if key not in NUTRIENTS:
        raise InvalidInputError(f"Unknown nutrient {nutrient!r}")
    return key


def _to_range(name: str, value: Any) -> TargetRange:
    if isinstance(value, Mapping):
        value = (value.get("min"), value.get("max"))
    bounds = parse_range(value) if value is not None else None
    if bounds is None:
        raise InvalidInputError(f"Invalid target range for {name}: {value!r}")
    return TargetRange(*bounds)


def get_target_range(nutrient: str) -> TargetRange:
    """Return the unscaled weekly EI band for ``nutrient``."""

    key = _check_nutrient(nutrient)
    value = _targets().get(key)
    if value is None:
        raise InvalidInputError(f"No EI target defined for {key}")
    return _to_range(key, value)


def base_targets() -> Dict[str, TargetRange]:
    """Return unscaled EI bands for every tracked element."""

    return {n: get_target_range(n) for n in NUTRIENTS}


def scaled_targets(multiplier: float, ei_fraction: float = 1.0) -> Dict[str, TargetRange]:
    """Return EI bands scaled by a consumption ``multiplier``.

    ``ei_fraction`` expresses partial EI regimes, e.g. ``0.5`` for half EI.
    """

    if multiplier <= 0:
        raise InvalidInputError("multiplier must be positive")
    if ei_fraction <= 0:
        raise InvalidInputError("ei_fraction must be positive")
    factor = multiplier * ei_fraction
    return {n: r.scaled(factor) for n, r in base_targets().items()}


def target_midpoint(nutrient: str) -> float:
    """Return the middle of the unscaled weekly band for ``nutrient``."""

    return get_target_range(nutrient).midpoint


def list_display_forms() -> list[str]:
    """Return the measured forms (nitrate, phosphate, ...) with conversions."""

    return list_dataset_entries(_conversions())


def get_conversion(form: str) -> tuple[str, float]:
    """Return ``(element, factor)`` for a measured ``form``.

    ``factor`` converts ppm of the element into ppm of the measured form.
    """

    key = normalize_key(form)
    entry = _conversions().get(key)
    if not isinstance(entry, Mapping):
        raise InvalidInputError(f"Unknown display form {form!r}")
    element = _check_nutrient(entry.get("element", ""))
    try:
        factor = float(entry.get("factor"))
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid conversion factor for {key}") from None
    if factor <= 0:
        raise InvalidInputError(f"Invalid conversion factor for {key}")
    return element, factor


def to_display_unit(form: str, element_ppm: float) -> float:
    """Return ``element_ppm`` expressed as ppm of ``form`` (e.g. N -> NO3)."""

    _, factor = get_conversion(form)
    return element_ppm * factor


def from_display_unit(form: str, measured_ppm: float) -> float:
    """Return elemental ppm for a measured ``form`` value (e.g. NO3 -> N)."""

    _, factor = get_conversion(form)
    return measured_ppm / factor


def get_display_range(form: str, multiplier: float = 1.0) -> TargetRange:
    """Return the chart band for a measured ``form`` such as ``"nitrate"``."""

    element, factor = get_conversion(form)
    return get_target_range(element).scaled(factor * multiplier)


def list_mix_presets() -> list[str]:
    """Return names of the GH/KH presets for the water mix calculator."""

    return list_dataset_entries(_presets().get("mix", {}))


def get_mix_preset(name: str) -> Dict[str, float]:
    """Return ``{"gh": .., "kh": ..}`` targets for preset ``name``."""

    preset = _presets().get("mix", {}).get(normalize_key(name))
    if not isinstance(preset, Mapping):
        raise InvalidInputError(f"Unknown mix preset {name!r}")
    return {"gh": float(preset["gh"]), "kh": float(preset["kh"])}


def list_livestock_presets() -> list[str]:
    return list_dataset_entries(_presets().get("livestock", {}))


def get_livestock_preset(name: str) -> Dict[str, TargetRange]:
    """Return TDS/GH/KH ranges suited to livestock ``name``."""

    preset = _presets().get("livestock", {}).get(normalize_key(name))
    if not isinstance(preset, Mapping):
        raise InvalidInputError(f"Unknown livestock preset {name!r}")
    return {param: _to_range(f"{name}.{param}", value) for param, value in preset.items()}


def match_livestock_presets(
    tds: float | None = None, gh: float | None = None, kh: float | None = None
) -> list[str]:
    """Return livestock presets whose ranges contain every supplied value."""

    values = {"tds": tds, "gh": gh, "kh": kh}
    matches: list[str] = []
    for name in list_livestock_presets():
        ranges = get_livestock_preset(name)
        if all(
            value is None or param not in ranges or ranges[param].contains(value)
            for param, value in values.items()
        ):
            matches.append(name)
    return matches


def list_dosing_frequencies() -> list[str]:
    return list_dataset_entries(_frequencies())


def doses_per_week(frequency: str) -> float:
    """Return how many doses per week a label frequency stands for."""

    value = _frequencies().get(normalize_key(frequency))
    if value is None:
        raise InvalidInputError(f"Unknown dosing frequency {frequency!r}")
    return float(value)

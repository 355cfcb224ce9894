"""Blend RO and tap water to reach GH/KH targets.

Mixing is linear: ``result = ro * p + tap * (1 - p)`` where ``p`` is the RO
fraction. For a single parameter the inverse is
``p = (tap - target) / (tap - ro)`` clamped to ``[0, 1]``.

``balanced`` mode averages the fractions computed independently for GH and
KH. Both targets are met only when they are consistent with the two sources;
otherwise the result is a compromise and the caller should show both
resulting values.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .models import InvalidInputError, MixMode, MixResult, ensure_finite, ensure_non_negative

_LOGGER = logging.getLogger(__name__)

# Fraction used when both sources share the same value for a parameter.
DEGENERATE_FRACTION = 0.5

__all__ = [
    "DEGENERATE_FRACTION",
    "ro_fraction_for",
    "is_achievable",
    "blend",
    "solve_mix",
    "mix_volumes",
]


def _hardness(obj: Mapping[str, Any] | Any, name: str, required: tuple[str, ...]) -> Dict[str, float | None]:
    """Return GH/KH of ``obj``; parameters in ``required`` must be present."""
    values: Dict[str, float | None] = {}
    for param in ("gh", "kh"):
        raw = obj.get(param) if isinstance(obj, Mapping) else getattr(obj, param, None)
        if raw is None:
            if param in required:
                raise InvalidInputError(f"{name}.{param} is required for this mix mode")
            values[param] = None
            continue
        values[param] = ensure_non_negative(f"{name}.{param}", raw)
    return values


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def ro_fraction_for(target: float, ro: float, tap: float) -> float:
    """Return the RO fraction giving ``target`` for one parameter."""

    if tap == ro:
        return DEGENERATE_FRACTION
    return _clamp01((tap - target) / (tap - ro))


def is_achievable(target: float, ro: float, tap: float) -> bool:
    """Return ``True`` if ``target`` lies between the two source values."""

    return min(ro, tap) <= target <= max(ro, tap)


def blend(ro_value: float, tap_value: float, ro_fraction: float) -> float:
    """Return the value of a mix holding ``ro_fraction`` of RO water."""

    ro_fraction = ensure_finite("ro_fraction", ro_fraction)
    if not 0 <= ro_fraction <= 1:
        raise InvalidInputError("ro_fraction must be between 0 and 1")
    return ro_value * ro_fraction + tap_value * (1 - ro_fraction)


def solve_mix(
    ro: Mapping[str, Any] | Any,
    tap: Mapping[str, Any] | Any,
    target: Mapping[str, Any] | Any,
    mode: MixMode | str = MixMode.BALANCED,
) -> MixResult:
    """Return the RO/tap blend for ``target`` GH and/or KH.

    Targets outside the range spanned by the two sources cannot be reached by
    blending; the closest feasible fraction is returned with the matching
    ``*_achievable`` flag cleared instead of raising.

    Every parameter the mode solves for (both in ``balanced`` mode) must be
    given for ``ro``, ``tap`` and ``target``. The other parameter is
    optional; when either source lacks it the resulting value is ``None``.
    """

    mix_mode = MixMode.normalize(mode)
    active = ("gh", "kh") if mix_mode is MixMode.BALANCED else (mix_mode.value,)
    ro_v = _hardness(ro, "ro", active)
    tap_v = _hardness(tap, "tap", active)
    target_v = _hardness(target, "target", active)

    fractions = {p: ro_fraction_for(target_v[p], ro_v[p], tap_v[p]) for p in active}
    degenerate = tuple(p for p in active if ro_v[p] == tap_v[p])
    if degenerate:
        _LOGGER.debug("RO and tap share %s; using %.1f fraction", "/".join(degenerate), DEGENERATE_FRACTION)

    ro_fraction = sum(fractions.values()) / len(active)
    results: Dict[str, float | None] = {}
    achievable: Dict[str, bool] = {}
    for param in ("gh", "kh"):
        ro_value, tap_value, wanted = ro_v[param], tap_v[param], target_v[param]
        known = ro_value is not None and tap_value is not None
        results[param] = blend(ro_value, tap_value, ro_fraction) if known else None
        # A parameter without a target or source values has nothing to miss.
        achievable[param] = not known or wanted is None or is_achievable(wanted, ro_value, tap_value)

    return MixResult(
        ro_fraction=ro_fraction,
        tap_fraction=1 - ro_fraction,
        result_gh=results["gh"],
        result_kh=results["kh"],
        mode=mix_mode,
        gh_achievable=achievable["gh"],
        kh_achievable=achievable["kh"],
        degenerate=degenerate,
    )


def mix_volumes(result: MixResult, total_liters: float) -> Dict[str, float]:
    """Return liters of RO and tap water for ``total_liters`` of mix."""

    if total_liters <= 0:
        raise InvalidInputError("total_liters must be positive")
    return {
        "ro_liters": total_liters * result.ro_fraction,
        "tap_liters": total_liters * result.tap_fraction,
    }

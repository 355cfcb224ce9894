"""Grams of dry remineralizing salt needed to reach a TDS or GH target."""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from .models import (
    InvalidInputError,
    RemineralizationMode,
    RemineralizationResult,
    RemineralizationStatus,
    ensure_finite,
    ensure_non_negative,
)
from .utils import lazy_dataset, list_dataset_entries, normalize_key

DATA_FILE = "remineralizers.json"

TARGET_ALREADY_REACHED = RemineralizationStatus.TARGET_ALREADY_REACHED

_products = lazy_dataset(DATA_FILE)

__all__ = [
    "TARGET_ALREADY_REACHED",
    "Additive",
    "list_remineralizers",
    "get_remineralizer",
    "solve_remineralization",
]


@dataclass(slots=True, frozen=True)
class Additive:
    """Parameter increase from one gram of product per liter of water."""

    tds_per_gram_per_liter: float = 0.0
    gh_per_gram_per_liter: float = 0.0
    kh_per_gram_per_liter: float = 0.0
    name: str | None = None

    def __post_init__(self) -> None:
        for attr in ("tds_per_gram_per_liter", "gh_per_gram_per_liter", "kh_per_gram_per_liter"):
            object.__setattr__(self, attr, ensure_finite(attr, getattr(self, attr)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Additive":
        return cls(
            tds_per_gram_per_liter=data.get("tds_per_gram_per_liter") or 0.0,
            gh_per_gram_per_liter=data.get("gh_per_gram_per_liter") or 0.0,
            kh_per_gram_per_liter=data.get("kh_per_gram_per_liter") or 0.0,
            name=data.get("name"),
        )

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


def list_remineralizers() -> list[str]:
    """Return ids of the bundled remineralizer products."""

    return list_dataset_entries(_products())


def get_remineralizer(product_id: str) -> Additive:
    """Return per-gram rates of a bundled product."""

    data = _products().get(normalize_key(product_id))
    if not isinstance(data, Mapping):
        raise InvalidInputError(f"Unknown remineralizer {product_id!r}")
    return Additive.from_mapping(data)


def solve_remineralization(
    additive: Additive | Mapping[str, Any],
    starting_tds: float,
    target: Mapping[str, Any],
    volume_liters: float,
    *,
    starting_gh: float = 0.0,
    starting_kh: float = 0.0,
) -> RemineralizationResult:
    """Return the dose of ``additive`` reaching ``target`` and the resulting water.

    ``target`` holds ``mode`` (``"tds"`` or ``"gh"``) and ``value``. A
    non-positive rate for the active mode is rejected with
    :class:`InvalidInputError`. When the water already meets the target the
    result carries ``status="target_already_reached"`` and a zero dose.
    """

    if not isinstance(additive, Additive):
        additive = Additive.from_mapping(additive)
    mode = RemineralizationMode.normalize(target.get("mode", "tds"))
    if "value" not in target:
        raise InvalidInputError("target value is required")
    value = ensure_finite("target value", target["value"])
    volume_liters = ensure_non_negative("volume_liters", volume_liters)
    if volume_liters == 0:
        raise InvalidInputError("volume_liters must be positive")
    starting_tds = ensure_non_negative("starting_tds", starting_tds)
    starting_gh = ensure_non_negative("starting_gh", starting_gh)
    starting_kh = ensure_non_negative("starting_kh", starting_kh)
    if min(additive.tds_per_gram_per_liter, additive.gh_per_gram_per_liter, additive.kh_per_gram_per_liter) < 0:
        raise InvalidInputError("invalid rate: per-gram rates must be non-negative")

    if mode is RemineralizationMode.TDS:
        rate, start = additive.tds_per_gram_per_liter, starting_tds
    else:
        rate, start = additive.gh_per_gram_per_liter, starting_gh
    if rate <= 0:
        raise InvalidInputError(f"invalid rate: {mode.value} per gram must be positive")

    deficit = value - start
    if deficit <= 0:
        return RemineralizationResult(
            grams_per_liter=0.0,
            total_grams=0.0,
            result_tds=starting_tds,
            result_gh=starting_gh,
            result_kh=starting_kh,
            status=TARGET_ALREADY_REACHED,
        )

    grams_per_liter = deficit / rate
    if not math.isfinite(grams_per_liter):
        raise InvalidInputError(f"invalid rate: {mode.value} per gram is too small")
    return RemineralizationResult(
        grams_per_liter=grams_per_liter,
        total_grams=grams_per_liter * volume_liters,
        result_tds=starting_tds + grams_per_liter * additive.tds_per_gram_per_liter,
        result_gh=starting_gh + grams_per_liter * additive.gh_per_gram_per_liter,
        result_kh=starting_kh + grams_per_liter * additive.kh_per_gram_per_liter,
    )

"""Value objects passed in and out of the dosing engine.

Every container is an immutable dataclass built fresh for each call. Input
objects validate themselves on construction so a calculation never starts
with data it would have to reject halfway through.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Mapping

from .utils import normalize_key

__all__ = [
    "NUTRIENTS",
    "InvalidInputError",
    "PlantDensity",
    "LightLevel",
    "NutrientStatus",
    "FertilizerUnit",
    "MixMode",
    "RemineralizationMode",
    "DemandLevel",
    "RemineralizationStatus",
    "ensure_finite",
    "ensure_non_negative",
    "TankSetup",
    "FertilizerComposition",
    "DosingEvent",
    "WaterSourceProfile",
    "NutrientTotals",
    "TargetRange",
    "ProjectionPoint",
    "DosingRecommendation",
    "MixResult",
    "RemineralizationResult",
    "AggregationResult",
]

# Elements tracked by the EI method, in display order.
NUTRIENTS: tuple[str, ...] = ("nitrogen", "phosphorus", "potassium", "iron", "magnesium")


class InvalidInputError(ValueError):
    """Raised when engine input is rejected before any computation."""


class _NormalizedEnum(str, Enum):
    """String enum accepting case and separator variants of its values."""

    @classmethod
    def normalize(cls, value: Any):
        if isinstance(value, cls):
            return value
        try:
            return cls(normalize_key(value))
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise InvalidInputError(
                f"Unknown {cls.__name__} {value!r}; expected one of {allowed}"
            ) from None


class PlantDensity(_NormalizedEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    DUTCH = "dutch"


class LightLevel(_NormalizedEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class NutrientStatus(_NormalizedEnum):
    """Verdict of comparing a weekly total against its target band."""

    LOW = "low"
    OPTIMAL = "optimal"
    HIGH = "high"


class FertilizerUnit(_NormalizedEnum):
    ML = "ml"
    G = "g"


class MixMode(_NormalizedEnum):
    GH = "gh"
    KH = "kh"
    BALANCED = "balanced"


class RemineralizationMode(_NormalizedEnum):
    TDS = "tds"
    GH = "gh"


class DemandLevel(_NormalizedEnum):
    """Presentation banding of a consumption multiplier."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RemineralizationStatus(_NormalizedEnum):
    OK = "ok"
    TARGET_ALREADY_REACHED = "target_already_reached"


def ensure_finite(name: str, value: Any) -> float:
    """Return ``value`` as float, rejecting missing, NaN and infinite input."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidInputError(f"{name} must be finite")
    return number


def ensure_non_negative(name: str, value: Any) -> float:
    number = ensure_finite(name, value)
    if number < 0:
        raise InvalidInputError(f"{name} must be non-negative")
    return number


@dataclass(slots=True, frozen=True)
class TankSetup:
    """Biological and physical setup of an aquarium."""

    volume_liters: float
    plant_density: PlantDensity = PlantDensity.MEDIUM
    light_level: LightLevel = LightLevel.MEDIUM
    has_co2: bool = False

    def __post_init__(self) -> None:
        volume = ensure_non_negative("volume_liters", self.volume_liters)
        if volume == 0:
            raise InvalidInputError("volume_liters must be positive")
        object.__setattr__(self, "volume_liters", volume)
        object.__setattr__(self, "plant_density", PlantDensity.normalize(self.plant_density))
        object.__setattr__(self, "light_level", LightLevel.normalize(self.light_level))
        object.__setattr__(self, "has_co2", bool(self.has_co2))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "volume_liters": self.volume_liters,
            "plant_density": self.plant_density.value,
            "light_level": self.light_level.value,
            "has_co2": self.has_co2,
        }


@dataclass(slots=True, frozen=True)
class FertilizerComposition:
    """Nutrient content of one unit (ml or g) of a fertilizer product."""

    id: str
    unit: FertilizerUnit = FertilizerUnit.ML
    nitrogen: float = 0.0
    phosphorus: float = 0.0
    potassium: float = 0.0
    iron: float = 0.0
    magnesium: float = 0.0
    name: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", FertilizerUnit.normalize(self.unit))
        for nutrient in NUTRIENTS:
            value = getattr(self, nutrient)
            # Unknown composition fields count as zero.
            value = 0.0 if value is None else ensure_non_negative(f"{self.id}.{nutrient}", value)
            object.__setattr__(self, nutrient, value)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def is_empty(self) -> bool:
        """Return ``True`` when the product supplies none of the tracked elements."""
        return all(getattr(self, n) == 0 for n in NUTRIENTS)

    def ppm_for(self, nutrient: str) -> float:
        if nutrient not in NUTRIENTS:
            raise InvalidInputError(f"Unknown nutrient {nutrient!r}")
        return getattr(self, nutrient)

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["unit"] = self.unit.value
        return data


@dataclass(slots=True, frozen=True)
class DosingEvent:
    """A single logged fertilizer addition."""

    fertilizer_id: str
    amount: float
    date: date

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", ensure_non_negative("amount", self.amount))
        when = self.date
        if isinstance(when, datetime):
            when = when.date()
        elif isinstance(when, str):
            try:
                when = date.fromisoformat(when[:10])
            except ValueError:
                raise InvalidInputError(f"Invalid dosing date {self.date!r}") from None
        if not isinstance(when, date):
            raise InvalidInputError(f"Invalid dosing date {self.date!r}")
        object.__setattr__(self, "date", when)


@dataclass(slots=True, frozen=True)
class WaterSourceProfile:
    """Measured chemistry of a water source.

    Hardness is in degrees (dGH/dKH), ``ph`` is unitless and every other
    field is mg/L. Unmeasured values stay ``None``.
    """

    gh: float | None = None
    kh: float | None = None
    ph: float | None = None
    tds: float | None = None
    nitrate: float | None = None
    nitrite: float | None = None
    ammonia: float | None = None
    phosphate: float | None = None
    calcium: float | None = None
    magnesium: float | None = None
    potassium: float | None = None
    sodium: float | None = None
    chloride: float | None = None
    sulfate: float | None = None
    iron: float | None = None
    manganese: float | None = None
    copper: float | None = None
    zinc: float | None = None
    boron: float | None = None
    molybdenum: float | None = None
    cobalt: float | None = None
    silicate: float | None = None

    def __post_init__(self) -> None:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            object.__setattr__(self, f.name, ensure_non_negative(f.name, value))
        if self.ph is not None and self.ph > 14:
            raise InvalidInputError("ph must be within 0-14")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "WaterSourceProfile":
        """Return a profile from ``data`` ignoring keys that are not analytes."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def value(self, analyte: str) -> float:
        """Return ``analyte`` in mg/L treating unmeasured values as ``0.0``."""
        return float(getattr(self, analyte) or 0.0)

    def as_dict(self) -> Dict[str, float]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass(slots=True, frozen=True)
class NutrientTotals:
    """Concentration of each tracked element in ppm."""

    nitrogen: float = 0.0
    phosphorus: float = 0.0
    potassium: float = 0.0
    iron: float = 0.0
    magnesium: float = 0.0

    def __post_init__(self) -> None:
        for nutrient in NUTRIENTS:
            object.__setattr__(self, nutrient, ensure_non_negative(nutrient, getattr(self, nutrient)))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NutrientTotals":
        return cls(**{n: data.get(n) or 0.0 for n in NUTRIENTS})

    @classmethod
    def clamped(cls, values: Mapping[str, float]) -> "NutrientTotals":
        """Return totals from ``values`` with negative entries raised to zero."""
        return cls(**{n: max(0.0, float(values.get(n, 0.0))) for n in NUTRIENTS})

    def get(self, nutrient: str) -> float:
        if nutrient not in NUTRIENTS:
            raise InvalidInputError(f"Unknown nutrient {nutrient!r}")
        return getattr(self, nutrient)

    def scale(self, factor: float) -> "NutrientTotals":
        return NutrientTotals.clamped({n: getattr(self, n) * factor for n in NUTRIENTS})

    def __add__(self, other: "NutrientTotals") -> "NutrientTotals":
        if not isinstance(other, NutrientTotals):
            return NotImplemented
        return NutrientTotals(**{n: getattr(self, n) + getattr(other, n) for n in NUTRIENTS})

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class TargetRange:
    """Inclusive ppm band for one element."""

    min: float
    max: float

    def __post_init__(self) -> None:
        low = ensure_non_negative("min", self.min)
        high = ensure_non_negative("max", self.max)
        if low > high:
            raise InvalidInputError(f"Target range min {low} exceeds max {high}")
        object.__setattr__(self, "min", low)
        object.__setattr__(self, "max", high)

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2

    def scaled(self, factor: float) -> "TargetRange":
        if factor <= 0:
            raise InvalidInputError("scale factor must be positive")
        return TargetRange(self.min * factor, self.max * factor)

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def as_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(slots=True, frozen=True)
class ProjectionPoint:
    day: int
    nitrogen: float
    phosphorus: float
    potassium: float
    iron: float
    magnesium: float
    date: date | None = None

    @property
    def levels(self) -> NutrientTotals:
        return NutrientTotals(**{n: getattr(self, n) for n in NUTRIENTS})

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.date is None:
            data.pop("date")
        else:
            data["date"] = self.date.isoformat()
        return data


@dataclass(slots=True, frozen=True)
class DosingRecommendation:
    fertilizer_id: str
    fertilizer_name: str
    element: str
    recommended_daily_dose: float
    recommended_weekly_dose: float
    unit: FertilizerUnit
    reasoning: str

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["unit"] = self.unit.value
        return data


@dataclass(slots=True, frozen=True)
class MixResult:
    """Blend of RO and tap water for GH/KH targets.

    ``gh_achievable``/``kh_achievable`` report whether the target lies between
    the two sources. ``degenerate`` lists parameters where both sources are
    identical so the neutral 50/50 default was used.
    """

    ro_fraction: float
    tap_fraction: float
    result_gh: float | None
    result_kh: float | None
    mode: MixMode
    gh_achievable: bool = True
    kh_achievable: bool = True
    degenerate: tuple[str, ...] = field(default_factory=tuple)

    @property
    def achievable(self) -> bool:
        """Return whether the targets driving ``mode`` can be met by blending."""
        if self.mode is MixMode.GH:
            return self.gh_achievable
        if self.mode is MixMode.KH:
            return self.kh_achievable
        return self.gh_achievable and self.kh_achievable

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["mode"] = self.mode.value
        data["degenerate"] = list(self.degenerate)
        data["achievable"] = self.achievable
        return data


@dataclass(slots=True, frozen=True)
class RemineralizationResult:
    grams_per_liter: float
    total_grams: float
    result_tds: float
    result_gh: float | None
    result_kh: float | None
    status: RemineralizationStatus = RemineralizationStatus.OK

    @property
    def target_reached(self) -> bool:
        return self.status is RemineralizationStatus.TARGET_ALREADY_REACHED

    def as_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass(slots=True, frozen=True)
class AggregationResult:
    """Weekly totals plus bookkeeping about the events that produced them."""

    totals: NutrientTotals
    used_events: int
    skipped_events: int
    skipped_ids: tuple[str, ...] = ()

    def as_dict(self) -> Dict[str, Any]:
        return {
            "totals": self.totals.as_dict(),
            "used_events": self.used_events,
            "skipped_events": self.skipped_events,
            "skipped_ids": list(self.skipped_ids),
        }

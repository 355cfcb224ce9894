"""Voluptuous schemas converting plain records into engine value objects.

The surrounding application stores aquariums, fertilizers, journal entries
and water sources as JSON documents. These schemas validate such documents
and the ``parse_*`` helpers turn them into the immutable inputs the engine
expects. Validation failures surface as :class:`InvalidInputError`.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping

import voluptuous as vol

from .models import (
    NUTRIENTS,
    DosingEvent,
    FertilizerComposition,
    FertilizerUnit,
    InvalidInputError,
    LightLevel,
    PlantDensity,
    TankSetup,
    WaterSourceProfile,
)
from .utils import normalize_key

__all__ = [
    "TANK_SCHEMA",
    "FERTILIZER_SCHEMA",
    "DOSING_EVENT_SCHEMA",
    "WATER_SOURCE_SCHEMA",
    "ANALYSIS_PAYLOAD_SCHEMA",
    "parse_tank",
    "parse_fertilizers",
    "parse_events",
    "parse_water_source",
    "parse_payload",
]


def _choice(enum_cls) -> vol.All:
    return vol.All(str, normalize_key, vol.In([m.value for m in enum_cls]))


def _iso_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError as err:
        raise vol.Invalid(f"invalid date {value!r}") from err


NON_NEGATIVE = vol.All(vol.Coerce(float), vol.Range(min=0))
OPTIONAL_PPM = vol.Any(None, NON_NEGATIVE)

TANK_SCHEMA = vol.Schema(
    {
        vol.Required("volume_liters"): vol.All(vol.Coerce(float), vol.Range(min=0, min_included=False)),
        vol.Optional("plant_density", default=PlantDensity.MEDIUM.value): _choice(PlantDensity),
        vol.Optional("light_level", default=LightLevel.MEDIUM.value): _choice(LightLevel),
        vol.Optional("has_co2", default=False): vol.Boolean(),
    },
    extra=vol.REMOVE_EXTRA,
)

FERTILIZER_SCHEMA = vol.Schema(
    {
        vol.Required("id"): vol.All(vol.Coerce(str), vol.Length(min=1)),
        vol.Optional("name"): vol.Any(None, str),
        vol.Optional("unit", default=FertilizerUnit.ML.value): _choice(FertilizerUnit),
        vol.Optional("ppm_per_unit", default=dict): vol.Schema(
            {vol.Optional(n): OPTIONAL_PPM for n in NUTRIENTS}
        ),
    },
    extra=vol.REMOVE_EXTRA,
)

DOSING_EVENT_SCHEMA = vol.Schema(
    {
        vol.Required("fertilizer_id"): vol.Coerce(str),
        vol.Required("amount"): NON_NEGATIVE,
        vol.Required("date"): _iso_date,
    },
    extra=vol.REMOVE_EXTRA,
)

WATER_SOURCE_SCHEMA = vol.Schema(
    {
        **{
            vol.Optional(name): OPTIONAL_PPM
            for name in WaterSourceProfile.__dataclass_fields__
            if name != "ph"
        },
        vol.Optional("ph"): vol.Any(None, vol.All(vol.Coerce(float), vol.Range(min=0, max=14))),
    },
    extra=vol.REMOVE_EXTRA,
)

ANALYSIS_PAYLOAD_SCHEMA = vol.Schema(
    {
        vol.Required("tank"): TANK_SCHEMA,
        vol.Optional("fertilizers", default=list): [FERTILIZER_SCHEMA],
        vol.Optional("events", default=list): [DOSING_EVENT_SCHEMA],
        vol.Optional("water_source"): vol.Any(None, WATER_SOURCE_SCHEMA),
        vol.Optional("today"): vol.Any(None, _iso_date),
    },
    extra=vol.REMOVE_EXTRA,
)


def _validate(schema: vol.Schema, data: Any, what: str) -> Any:
    try:
        return schema(data)
    except vol.Invalid as err:
        raise InvalidInputError(f"Invalid {what}: {err}") from err


def _tank(data: Mapping[str, Any]) -> TankSetup:
    return TankSetup(**data)


def _fertilizer(data: Mapping[str, Any]) -> FertilizerComposition:
    return FertilizerComposition(
        id=data["id"],
        unit=data["unit"],
        name=data.get("name"),
        **{n: data["ppm_per_unit"].get(n) or 0.0 for n in NUTRIENTS},
    )


def _fertilizer_map(records: Iterable[Mapping[str, Any]]) -> Dict[str, FertilizerComposition]:
    result: Dict[str, FertilizerComposition] = {}
    for record in records:
        fert = _fertilizer(record)
        if fert.id in result:
            raise InvalidInputError(f"Duplicate fertilizer id {fert.id!r}")
        result[fert.id] = fert
    return result


def parse_tank(data: Mapping[str, Any]) -> TankSetup:
    """Return a :class:`TankSetup` from an aquarium record."""

    return _tank(_validate(TANK_SCHEMA, data, "tank"))


def parse_fertilizers(records: Iterable[Mapping[str, Any]]) -> Dict[str, FertilizerComposition]:
    """Return fertilizer compositions keyed by id."""

    return _fertilizer_map(_validate(FERTILIZER_SCHEMA, r, "fertilizer") for r in records)


def parse_events(records: Iterable[Mapping[str, Any]]) -> List[DosingEvent]:
    return [DosingEvent(**_validate(DOSING_EVENT_SCHEMA, r, "dosing event")) for r in records]


def parse_water_source(data: Mapping[str, Any]) -> WaterSourceProfile:
    return WaterSourceProfile(**_validate(WATER_SOURCE_SCHEMA, data, "water source"))


def parse_payload(data: Mapping[str, Any]) -> Dict[str, Any]:
    """Return engine inputs from a combined analysis document.

    The result holds ``setup``, ``compositions``, ``events``, ``source``
    (or ``None``) and ``today`` (or ``None``).
    """

    payload = _validate(ANALYSIS_PAYLOAD_SCHEMA, data, "analysis payload")
    source = payload.get("water_source")
    return {
        "setup": _tank(payload["tank"]),
        "compositions": _fertilizer_map(payload["fertilizers"]),
        "events": [DosingEvent(**e) for e in payload["events"]],
        "source": WaterSourceProfile(**source) if source else None,
        "today": payload.get("today"),
    }

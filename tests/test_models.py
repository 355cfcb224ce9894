from datetime import date, datetime

import pytest

from aquarium_engine.models import (
    DosingEvent,
    FertilizerComposition,
    FertilizerUnit,
    InvalidInputError,
    LightLevel,
    NutrientTotals,
    PlantDensity,
    TankSetup,
    TargetRange,
    WaterSourceProfile,
)


def test_tank_setup_normalizes_enums():
    setup = TankSetup(volume_liters="60", plant_density="Dutch", light_level="HIGH", has_co2=1)
    assert setup.volume_liters == 60.0
    assert setup.plant_density is PlantDensity.DUTCH
    assert setup.light_level is LightLevel.HIGH
    assert setup.has_co2 is True
    assert setup.as_dict()["plant_density"] == "dutch"


def test_tank_setup_rejects_unknown_enum():
    with pytest.raises(InvalidInputError):
        TankSetup(volume_liters=60, plant_density="jungle")
    with pytest.raises(ValueError):
        TankSetup(volume_liters=60, light_level="blinding")


@pytest.mark.parametrize("volume", [0, -5])
def test_tank_setup_rejects_bad_volume(volume):
    with pytest.raises(InvalidInputError):
        TankSetup(volume_liters=volume)


def test_fertilizer_missing_fields_are_zero():
    fert = FertilizerComposition(id="x", unit="G", nitrogen=None, iron=0.2)
    assert fert.unit is FertilizerUnit.G
    assert fert.nitrogen == 0.0
    assert fert.ppm_for("iron") == 0.2
    assert fert.display_name == "x"
    assert not fert.is_empty
    assert FertilizerComposition(id="y").is_empty


def test_fertilizer_rejects_negative_content():
    with pytest.raises(InvalidInputError):
        FertilizerComposition(id="x", potassium=-1)


def test_dosing_event_reduces_datetime_to_date():
    event = DosingEvent("x", 2, datetime(2024, 5, 3, 22, 15))
    assert event.date == date(2024, 5, 3)
    assert DosingEvent("x", 1, "2024-05-04").date == date(2024, 5, 4)
    with pytest.raises(InvalidInputError):
        DosingEvent("x", -1, date(2024, 5, 3))


def test_water_source_validation():
    profile = WaterSourceProfile(gh=8, ph=7.2, nitrate=12)
    assert profile.value("nitrate") == 12
    assert profile.value("iron") == 0.0
    assert profile.as_dict() == {"gh": 8, "ph": 7.2, "nitrate": 12}
    with pytest.raises(InvalidInputError):
        WaterSourceProfile(ph=14.5)
    with pytest.raises(InvalidInputError):
        WaterSourceProfile(calcium=-3)


def test_water_source_from_mapping_ignores_unknown_keys():
    profile = WaterSourceProfile.from_mapping({"kh": 4, "name": "Tap", "temperature": 18})
    assert profile.kh == 4


def test_target_range_rejects_reversed_bounds():
    with pytest.raises(InvalidInputError):
        TargetRange(5, 1)
    band = TargetRange(10, 30)
    assert band.midpoint == 20
    assert band.scaled(2) == TargetRange(20, 60)
    assert band.contains(10) and band.contains(30) and not band.contains(30.01)


def test_nutrient_totals_arithmetic():
    a = NutrientTotals(nitrogen=1, iron=0.1)
    b = NutrientTotals(nitrogen=2, magnesium=3)
    total = a + b
    assert total.nitrogen == 3
    assert total.magnesium == 3
    assert total.scale(0.5).nitrogen == 1.5
    assert NutrientTotals.clamped({"nitrogen": -4, "iron": 1}).nitrogen == 0.0
    with pytest.raises(InvalidInputError):
        NutrientTotals(phosphorus=-1)

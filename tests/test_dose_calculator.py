import pytest

from aquarium_engine.dose_calculator import calculate_full_dose, nutrient_addition, ppm_per_unit_from_label
from aquarium_engine.models import FertilizerUnit, InvalidInputError, TankSetup


def test_nutrient_addition():
    assert nutrient_addition(5, 10, 50) == pytest.approx(1)
    with pytest.raises(InvalidInputError):
        nutrient_addition(5, 10, 0)
    with pytest.raises(InvalidInputError):
        nutrient_addition(-1, 10, 50)


def test_ppm_from_label():
    # 5 ml daily in 100 L delivering the 20 ppm nitrogen midpoint each week
    ppm = ppm_per_unit_from_label("nitrogen", 5, 100, "daily")
    assert ppm == pytest.approx(20 * 100 / 35)
    half = ppm_per_unit_from_label("nitrogen", 5, 100, "daily", ei_fraction=0.5)
    assert half == pytest.approx(ppm / 2)
    weekly = ppm_per_unit_from_label("iron", 3, 60, "weekly")
    assert weekly == pytest.approx(0.3 * 60 / 3)
    with pytest.raises(InvalidInputError):
        ppm_per_unit_from_label("nitrogen", 0, 100, "daily")
    with pytest.raises(InvalidInputError):
        ppm_per_unit_from_label("nitrogen", 5, 100, "hourly")


def test_full_dose_uses_limiting_element(compositions, medium_tank):
    dose = calculate_full_dose(compositions["kno3"], medium_tank)
    # Potassium is reached first: 20 ppm * 100 L / 386
    assert dose.limiting_element == "potassium"
    assert dose.weekly_dose == pytest.approx(2000 / 386)
    assert dose.daily_dose == pytest.approx(dose.weekly_dose / 7)
    assert dose.delivered_ppm["potassium"] == pytest.approx(20)
    assert dose.delivered_ppm["nitrogen"] < 20
    assert dose.unit is FertilizerUnit.G


def test_full_dose_scales_with_setup(compositions):
    dutch = TankSetup(100, "dutch", "high", True)
    dose = calculate_full_dose(compositions["iron"], dutch, ei_fraction=0.5)
    assert dose.limiting_element == "iron"
    assert dose.weekly_dose == pytest.approx(0.3 * 5.4 * 0.5 * 100 / 0.5)
    assert dose.as_dict()["unit"] == "ml"


def test_full_dose_for_empty_product(compositions, medium_tank):
    assert calculate_full_dose(compositions["blank"], medium_tank) is None

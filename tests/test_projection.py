from datetime import date

import pytest

from aquarium_engine.models import InvalidInputError, NutrientTotals, WaterSourceProfile
from aquarium_engine.projection import daily_rates_from_weekly, project, projection_frame


def test_horizon_and_day_zero(medium_tank):
    start = NutrientTotals(nitrogen=12, iron=0.2)
    points = project(start, NutrientTotals(), medium_tank, horizon_days=7)
    assert len(points) == 8
    assert [p.day for p in points] == list(range(8))
    assert points[0].levels == start


def test_daily_dosing_accumulates(medium_tank):
    points = project(
        NutrientTotals(),
        NutrientTotals(nitrogen=2, potassium=1),
        medium_tank,
        horizon_days=5,
        water_change_day=None,
    )
    assert points[3].nitrogen == pytest.approx(6)
    assert points[5].potassium == pytest.approx(5)


def test_water_change_halves_levels(medium_tank):
    points = project(
        NutrientTotals(nitrogen=20),
        NutrientTotals(nitrogen=2),
        medium_tank,
        horizon_days=7,
        water_change_fraction=0.5,
        water_change_day=7,
    )
    assert points[6].nitrogen == pytest.approx(32)
    # 32 + 2 dosed on day seven, then half replaced with clean water
    assert points[7].nitrogen == pytest.approx(17)


def test_water_change_adds_source_nutrients(medium_tank):
    source = WaterSourceProfile(potassium=4, nitrate=44.3)
    points = project(
        NutrientTotals(potassium=10),
        NutrientTotals(),
        medium_tank,
        horizon_days=2,
        water_change_fraction=0.5,
        water_change_day=1,
        source=source,
    )
    assert points[1].potassium == pytest.approx(7)
    assert points[1].nitrogen == pytest.approx(5)
    assert points[2].potassium == pytest.approx(7)


def test_full_water_change_matches_source(medium_tank):
    source = WaterSourceProfile(magnesium=6)
    points = project(
        NutrientTotals(magnesium=30),
        NutrientTotals(),
        medium_tank,
        horizon_days=1,
        water_change_fraction=1.0,
        water_change_day=1,
        source=source,
    )
    assert points[1].magnesium == pytest.approx(6)


def test_water_change_day_out_of_horizon(medium_tank):
    start = NutrientTotals(nitrogen=10)
    for day in (0, 9, None):
        points = project(start, NutrientTotals(), medium_tank, 7, 0.5, day)
        assert all(p.nitrogen == pytest.approx(10) for p in points)


def test_levels_never_negative(medium_tank):
    points = project(NutrientTotals(iron=0.1), NutrientTotals(), medium_tank, 7, 1.0, 3)
    assert all(v >= 0 for p in points for v in p.levels.as_dict().values())


def test_invalid_projection_inputs(medium_tank):
    with pytest.raises(InvalidInputError):
        project(NutrientTotals(), NutrientTotals(), medium_tank, horizon_days=-1)
    with pytest.raises(InvalidInputError):
        project(NutrientTotals(), NutrientTotals(), medium_tank, water_change_fraction=1.2)
    with pytest.raises(InvalidInputError):
        project(NutrientTotals(), NutrientTotals(), medium_tank, water_change_day=-2)


def test_dates_follow_start(medium_tank):
    points = project(
        NutrientTotals(), NutrientTotals(), medium_tank, 2, start_date=date(2024, 1, 31)
    )
    assert [p.date for p in points] == [date(2024, 1, 31), date(2024, 2, 1), date(2024, 2, 2)]


def test_daily_rates_from_weekly():
    rates = daily_rates_from_weekly(NutrientTotals(nitrogen=21, iron=0.7))
    assert rates.nitrogen == pytest.approx(3)
    assert rates.iron == pytest.approx(0.1)


def test_projection_frame(medium_tank):
    points = project(
        NutrientTotals(), NutrientTotals(nitrogen=1), medium_tank, 3, start_date=date(2024, 1, 1)
    )
    df = projection_frame(points)
    assert list(df.index) == [0, 1, 2, 3]
    assert df.loc[3, "nitrogen"] == pytest.approx(3)
    assert "date" in df.columns
    assert projection_frame([]).empty


def test_constant_without_dosing_or_water_change(medium_tank):
    start = NutrientTotals(nitrogen=15, phosphorus=1.5, potassium=12, iron=0.2, magnesium=7)
    points = project(start, NutrientTotals(), medium_tank, 10, 0.5, None)
    assert all(p.levels == start for p in points)

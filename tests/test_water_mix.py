import math

import pytest

from aquarium_engine.models import InvalidInputError, MixMode, WaterSourceProfile
from aquarium_engine.water_mix import blend, mix_volumes, ro_fraction_for, solve_mix

RO = {"gh": 0, "kh": 0}
TAP = {"gh": 15, "kh": 10}


def test_gh_mode_worked_example():
    result = solve_mix(RO, TAP, {"gh": 6, "kh": 4}, "gh")
    assert result.ro_fraction == pytest.approx(0.6)
    assert result.tap_fraction == pytest.approx(0.4)
    assert result.result_gh == pytest.approx(6)
    assert result.result_kh == pytest.approx(4)
    assert result.mode is MixMode.GH
    assert result.achievable


def test_kh_mode():
    result = solve_mix(RO, TAP, {"gh": 6, "kh": 2}, MixMode.KH)
    assert result.ro_fraction == pytest.approx(0.8)
    assert result.result_kh == pytest.approx(2)
    assert result.result_gh == pytest.approx(3)


def test_balanced_mode_averages_fractions():
    result = solve_mix(RO, TAP, {"gh": 6, "kh": 2})
    assert result.mode is MixMode.BALANCED
    assert result.ro_fraction == pytest.approx(0.7)
    assert result.result_gh == pytest.approx(4.5)
    assert result.result_kh == pytest.approx(3)


def test_fractions_sum_to_one_and_stay_in_range():
    for gh in range(0, 25, 3):
        for kh in range(0, 15, 2):
            for mode in ("gh", "kh", "balanced"):
                result = solve_mix(RO, TAP, {"gh": gh, "kh": kh}, mode)
                assert 0 <= result.ro_fraction <= 1
                assert result.ro_fraction + result.tap_fraction == pytest.approx(1)


def test_unreachable_target_is_clamped_and_flagged():
    result = solve_mix(RO, TAP, {"gh": 20, "kh": 4}, "gh")
    assert result.ro_fraction == 0
    assert result.result_gh == pytest.approx(15)
    assert not result.gh_achievable
    assert not result.achievable
    assert result.kh_achievable


def test_identical_sources_use_neutral_fraction():
    result = solve_mix({"gh": 8, "kh": 0}, {"gh": 8, "kh": 10}, {"gh": 8, "kh": 5}, "gh")
    assert result.ro_fraction == 0.5
    assert result.degenerate == ("gh",)
    assert result.result_gh == pytest.approx(8)


def test_accepts_water_profiles():
    tap = WaterSourceProfile(gh=12, kh=8, tds=300)
    result = solve_mix(WaterSourceProfile(gh=0, kh=0), tap, {"gh": 3, "kh": 2}, "balanced")
    assert result.ro_fraction == pytest.approx(0.75)


def test_invalid_inputs():
    with pytest.raises(InvalidInputError):
        solve_mix({"gh": -1, "kh": 0}, TAP, {"gh": 6, "kh": 4})
    with pytest.raises(InvalidInputError):
        solve_mix(RO, TAP, {"gh": "soft", "kh": 4})
    with pytest.raises(InvalidInputError):
        solve_mix(RO, TAP, {"gh": 6, "kh": 4}, "tds")
    with pytest.raises(InvalidInputError):
        blend(0, 10, 1.5)


def test_helpers():
    assert ro_fraction_for(5, 0, 10) == pytest.approx(0.5)
    assert ro_fraction_for(-5, 0, 10) == 1
    assert blend(2, 10, 0.25) == pytest.approx(8)


def test_mix_volumes():
    result = solve_mix(RO, TAP, {"gh": 6, "kh": 4}, "gh")
    volumes = mix_volumes(result, 50)
    assert volumes["ro_liters"] == pytest.approx(30)
    assert volumes["tap_liters"] == pytest.approx(20)
    with pytest.raises(InvalidInputError):
        mix_volumes(result, 0)


def test_as_dict():
    data = solve_mix(RO, TAP, {"gh": 6, "kh": 4}, "gh").as_dict()
    assert data["mode"] == "gh"
    assert data["achievable"] is True
    assert data["degenerate"] == []


def test_blend_then_solve_recovers_fraction():
    for fraction in (0.0, 0.25, 0.5, 0.9, 1.0):
        gh = blend(0, 15, fraction)
        assert ro_fraction_for(gh, 0, 15) == pytest.approx(fraction)


@pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
def test_non_finite_values_rejected(bad):
    with pytest.raises(InvalidInputError, match="finite"):
        solve_mix(RO, TAP, {"gh": bad, "kh": 4}, "gh")
    with pytest.raises(InvalidInputError, match="finite"):
        solve_mix(RO, {"gh": bad, "kh": 10}, {"gh": 6, "kh": 4}, "balanced")
    with pytest.raises(InvalidInputError, match="finite"):
        solve_mix({"gh": 0, "kh": bad}, TAP, {"gh": 6, "kh": 4}, "kh")


def test_balanced_needs_both_targets():
    with pytest.raises(InvalidInputError, match="target.kh"):
        solve_mix(RO, TAP, {"gh": 6}, "balanced")
    with pytest.raises(InvalidInputError, match="target.gh"):
        solve_mix(RO, TAP, {"kh": 2, "gh": None}, "balanced")


def test_active_parameter_required_in_sources():
    with pytest.raises(InvalidInputError, match="tap.gh"):
        solve_mix(RO, {"kh": 10}, {"gh": 6, "kh": 4}, "gh")
    with pytest.raises(InvalidInputError, match="ro.kh"):
        solve_mix(WaterSourceProfile(gh=0), TAP, {"gh": 6, "kh": 4}, "kh")


def test_single_parameter_target():
    result = solve_mix(RO, TAP, {"gh": 6}, "gh")
    assert result.ro_fraction == pytest.approx(0.6)
    assert result.result_kh == pytest.approx(4)
    assert result.kh_achievable
    assert result.achievable


def test_inactive_parameter_missing_from_source():
    result = solve_mix({"gh": 0}, {"gh": 15}, {"gh": 6, "kh": 4}, "gh")
    assert result.ro_fraction == pytest.approx(0.6)
    assert result.result_kh is None
    assert result.kh_achievable

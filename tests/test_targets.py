import json

import pytest

from aquarium_engine import targets
from aquarium_engine.models import InvalidInputError, TargetRange
from aquarium_engine.utils import clear_dataset_cache


def test_base_targets():
    bands = targets.base_targets()
    assert bands["nitrogen"] == TargetRange(10, 30)
    assert bands["phosphorus"] == TargetRange(1, 3)
    assert bands["iron"] == TargetRange(0.1, 0.5)
    assert set(bands) == {"nitrogen", "phosphorus", "potassium", "iron", "magnesium"}


def test_scaled_targets():
    bands = targets.scaled_targets(2.0, ei_fraction=0.5)
    assert bands["magnesium"] == TargetRange(5, 15)
    assert targets.scaled_targets(1.5)["nitrogen"] == TargetRange(15, 45)
    with pytest.raises(InvalidInputError):
        targets.scaled_targets(0)
    with pytest.raises(InvalidInputError):
        targets.scaled_targets(1.0, ei_fraction=-1)


def test_unknown_nutrient_rejected():
    with pytest.raises(InvalidInputError):
        targets.get_target_range("calcium")


def test_display_unit_families_stay_separate():
    assert targets.to_display_unit("nitrate", 10) == pytest.approx(44.3)
    assert targets.from_display_unit("nitrate", 44.3) == pytest.approx(10)
    assert targets.from_display_unit("phosphate", 3.06) == pytest.approx(1)
    assert targets.get_conversion("Nitrate") == ("nitrogen", 4.43)
    with pytest.raises(InvalidInputError):
        targets.to_display_unit("ammonia", 1)


def test_display_ranges():
    nitrate = targets.get_display_range("nitrate")
    assert nitrate.min == pytest.approx(44.3)
    assert nitrate.max == pytest.approx(132.9)
    assert targets.get_display_range("iron") == TargetRange(0.1, 0.5)
    assert "phosphate" in targets.list_display_forms()


def test_mix_presets():
    assert "shrimp" in targets.list_mix_presets()
    assert targets.get_mix_preset("Soft water") == {"gh": 4.0, "kh": 2.0}
    with pytest.raises(InvalidInputError):
        targets.get_mix_preset("marine")


def test_livestock_presets():
    caridina = targets.get_livestock_preset("caridina")
    assert caridina["tds"] == TargetRange(100, 120)
    assert targets.match_livestock_presets(tds=110, gh=5, kh=1) == ["caridina"]
    assert "neocaridina" not in targets.match_livestock_presets(tds=110)


def test_doses_per_week():
    assert targets.doses_per_week("daily") == 7
    assert targets.doses_per_week("every-2-days") == 3.5
    assert targets.doses_per_week("biweekly") == 0.5
    with pytest.raises(InvalidInputError):
        targets.doses_per_week("monthly")


def test_target_overlay(tmp_path, monkeypatch):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "ei_targets.json").write_text(json.dumps({"nitrogen": [5, 15]}))
    monkeypatch.setenv("AQUARIUM_OVERLAY_DIR", str(overlay))
    clear_dataset_cache()
    assert targets.get_target_range("nitrogen") == TargetRange(5, 15)
    # Elements missing from the overlay keep their bundled band
    assert targets.get_target_range("phosphorus") == TargetRange(1, 3)


def test_reversed_overlay_band_rejected(tmp_path, monkeypatch):
    overlay = tmp_path / "overlay"
    overlay.mkdir()
    (overlay / "ei_targets.json").write_text(json.dumps({"iron": [0.5, 0.1]}))
    monkeypatch.setenv("AQUARIUM_OVERLAY_DIR", str(overlay))
    clear_dataset_cache()
    with pytest.raises(InvalidInputError):
        targets.get_target_range("iron")

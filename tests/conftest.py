import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aquarium_engine.models import FertilizerComposition, TankSetup
from aquarium_engine.utils import clear_dataset_cache


@pytest.fixture(autouse=True)
def _fresh_datasets():
    """Drop cached datasets so overlay tests never leak into each other."""
    clear_dataset_cache()
    yield
    clear_dataset_cache()


@pytest.fixture
def medium_tank() -> TankSetup:
    return TankSetup(volume_liters=100, plant_density="medium", light_level="medium", has_co2=False)


@pytest.fixture
def compositions() -> dict[str, FertilizerComposition]:
    return {
        "macro": FertilizerComposition(
            id="macro", name="Macro Mix", unit="ml", nitrogen=10, phosphorus=1, potassium=8
        ),
        "iron": FertilizerComposition(id="iron", name="Iron Chelate", unit="ml", iron=0.5),
        "kno3": FertilizerComposition(id="kno3", name="KNO3", unit="g", nitrogen=138, potassium=386),
        "blank": FertilizerComposition(id="blank", name="Water conditioner", unit="ml"),
    }

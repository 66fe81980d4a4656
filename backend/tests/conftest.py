import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
str_path = str(ROOT)
if str_path not in sys.path:
    sys.path.insert(0, str_path)

from mealdose.models.profile import MedicalProfile  # noqa: E402
from mealdose.services.profile_store import ProfileStore  # noqa: E402


@pytest.fixture
def complete_profile() -> MedicalProfile:
    return MedicalProfile(
        insulin_carb_ratio=0.1,
        correction_factor=50.0,
        target_glucose=100,
        sick_day_percent=15,
        stress_percent=10,
        light_exercise_percent=15,
        intense_exercise_percent=30,
    )


@pytest.fixture
def profile_store(tmp_path) -> ProfileStore:
    return ProfileStore(tmp_path)

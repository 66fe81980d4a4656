import itertools

import pytest

from mealdose.models.profile import MedicalProfile
from mealdose.services.dose_engine import calculate_full, calculate_simple

PROFILE = MedicalProfile(
    insulin_carb_ratio=0.0833,
    correction_factor=45.0,
    target_glucose=110,
    sick_day_percent=20,
    stress_percent=10,
    light_exercise_percent=15,
    intense_exercise_percent=40,
)

CARBS = [0, 1, 7.5, 15, 33.3, 60, 120, 250]
GLUCOSE = [None, 45, 69, 110, 180, 320]
ACTIVITY = [None, "normal", "light", "intense"]
FLAGS = [(False, False), (True, False), (False, True), (True, True)]


def _full_cases():
    for carbs, glucose, activity, (sick, stress) in itertools.product(CARBS, GLUCOSE, ACTIVITY, FLAGS):
        yield calculate_full(carbs, glucose, activity, sick, stress, PROFILE)


def _simple_cases():
    for carbs, glucose in itertools.product(CARBS, GLUCOSE):
        yield calculate_simple(carbs, glucose, PROFILE)
        yield calculate_simple(carbs, glucose, None)


def test_idempotent():
    first = calculate_full(45, 90, "light", True, True, PROFILE)
    second = calculate_full(45, 90, "light", True, True, PROFILE)
    assert first == second
    assert calculate_simple(45, 200, PROFILE) == calculate_simple(45, 200, PROFILE)


@pytest.mark.parametrize("cases", [_simple_cases, _full_cases])
def test_floor_and_rounding_invariants(cases):
    for res in cases():
        assert res.total_dose >= 0
        assert res.rounded_dose >= 0
        assert (res.rounded_dose * 2) == int(res.rounded_dose * 2)
        assert abs(res.rounded_dose - res.total_dose) <= 0.25 + 1e-6


def test_full_correction_clamp():
    for res in _full_cases():
        assert res.correction_dose >= -0.5 * res.carb_dose - 1e-6


@pytest.mark.parametrize("glucose", GLUCOSE)
@pytest.mark.parametrize("activity", ACTIVITY)
def test_monotone_in_carbs(glucose, activity):
    previous_full = previous_simple = None
    for carbs in CARBS:
        full = calculate_full(carbs, glucose, activity, True, False, PROFILE)
        simple = calculate_simple(carbs, glucose, PROFILE)
        if previous_full is not None:
            assert full.carb_dose >= previous_full.carb_dose
            assert full.total_dose >= previous_full.total_dose
            assert simple.carb_dose >= previous_simple.carb_dose
            assert simple.total_dose >= previous_simple.total_dose
        previous_full, previous_simple = full, simple


@pytest.mark.parametrize(
    "profile, missing",
    [
        (MedicalProfile(), 3),
        (MedicalProfile(insulin_carb_ratio=0.1, correction_factor=50), 1),
        (MedicalProfile(insulin_carb_ratio=-0.1, correction_factor=50, target_glucose=100), 1),
        (MedicalProfile(insulin_carb_ratio=0.1, correction_factor=50, target_glucose=0), 1),
    ],
)
def test_full_completeness_gate(profile, missing):
    res = calculate_full(80, 250, "light", True, True, profile)

    assert res.profile_complete is False
    assert len(res.missing_fields) == missing
    assert res.total_dose == res.rounded_dose == res.base_dose == 0.0
    assert res.sick_adjustment == res.stress_adjustment == res.exercise_adjustment == 0.0

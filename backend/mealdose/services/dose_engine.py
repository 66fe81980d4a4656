import logging
from typing import Optional, Union

from pydantic import ValidationError

from mealdose.core import constants
from mealdose.core.exceptions import InvalidDoseInputError
from mealdose.models.dose import DoseBreakdown, DoseRequest, ResolvedParams, UsedParams
from mealdose.models.enums import ActivityLevel, CalculationMode
from mealdose.models.profile import MedicalProfile
from mealdose.services.dose_math import ZERO, f32, is_finite, percent_of, round_dose
from mealdose.services.params_resolver import resolve_params
from mealdose.services.ratio_codec import format_ratio
from mealdose.services.warning_policy import DEFAULT_THRESHOLDS, WarningThresholds, warning_for

logger = logging.getLogger(__name__)


def _require_finite(total_dose, request: DoseRequest) -> None:
    if not is_finite(total_dose):
        raise InvalidDoseInputError(
            f"Invalid dose request: carbs={request.total_carbs} glucose={request.current_glucose} "
            "give a dose outside the representable range"
        )


def _build_request(**fields) -> DoseRequest:
    try:
        return DoseRequest(**fields)
    except ValidationError as exc:
        details = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in exc.errors()
        )
        raise InvalidDoseInputError(f"Invalid dose request: {details}") from exc


def _exercise_percent(level: ActivityLevel, params: ResolvedParams) -> int:
    if level == ActivityLevel.LIGHT:
        return params.light_exercise_percent
    if level == ActivityLevel.INTENSE:
        return params.intense_exercise_percent
    return 0


def _calculate_simple(
    request: DoseRequest,
    params: ResolvedParams,
    thresholds: WarningThresholds,
) -> DoseBreakdown:
    explain: list[str] = []
    defaults_applied: list[str] = []

    ratio = params.insulin_carb_ratio
    if ratio is None:
        ratio = constants.DEFAULT_INSULIN_CARB_RATIO
        defaults_applied.append(constants.FIELD_ICR)
    factor = params.correction_factor
    if factor is None:
        factor = constants.DEFAULT_CORRECTION_FACTOR
        defaults_applied.append(constants.FIELD_ISF)
    target = params.target_glucose
    if target is None:
        target = constants.DEFAULT_TARGET_GLUCOSE
        defaults_applied.append(constants.FIELD_TARGET)

    if defaults_applied:
        explain.append(f"Defaults used for: {', '.join(defaults_applied)}")
    if request.requires_adjustments():
        explain.append("Adjustments (sick/stress/exercise) are not applied in simple mode")

    # A) Carbs
    carb_dose = f32(request.total_carbs) * f32(ratio)
    explain.append(
        f"A) Carbs: {request.total_carbs:.1f} g x {ratio:.3f} U/g ({format_ratio(ratio)}) = {carb_dose:.2f} U"
    )

    # B) Correction, never negative in this mode
    correction_dose = ZERO
    glucose = request.current_glucose
    if glucose is not None:
        raw = (f32(glucose) - f32(target)) / f32(factor)
        correction_dose = max(ZERO, f32(raw))
        explain.append(f"B) Correction: ({glucose} - {target}) / {factor:.0f} = {correction_dose:.2f} U")
    else:
        explain.append("B) Correction: 0 U (no glucose reading)")

    total_dose = f32(carb_dose + correction_dose)
    _require_finite(total_dose, request)
    rounded = round_dose(total_dose)
    explain.append(f"Total: {total_dose:.2f} U -> {rounded:.1f} U")

    return DoseBreakdown(
        mode=CalculationMode.SIMPLE,
        carb_dose=float(carb_dose),
        correction_dose=float(correction_dose),
        base_dose=float(total_dose),
        total_dose=float(total_dose),
        rounded_dose=rounded,
        warning=warning_for(glucose, float(total_dose), thresholds),
        profile_complete=params.is_complete(),
        missing_fields=list(params.missing_fields),
        used_params=UsedParams(
            insulin_carb_ratio=ratio,
            ratio_display=format_ratio(ratio),
            correction_factor=factor,
            target_glucose=target,
            defaults_applied=defaults_applied,
        ),
        explain=explain,
    )


def _calculate_full(
    request: DoseRequest,
    params: ResolvedParams,
    thresholds: WarningThresholds,
) -> DoseBreakdown:
    if not params.is_complete():
        # No partial numbers: the caller has to ask the user to finish the profile
        return DoseBreakdown(
            mode=CalculationMode.FULL,
            profile_complete=False,
            missing_fields=list(params.missing_fields),
            explain=[f"Profile incomplete, missing: {', '.join(params.missing_fields)}"],
        )

    explain: list[str] = []
    ratio = params.insulin_carb_ratio
    factor = params.correction_factor
    target = params.target_glucose

    # A) Carbs
    carb_dose = f32(f32(request.total_carbs) * f32(ratio))
    explain.append(
        f"A) Carbs: {request.total_carbs:.1f} g x {ratio:.3f} U/g ({format_ratio(ratio)}) = {carb_dose:.2f} U"
    )

    # B) Correction; below target it may reduce the meal dose, by at most half of it
    correction_dose = ZERO
    glucose = request.current_glucose
    if glucose is not None and glucose != target:
        correction_dose = f32((f32(glucose) - f32(target)) / f32(factor))
        if glucose < target:
            # + ZERO turns the -0.0 of a zero carb dose into 0.0
            floor = f32(f32(-constants.MAX_NEGATIVE_CORRECTION_SHARE) * carb_dose) + ZERO
            if correction_dose < floor:
                logger.debug("Negative correction %.2f U clamped to %.2f U", correction_dose, floor)
                explain.append(f"   Negative correction {correction_dose:.2f} U limited to {floor:.2f} U")
                correction_dose = f32(floor)
        explain.append(f"B) Correction: ({glucose} - {target}) / {factor:.0f} = {correction_dose:.2f} U")
    elif glucose is None:
        explain.append("B) Correction: 0 U (no glucose reading)")
    else:
        explain.append("B) Correction: 0 U (on target)")

    base_dose = f32(carb_dose + correction_dose)

    # C) Situational adjustments, all relative to the base dose
    sick_pct = params.sick_day_percent if request.sick_mode else 0
    stress_pct = params.stress_percent if request.stress_mode else 0
    exercise_pct = _exercise_percent(request.activity_level, params)

    sick_adj = percent_of(base_dose, sick_pct) if request.sick_mode else ZERO
    stress_adj = percent_of(base_dose, stress_pct) if request.stress_mode else ZERO
    exercise_adj = -percent_of(base_dose, exercise_pct) if exercise_pct else ZERO

    if request.sick_mode:
        explain.append(f"C) Sick day: +{sick_pct}% = {sick_adj:+.2f} U")
    if request.stress_mode:
        explain.append(f"C) Stress: +{stress_pct}% = {stress_adj:+.2f} U")
    if exercise_pct:
        explain.append(f"C) Exercise ({request.activity_level.value}): -{exercise_pct}% = {exercise_adj:+.2f} U")

    total_dose = f32(base_dose + sick_adj + stress_adj + exercise_adj)
    _require_finite(total_dose, request)
    if total_dose < ZERO:
        total_dose = ZERO
    rounded = round_dose(total_dose)
    explain.append(f"Total: {total_dose:.2f} U -> {rounded:.1f} U")

    return DoseBreakdown(
        mode=CalculationMode.FULL,
        carb_dose=float(carb_dose),
        correction_dose=float(correction_dose),
        sick_adjustment=float(sick_adj),
        stress_adjustment=float(stress_adj),
        exercise_adjustment=float(exercise_adj),
        base_dose=float(base_dose),
        total_dose=float(total_dose),
        rounded_dose=rounded,
        warning=warning_for(glucose, float(total_dose), thresholds),
        profile_complete=True,
        missing_fields=[],
        used_params=UsedParams(
            insulin_carb_ratio=ratio,
            ratio_display=format_ratio(ratio),
            correction_factor=factor,
            target_glucose=target,
            sick_day_percent=sick_pct,
            stress_percent=stress_pct,
            exercise_percent=exercise_pct,
        ),
        explain=explain,
    )


def select_mode(request: DoseRequest) -> CalculationMode:
    return CalculationMode.FULL if request.requires_adjustments() else CalculationMode.SIMPLE


def calculate(
    request: DoseRequest,
    profile: Optional[MedicalProfile] = None,
    mode: Optional[CalculationMode] = None,
    thresholds: WarningThresholds = DEFAULT_THRESHOLDS,
) -> DoseBreakdown:
    params = resolve_params(profile)
    mode = mode or select_mode(request)
    if mode == CalculationMode.FULL:
        return _calculate_full(request, params, thresholds)
    return _calculate_simple(request, params, thresholds)


def calculate_simple(
    total_carbs: Optional[float],
    current_glucose: Optional[int] = None,
    profile: Optional[MedicalProfile] = None,
    *,
    thresholds: WarningThresholds = DEFAULT_THRESHOLDS,
) -> DoseBreakdown:
    """
    Carb + correction dose, defaults filling any profile gaps.

    Absent carbs count as 0 g. Raises InvalidDoseInputError for negative,
    non-finite or implausibly large carbs, and for a glucose reading that is
    0 or below or above the accepted range; every other reading, including
    the warning thresholds themselves, yields a breakdown.
    """
    request = _build_request(total_carbs=total_carbs, current_glucose=current_glucose)
    return calculate(request, profile, CalculationMode.SIMPLE, thresholds)


def calculate_full(
    total_carbs: Optional[float],
    current_glucose: Optional[int] = None,
    activity_level: Union[ActivityLevel, str, None] = None,
    sick_mode: bool = False,
    stress_mode: bool = False,
    profile: Optional[MedicalProfile] = None,
    *,
    thresholds: WarningThresholds = DEFAULT_THRESHOLDS,
) -> DoseBreakdown:
    """
    Dose with sick/stress/exercise adjustments; needs a complete profile and
    returns an all-zero breakdown listing the missing fields otherwise.
    Input is validated as in calculate_simple.
    """
    request = _build_request(
        total_carbs=total_carbs,
        current_glucose=current_glucose,
        activity_level=activity_level,
        sick_mode=sick_mode,
        stress_mode=stress_mode,
    )
    return calculate(request, profile, CalculationMode.FULL, thresholds)


__all__ = ["calculate", "calculate_simple", "calculate_full", "round_dose", "select_mode"]

from typing import Optional

from mealdose.core import constants
from mealdose.models.dose import ResolvedParams
from mealdose.models.profile import MedicalProfile


def _positive(value):
    if value is not None and value > 0:
        return value
    return None


def resolve_params(profile: Optional[MedicalProfile]) -> ResolvedParams:
    """
    Resolve calculation parameters from a stored profile in a single place.

    Required fields (ratio, correction factor, target) are copied only when
    present and positive; otherwise their display name is recorded in
    missing_fields. Adjustment percentages fall back to the policy defaults.
    Never raises: an absent profile simply has everything missing.
    """
    ratio = _positive(profile.insulin_carb_ratio) if profile else None
    factor = _positive(profile.correction_factor) if profile else None
    target = _positive(profile.target_glucose) if profile else None

    missing: list[str] = []
    if ratio is None:
        missing.append(constants.FIELD_ICR)
    if factor is None:
        missing.append(constants.FIELD_ISF)
    if target is None:
        missing.append(constants.FIELD_TARGET)

    percents = {}
    for name, default in constants.DEFAULT_ADJUSTMENT_PERCENTS.items():
        value = getattr(profile, name, None) if profile else None
        percents[name] = value if value is not None else default

    return ResolvedParams(
        insulin_carb_ratio=ratio,
        correction_factor=factor,
        target_glucose=target,
        missing_fields=tuple(missing),
        **percents,
    )


__all__ = ["resolve_params"]

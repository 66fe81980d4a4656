from dataclasses import dataclass
from typing import Optional

from mealdose.core import constants
from mealdose.services.dose_math import round_dose


@dataclass(frozen=True)
class WarningThresholds:
    low_glucose_mgdl: int = constants.LOW_GLUCOSE_THRESHOLD
    high_glucose_mgdl: int = constants.HIGH_GLUCOSE_THRESHOLD
    high_dose_u: float = constants.HIGH_DOSE_THRESHOLD
    minimum_dose_u: float = constants.MINIMUM_DOSE


DEFAULT_THRESHOLDS = WarningThresholds()


def _display_dose(dose: float) -> str:
    # Nearest 0.5 U, as the pen would deliver it
    return f"{round_dose(dose):.1f}"


def warning_for(
    current_glucose: Optional[int],
    dose: float,
    thresholds: WarningThresholds = DEFAULT_THRESHOLDS,
) -> Optional[str]:
    """
    Safety advisories for a calculated dose, concatenated in a fixed order:
    low glucose, high glucose, high dose, below minimum dose.
    Returns None when nothing triggers.
    """
    messages: list[str] = []

    if current_glucose is not None and current_glucose < thresholds.low_glucose_mgdl:
        messages.append("LOW GLUCOSE! Treat hypoglycemia before eating or dosing.")

    if current_glucose is not None and current_glucose > thresholds.high_glucose_mgdl:
        messages.append("High glucose detected. Consider checking ketones.")

    if dose > thresholds.high_dose_u:
        messages.append(
            f"Dose is unusually high ({_display_dose(dose)} units). Please verify before injection."
        )

    if 0 < dose < thresholds.minimum_dose_u:
        messages.append(
            f"Note: Dose is below {thresholds.minimum_dose_u} units. Consider skipping or rounding."
        )

    return " ".join(messages) if messages else None


__all__ = ["WarningThresholds", "DEFAULT_THRESHOLDS", "warning_for"]

from __future__ import annotations

import logging
import time
from typing import Optional, Union

from mealdose.core.logging import DOSE_LOGGER
from mealdose.core.settings import CalculatorConfig
from mealdose.models.dose import DoseBreakdown
from mealdose.models.enums import ActivityLevel
from mealdose.models.profile import MedicalProfile
from mealdose.services import dose_engine
from mealdose.services.profile_store import ProfileLookup
from mealdose.services.ratio_codec import describe_ratio
from mealdose.services.warning_policy import WarningThresholds

logger = logging.getLogger(__name__)
dose_log = logging.getLogger(DOSE_LOGGER)


def thresholds_from_config(config: CalculatorConfig) -> WarningThresholds:
    return WarningThresholds(
        low_glucose_mgdl=config.low_glucose_mgdl,
        high_glucose_mgdl=config.high_glucose_mgdl,
        high_dose_u=config.high_dose_threshold_u,
        minimum_dose_u=config.minimum_dose_u,
    )


class DoseService:
    """
    Service-layer wrapper around the dose engine: looks the profile up by user
    id, runs the requested calculation and logs the breakdown. The profile is
    fetched on every call since users can edit it between calculations.
    """

    def __init__(self, lookup: Optional[ProfileLookup], thresholds: WarningThresholds):
        self.lookup = lookup
        self.thresholds = thresholds

    def _load_profile(self, user_id: Optional[str]) -> Optional[MedicalProfile]:
        if not user_id or self.lookup is None:
            return None
        try:
            return self.lookup.get_profile(user_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to load profile for %s, using defaults: %s", user_id, exc)
            return None

    def _log_result(self, user_id: Optional[str], profile: Optional[MedicalProfile], result: DoseBreakdown, started: float) -> None:
        source_ratio = profile.insulin_carb_ratio if profile else None
        if result.used_params:
            dose_log.info(
                "ratio=%s isf=%s target=%s",
                describe_ratio(result.used_params.insulin_carb_ratio, from_profile=source_ratio is not None),
                result.used_params.correction_factor,
                result.used_params.target_glucose,
            )
        dose_log.info(
            "breakdown mode=%s carb=%.2f corr=%.2f base=%.2f sick=%+.2f stress=%+.2f exercise=%+.2f total=%.2f",
            result.mode.value,
            result.carb_dose,
            result.correction_dose,
            result.base_dose,
            result.sick_adjustment,
            result.stress_adjustment,
            result.exercise_adjustment,
            result.total_dose,
        )
        if not result.profile_complete:
            dose_log.info("profile incomplete for %s, missing=%s", user_id or "anonymous", result.missing_fields)
        if result.warning:
            dose_log.warning("warning: %s", result.warning)
        elapsed_ms = (time.perf_counter() - started) * 1000
        dose_log.info("complete total=%.2f rounded=%.1f in %.1fms", result.total_dose, result.rounded_dose, elapsed_ms)

    def calculate_simple(
        self,
        total_carbs: Optional[float],
        current_glucose: Optional[int] = None,
        user_id: Optional[str] = None,
    ) -> DoseBreakdown:
        started = time.perf_counter()
        dose_log.info("simple start carbs=%s glucose=%s user=%s", total_carbs, current_glucose, user_id or "anonymous")
        profile = self._load_profile(user_id)
        result = dose_engine.calculate_simple(
            total_carbs, current_glucose, profile, thresholds=self.thresholds
        )
        self._log_result(user_id, profile, result, started)
        return result

    def calculate_full(
        self,
        total_carbs: Optional[float],
        current_glucose: Optional[int] = None,
        activity_level: Union[ActivityLevel, str, None] = None,
        sick_mode: bool = False,
        stress_mode: bool = False,
        user_id: Optional[str] = None,
    ) -> DoseBreakdown:
        started = time.perf_counter()
        dose_log.info(
            "full start carbs=%s glucose=%s activity=%s sick=%s stress=%s user=%s",
            total_carbs,
            current_glucose,
            activity_level,
            sick_mode,
            stress_mode,
            user_id or "anonymous",
        )
        profile = self._load_profile(user_id)
        result = dose_engine.calculate_full(
            total_carbs,
            current_glucose,
            activity_level,
            sick_mode,
            stress_mode,
            profile,
            thresholds=self.thresholds,
        )
        self._log_result(user_id, profile, result, started)
        return result


__all__ = ["DoseService", "thresholds_from_config"]

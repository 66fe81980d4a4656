from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mealdose.core import constants
from mealdose.models.enums import ActivityLevel, CalculationMode


class DoseRequest(BaseModel):
    total_carbs: float = Field(
        default=0.0,
        ge=0,
        le=constants.MAX_TOTAL_CARBS,
        allow_inf_nan=False,
        description="Meal carbohydrates (g); absent means 0",
    )
    current_glucose: Optional[int] = Field(
        default=None,
        gt=0,
        le=constants.MAX_GLUCOSE,
        description="Current glucose (mg/dL); a reading of 0 or below is rejected",
    )
    activity_level: ActivityLevel = ActivityLevel.NORMAL
    sick_mode: bool = False
    stress_mode: bool = False

    model_config = ConfigDict(frozen=True, extra="ignore")

    @field_validator("total_carbs", mode="before")
    def _absent_carbs_are_zero(cls, v: Any) -> Any:
        return 0.0 if v is None else v

    @field_validator("activity_level", mode="before")
    def _normalise_activity(cls, v: Any) -> Any:
        if v is None:
            return ActivityLevel.NORMAL
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("sick_mode", "stress_mode", mode="before")
    def _absent_flag_is_off(cls, v: Any) -> Any:
        return False if v is None else v

    def requires_adjustments(self) -> bool:
        return self.sick_mode or self.stress_mode or self.activity_level != ActivityLevel.NORMAL


@dataclass(frozen=True)
class ResolvedParams:
    insulin_carb_ratio: Optional[float]
    correction_factor: Optional[float]
    target_glucose: Optional[int]
    sick_day_percent: int
    stress_percent: int
    light_exercise_percent: int
    intense_exercise_percent: int
    missing_fields: tuple[str, ...] = field(default_factory=tuple)

    def is_complete(self) -> bool:
        return not self.missing_fields


class UsedParams(BaseModel):
    insulin_carb_ratio: float
    ratio_display: Optional[str] = None
    correction_factor: float
    target_glucose: int
    sick_day_percent: int = 0
    stress_percent: int = 0
    exercise_percent: int = 0
    defaults_applied: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class DoseBreakdown(BaseModel):
    mode: CalculationMode

    # Raw components
    carb_dose: float = 0.0
    correction_dose: float = 0.0
    sick_adjustment: float = 0.0
    stress_adjustment: float = 0.0
    exercise_adjustment: float = 0.0

    base_dose: float = 0.0
    total_dose: float = 0.0
    rounded_dose: float = 0.0

    warning: Optional[str] = None
    profile_complete: bool
    missing_fields: list[str] = Field(default_factory=list)

    used_params: Optional[UsedParams] = None
    explain: list[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def has_warning(self) -> bool:
        return self.warning is not None

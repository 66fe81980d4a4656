from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mealdose.services.ratio_codec import format_ratio, parse_ratio


class MedicalProfile(BaseModel):
    # Values are stored as given; the resolver decides what counts as usable
    insulin_carb_ratio: Optional[float] = Field(default=None, description="Insulin:Carb ratio (U/g), 1:10 -> 0.1")
    correction_factor: Optional[float] = Field(default=None, description="Correction factor (mg/dL per U)")
    target_glucose: Optional[int] = Field(default=None, description="Target glucose (mg/dL)")

    sick_day_percent: Optional[int] = None
    stress_percent: Optional[int] = None
    light_exercise_percent: Optional[int] = None
    intense_exercise_percent: Optional[int] = None

    dia_hours: Optional[float] = Field(default=None, description="Duration of insulin action (h), informational")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @field_validator("insulin_carb_ratio", mode="before")
    def _decode_ratio(cls, v: Any) -> Any:
        # Accept the display notation "1:10" as well as the raw float
        if isinstance(v, str):
            return parse_ratio(v)
        return v

    @property
    def ratio_display(self) -> Optional[str]:
        return format_ratio(self.insulin_carb_ratio)

    def is_complete(self) -> bool:
        return all(
            value is not None and value > 0
            for value in (self.insulin_carb_ratio, self.correction_factor, self.target_glucose)
        )

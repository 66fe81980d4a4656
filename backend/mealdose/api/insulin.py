import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict, Field

from mealdose.api.dependencies import get_dose_service
from mealdose.models.dose import DoseBreakdown
from mealdose.services.dose_service import DoseService
from mealdose.services.ratio_codec import format_ratio, parse_ratio

logger = logging.getLogger(__name__)

router = APIRouter()


class SimpleDosePayload(BaseModel):
    total_carbs: Optional[float] = Field(default=None, description="Meal carbohydrates (g), 0 to 2000; absent means 0")
    current_glucose: Optional[int] = Field(default=None, description="Current glucose (mg/dL), 1 to 3000; 0 or below is rejected with 422")
    user_id: Optional[str] = Field(default=None, description="Profile owner; defaults are used when absent")

    model_config = ConfigDict(extra="ignore")


class FullDosePayload(SimpleDosePayload):
    activity_level: Optional[str] = Field(default=None, description="normal, light or intense")
    sick_mode: bool = False
    stress_mode: bool = False


class RatioResponse(BaseModel):
    ratio: Optional[float] = None
    display: Optional[str] = None


@router.post("/calculate", response_model=DoseBreakdown, summary="Calculate carb + correction dose")
async def api_calculate_simple(
    payload: SimpleDosePayload,
    service: DoseService = Depends(get_dose_service),
) -> DoseBreakdown:
    return service.calculate_simple(payload.total_carbs, payload.current_glucose, payload.user_id)


@router.post("/calculate/full", response_model=DoseBreakdown, summary="Calculate dose with sick/stress/exercise adjustments")
async def api_calculate_full(
    payload: FullDosePayload,
    service: DoseService = Depends(get_dose_service),
) -> DoseBreakdown:
    return service.calculate_full(
        payload.total_carbs,
        payload.current_glucose,
        payload.activity_level,
        payload.sick_mode,
        payload.stress_mode,
        payload.user_id,
    )


@router.get("/ratio/parse", response_model=RatioResponse, summary="Decode a '1:10' style ratio")
async def api_parse_ratio(text: str = Query(..., examples=["1:10"])) -> RatioResponse:
    ratio = parse_ratio(text)
    return RatioResponse(ratio=ratio, display=format_ratio(ratio))


@router.get("/ratio/format", response_model=RatioResponse, summary="Encode units-per-gram as '1:N'")
async def api_format_ratio(ratio: float = Query(..., examples=[0.1])) -> RatioResponse:
    return RatioResponse(ratio=ratio, display=format_ratio(ratio))

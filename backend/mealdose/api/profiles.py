from fastapi import APIRouter, Depends, HTTPException

from mealdose.api.dependencies import get_profile_store
from mealdose.core.exceptions import ProfileNotFoundError
from mealdose.models.profile import MedicalProfile
from mealdose.services.profile_store import ProfileStore

router = APIRouter()


@router.get("/{user_id}", response_model=MedicalProfile, summary="Read a medical profile")
async def api_get_profile(user_id: str, store: ProfileStore = Depends(get_profile_store)) -> MedicalProfile:
    try:
        return store.require_profile(user_id)
    except ProfileNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.put("/{user_id}", response_model=MedicalProfile, summary="Create or replace a medical profile")
async def api_put_profile(
    user_id: str,
    profile: MedicalProfile,
    store: ProfileStore = Depends(get_profile_store),
) -> MedicalProfile:
    return store.save_profile(user_id, profile)

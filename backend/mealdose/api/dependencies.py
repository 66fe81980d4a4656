from pathlib import Path
from typing import Optional

from fastapi import Depends

from mealdose.core.settings import Settings, get_settings
from mealdose.services.dose_service import DoseService, thresholds_from_config
from mealdose.services.profile_store import ProfileStore
from mealdose.services.vision_cache import VisionCache


def get_profile_store(settings: Settings = Depends(get_settings)) -> ProfileStore:
    return ProfileStore(Path(settings.data.data_dir))


def get_dose_service(
    settings: Settings = Depends(get_settings),
    store: ProfileStore = Depends(get_profile_store),
) -> DoseService:
    return DoseService(store, thresholds_from_config(settings.calculator))


_vision_cache: Optional[VisionCache] = None


def get_vision_cache(settings: Settings = Depends(get_settings)) -> VisionCache:
    # One cache per process; entries must outlive the request
    global _vision_cache
    if _vision_cache is None:
        _vision_cache = VisionCache(ttl_seconds=settings.vision_cache.ttl_hours * 3600)
    return _vision_cache

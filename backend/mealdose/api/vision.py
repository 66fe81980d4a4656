import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from mealdose.api.dependencies import get_vision_cache
from mealdose.services.vision_cache import VisionCache, hash_image

logger = logging.getLogger(__name__)

router = APIRouter()


class ImagePayload(BaseModel):
    image_base64: str = Field(..., description="Base64 image, optionally as a data: URL")


class StoreResultPayload(ImagePayload):
    result: dict[str, Any] = Field(..., description="Food identification returned by the vision model")


class CacheLookupResponse(BaseModel):
    image_hash: str
    cached: bool
    result: Optional[dict[str, Any]] = None


def _hash_or_422(image_base64: str) -> str:
    try:
        return hash_image(image_base64)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@router.post("/cache/lookup", response_model=CacheLookupResponse, summary="Find a cached result for an image")
async def api_lookup(payload: ImagePayload, cache: VisionCache = Depends(get_vision_cache)) -> CacheLookupResponse:
    image_hash = _hash_or_422(payload.image_base64)
    result = cache.get(image_hash)
    return CacheLookupResponse(image_hash=image_hash, cached=result is not None, result=result)


@router.put("/cache", response_model=CacheLookupResponse, summary="Store the vision result for an image")
async def api_store(payload: StoreResultPayload, cache: VisionCache = Depends(get_vision_cache)) -> CacheLookupResponse:
    image_hash = _hash_or_422(payload.image_base64)
    cache.put(image_hash, payload.result)
    return CacheLookupResponse(image_hash=image_hash, cached=True, result=payload.result)


@router.delete("/cache/expired", summary="Evict expired entries")
async def api_clear_expired(cache: VisionCache = Depends(get_vision_cache)) -> dict[str, int]:
    evicted = cache.clear_expired()
    if evicted:
        logger.info("Evicted %d expired vision results", evicted)
    return {"evicted": evicted, "remaining": len(cache)}

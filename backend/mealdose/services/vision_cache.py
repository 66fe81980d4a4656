"""
In-memory cache of vision results keyed by a digest of the image bytes, so a
repeated scan of the same photo gets the same food identification.
"""
from __future__ import annotations

import base64
import binascii
import hashlib
import logging
import threading
import time
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
HASH_BYTES = 16


def hash_image(base64_image: str) -> str:
    """SHA-256 of the decoded image (data-URL prefix stripped), first 16 bytes as hex."""
    data = base64_image
    if "," in data:
        data = data.split(",", 1)[1]
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Image payload is not valid base64") from exc
    return hashlib.sha256(raw).digest()[:HASH_BYTES].hex()


class VisionCache:
    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def _expired(self, stored_at: float, now: float) -> bool:
        return now - stored_at > self.ttl_seconds

    def get(self, image_hash: Optional[str]) -> Optional[Any]:
        if not image_hash:
            return None
        with self._lock:
            entry = self._entries.get(image_hash)
            if entry is None:
                return None
            stored_at, result = entry
            if self._expired(stored_at, self._clock()):
                del self._entries[image_hash]
                logger.debug("Vision cache expired for %s...", image_hash[:8])
                return None
        logger.info("Using cached vision result for %s...", image_hash[:8])
        return result

    def put(self, image_hash: Optional[str], result: Any) -> None:
        if not image_hash or result is None:
            return
        with self._lock:
            self._entries[image_hash] = (self._clock(), result)
        logger.debug("Cached vision result for %s...", image_hash[:8])

    def clear_expired(self) -> int:
        now = self._clock()
        with self._lock:
            stale = [key for key, (stored_at, _) in self._entries.items() if self._expired(stored_at, now)]
            for key in stale:
                del self._entries[key]
        return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


__all__ = ["VisionCache", "hash_image"]

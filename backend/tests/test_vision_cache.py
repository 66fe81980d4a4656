import base64
import hashlib
from concurrent.futures import ThreadPoolExecutor

import pytest

from mealdose.services.vision_cache import VisionCache, hash_image


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return VisionCache(ttl_seconds=24 * 3600, clock=clock)


def test_miss_returns_none(cache):
    assert cache.get("abc") is None
    assert cache.get(None) is None


def test_put_then_get(cache):
    cache.put("abc", {"foods": ["rice"]})
    assert cache.get("abc") == {"foods": ["rice"]}


def test_put_overwrites(cache):
    cache.put("abc", {"foods": ["rice"]})
    cache.put("abc", {"foods": ["pasta"]})
    assert cache.get("abc") == {"foods": ["pasta"]}


def test_entries_expire_after_ttl(cache, clock):
    cache.put("abc", {"foods": ["rice"]})

    clock.now += 24 * 3600
    assert cache.get("abc") is not None

    clock.now += 1
    assert cache.get("abc") is None
    assert len(cache) == 0


def test_clear_expired(cache, clock):
    cache.put("old", 1)
    clock.now += 23 * 3600
    cache.put("new", 2)
    clock.now += 2 * 3600

    assert cache.clear_expired() == 1
    assert cache.get("old") is None
    assert cache.get("new") == 2


def test_concurrent_puts(cache):
    def _put(i: int) -> None:
        cache.put(f"hash-{i}", i)

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(_put, range(200)))

    assert len(cache) == 200


def test_hash_image_uses_decoded_bytes():
    payload = b"\xff\xd8\xff\xe0 fake jpeg bytes"
    encoded = base64.b64encode(payload).decode()

    expected = hashlib.sha256(payload).hexdigest()[:32]
    assert hash_image(encoded) == expected
    assert hash_image("data:image/jpeg;base64," + encoded) == expected


def test_hash_image_rejects_invalid_base64():
    with pytest.raises(ValueError):
        hash_image("not base64!!")

from __future__ import annotations

import json
import logging
import os
import time
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

from pydantic import ValidationError

from mealdose.core.exceptions import ProfileNotFoundError
from mealdose.models.profile import MedicalProfile

logger = logging.getLogger(__name__)

PROFILES_FILE = "profiles.json"


class ProfileLookup(Protocol):
    def get_profile(self, user_id: str) -> Optional[MedicalProfile]:
        ...


class SimpleFileLock:
    def __init__(self, path: Path, timeout: float = 5.0):
        self.lock_path = str(path) + ".lock"
        self.timeout = timeout
        self._fd: int | None = None

    def acquire(self) -> None:
        start = time.time()
        while True:
            try:
                self._fd = os.open(self.lock_path, os.O_CREAT | os.O_EXCL | os.O_RDWR)
                return
            except FileExistsError:
                if time.time() - start > self.timeout:
                    raise TimeoutError(f"Timeout waiting for lock {self.lock_path}")
                time.sleep(0.05)

    def release(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None
        try:
            os.unlink(self.lock_path)
        except FileNotFoundError:
            pass

    def __enter__(self):
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()


@contextmanager
def _json_lock(path: Path):
    with SimpleFileLock(path):
        yield


def _ensure_parent(path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


@dataclass
class ProfileStore:
    """Medical profiles kept in a single JSON document keyed by user id."""

    data_dir: Path

    def _path(self) -> Path:
        return _ensure_parent(self.data_dir / PROFILES_FILE)

    def _read_all(self) -> dict[str, Any]:
        path = self._path()
        with _json_lock(path):
            if not path.exists():
                return {}
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)

    def _write(self, path: Path, data: Any) -> None:
        with path.open("w", encoding="utf-8") as fh:
            json.dump(data, fh, indent=2, ensure_ascii=False)

    def _update(self, mutate) -> Any:
        path = self._path()
        with _json_lock(path):
            data: dict[str, Any] = {}
            if path.exists():
                with path.open("r", encoding="utf-8") as fh:
                    data = json.load(fh)
            result = mutate(data)
            self._write(path, data)
            return result

    def get_profile(self, user_id: str) -> Optional[MedicalProfile]:
        try:
            raw = self._read_all().get(user_id)
        except json.JSONDecodeError as exc:
            logger.warning("Profiles file %s is not valid JSON: %s", self._path(), exc)
            return None
        if raw is None:
            return None
        try:
            return MedicalProfile.model_validate(deepcopy(raw))
        except ValidationError as exc:
            logger.warning("Stored profile for %s is invalid: %s", user_id, exc)
            return None

    def require_profile(self, user_id: str) -> MedicalProfile:
        profile = self.get_profile(user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        return profile

    def save_profile(self, user_id: str, profile: MedicalProfile) -> MedicalProfile:
        def _put(data: dict[str, Any]) -> None:
            data[user_id] = profile.model_dump()

        self._update(_put)
        return profile

    def delete_profile(self, user_id: str) -> bool:
        def _pop(data: dict[str, Any]) -> bool:
            return data.pop(user_id, None) is not None

        return self._update(_pop)


__all__ = ["ProfileLookup", "ProfileStore", "SimpleFileLock"]

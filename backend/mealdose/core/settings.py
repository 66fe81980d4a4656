import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from mealdose.core import constants


class ServerConfig(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000, ge=1, le=65535)


class SecurityConfig(BaseModel):
    cors_origins: list[str] = Field(default_factory=list)


class DataConfig(BaseModel):
    data_dir: Path = Field(default=Path("backend/data"))

    @field_validator("data_dir", mode="before")
    def _expand_path(cls, v: str | Path) -> Path:
        return Path(v).expanduser()


class CalculatorConfig(BaseModel):
    high_dose_threshold_u: float = Field(default=constants.HIGH_DOSE_THRESHOLD, gt=0)
    low_glucose_mgdl: int = Field(default=constants.LOW_GLUCOSE_THRESHOLD, gt=0)
    high_glucose_mgdl: int = Field(default=constants.HIGH_GLUCOSE_THRESHOLD, gt=0)
    minimum_dose_u: float = Field(default=constants.MINIMUM_DOSE, gt=0)


class VisionCacheConfig(BaseModel):
    ttl_hours: float = Field(default=24.0, gt=0)


class Settings(BaseModel):
    server: ServerConfig = Field(default_factory=ServerConfig)
    security: SecurityConfig = Field(default_factory=SecurityConfig)
    data: DataConfig = Field(default_factory=DataConfig)
    calculator: CalculatorConfig = Field(default_factory=CalculatorConfig)
    vision_cache: VisionCacheConfig = Field(default_factory=VisionCacheConfig)

    model_config = ConfigDict(arbitrary_types_allowed=True)


DEFAULT_CONFIG_PATH = Path(os.environ.get("CONFIG_PATH", "config/config.json"))

SECTIONS = ("server", "security", "data", "calculator", "vision_cache")


def _load_file_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as fh:
            return json.load(fh)
    except json.JSONDecodeError as exc:
        raise RuntimeError(f"Invalid JSON configuration at {path}") from exc


def _load_env() -> dict[str, Any]:
    env_config: dict[str, Any] = {}

    host = os.environ.get("SERVER_HOST")
    if host:
        env_config.setdefault("server", {})["host"] = host

    port = os.environ.get("SERVER_PORT")
    if port:
        env_config.setdefault("server", {})["port"] = int(port)

    cors_origins = os.environ.get("CORS_ORIGINS")
    if cors_origins:
        env_config.setdefault("security", {})["cors_origins"] = [
            origin.strip() for origin in cors_origins.split(",") if origin.strip()
        ]

    data_dir = os.environ.get("DATA_DIR")
    if data_dir:
        env_config.setdefault("data", {})["data_dir"] = data_dir

    high_dose = os.environ.get("HIGH_DOSE_THRESHOLD_U")
    if high_dose:
        env_config.setdefault("calculator", {})["high_dose_threshold_u"] = float(high_dose)

    low_glucose = os.environ.get("LOW_GLUCOSE_MGDL")
    if low_glucose:
        env_config.setdefault("calculator", {})["low_glucose_mgdl"] = int(low_glucose)

    high_glucose = os.environ.get("HIGH_GLUCOSE_MGDL")
    if high_glucose:
        env_config.setdefault("calculator", {})["high_glucose_mgdl"] = int(high_glucose)

    ttl = os.environ.get("VISION_CACHE_TTL_HOURS")
    if ttl:
        env_config.setdefault("vision_cache", {})["ttl_hours"] = float(ttl)

    return env_config


def merge_settings(env_config: dict[str, Any], file_config: dict[str, Any]) -> dict[str, Any]:
    merged: dict[str, Any] = {}
    for section in SECTIONS:
        merged[section] = {**file_config.get(section, {}), **env_config.get(section, {})}
    return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    env_config = _load_env()
    file_config = _load_file_config(DEFAULT_CONFIG_PATH)
    merged = merge_settings(env_config=env_config, file_config=file_config)
    try:
        return Settings.model_validate(merged)
    except ValidationError as exc:  # pragma: no cover
        raise RuntimeError(f"Configuration error: {exc}") from exc


__all__ = ["Settings", "get_settings"]

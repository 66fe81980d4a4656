import json

import pytest

from mealdose.core import settings as settings_module
from mealdose.core.settings import get_settings, merge_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_defaults(monkeypatch, tmp_path):
    monkeypatch.setattr(settings_module, "DEFAULT_CONFIG_PATH", tmp_path / "missing.json")
    for key in ("SERVER_PORT", "HIGH_DOSE_THRESHOLD_U", "DATA_DIR"):
        monkeypatch.delenv(key, raising=False)

    settings = get_settings()

    assert settings.server.port == 8000
    assert settings.calculator.high_dose_threshold_u == 15.0
    assert settings.calculator.low_glucose_mgdl == 70
    assert settings.calculator.high_glucose_mgdl == 250
    assert settings.vision_cache.ttl_hours == 24.0


def test_env_overrides_file(monkeypatch, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"calculator": {"high_dose_threshold_u": 20, "low_glucose_mgdl": 75}, "data": {"data_dir": "/srv/data"}}),
        encoding="utf-8",
    )
    monkeypatch.setattr(settings_module, "DEFAULT_CONFIG_PATH", config_path)
    monkeypatch.setenv("HIGH_DOSE_THRESHOLD_U", "30")

    settings = get_settings()

    assert settings.calculator.high_dose_threshold_u == 30.0
    assert settings.calculator.low_glucose_mgdl == 75
    assert str(settings.data.data_dir) == "/srv/data"


def test_invalid_json_raises(monkeypatch, tmp_path):
    config_path = tmp_path / "config.json"
    config_path.write_text("{not json", encoding="utf-8")
    monkeypatch.setattr(settings_module, "DEFAULT_CONFIG_PATH", config_path)

    with pytest.raises(RuntimeError, match="Invalid JSON configuration"):
        get_settings()


def test_merge_settings_prefers_env():
    merged = merge_settings(
        env_config={"server": {"port": 9000}},
        file_config={"server": {"port": 8000, "host": "127.0.0.1"}},
    )
    assert merged["server"] == {"port": 9000, "host": "127.0.0.1"}
    assert merged["calculator"] == {}

import json

import pytest

from mealdose.core.exceptions import ProfileNotFoundError
from mealdose.models.profile import MedicalProfile
from mealdose.services.profile_store import PROFILES_FILE, ProfileStore


def test_missing_profile_returns_none(profile_store):
    assert profile_store.get_profile("nobody") is None


def test_save_and_load(profile_store, complete_profile):
    profile_store.save_profile("alice", complete_profile)

    loaded = profile_store.get_profile("alice")
    assert loaded == complete_profile
    assert loaded.ratio_display == "1:10"


def test_profiles_are_keyed_by_user(profile_store, complete_profile):
    profile_store.save_profile("alice", complete_profile)
    profile_store.save_profile("bob", MedicalProfile(insulin_carb_ratio="1:15"))

    assert profile_store.get_profile("alice").insulin_carb_ratio == 0.1
    assert profile_store.get_profile("bob").insulin_carb_ratio == pytest.approx(1 / 15)


def test_save_overwrites(profile_store, complete_profile):
    profile_store.save_profile("alice", complete_profile)
    updated = complete_profile.model_copy(update={"target_glucose": 120})
    profile_store.save_profile("alice", updated)

    assert profile_store.get_profile("alice").target_glucose == 120


def test_require_profile(profile_store, complete_profile):
    with pytest.raises(ProfileNotFoundError) as exc_info:
        profile_store.require_profile("ghost")
    assert exc_info.value.user_id == "ghost"

    profile_store.save_profile("alice", complete_profile)
    assert profile_store.require_profile("alice") == complete_profile


def test_delete_profile(profile_store, complete_profile):
    profile_store.save_profile("alice", complete_profile)

    assert profile_store.delete_profile("alice") is True
    assert profile_store.delete_profile("alice") is False
    assert profile_store.get_profile("alice") is None


def test_corrupt_entry_is_treated_as_absent(tmp_path):
    (tmp_path / PROFILES_FILE).write_text(json.dumps({"alice": {"target_glucose": "high"}}), encoding="utf-8")
    store = ProfileStore(tmp_path)

    assert store.get_profile("alice") is None


def test_lock_file_is_released(profile_store, complete_profile, tmp_path):
    profile_store.save_profile("alice", complete_profile)
    assert not (tmp_path / (PROFILES_FILE + ".lock")).exists()


def test_unreadable_file_is_treated_as_absent(tmp_path, caplog):
    (tmp_path / PROFILES_FILE).write_text("{truncated", encoding="utf-8")
    store = ProfileStore(tmp_path)

    with caplog.at_level("WARNING"):
        assert store.get_profile("alice") is None
    assert "not valid JSON" in caplog.text
    with pytest.raises(ProfileNotFoundError):
        store.require_profile("alice")

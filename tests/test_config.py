# tests/test_config.py
from __future__ import annotations

import pytest

from primefinder import config
from primefinder.runtime import APPLY, CFG
from primefinder.runtime import current as _rt_current
from primefinder.utility import UserInputError
from primefinder.workspace import ensure_workspace_seeded, seed_workspace, workspace_dir


def test_workspace_follows_environment(isolated_workspace):
    assert workspace_dir() == isolated_workspace.resolve()


def test_seeding_copies_packaged_profiles_once(isolated_workspace):
    root, copied = ensure_workspace_seeded()
    assert copied == 2
    assert (root / "profiles" / "default.toml").is_file()

    _, copied_again = ensure_workspace_seeded()
    assert copied_again == 0


def test_seed_overwrite_restores_edited_profile(isolated_workspace):
    ensure_workspace_seeded()
    p = isolated_workspace / "profiles" / "default.toml"
    p.write_text("[BEHAVIOUR]\nDEBUG = true\n", encoding="utf-8")
    _, copied = seed_workspace(overwrite=True)
    assert copied == 2
    assert "SLOW_THRESHOLD_S" in p.read_text(encoding="utf-8")


def test_list_profiles():
    assert config.list_all_profiles() == ["debug", "default"]
    names = [name for name, _ in config.list_profiles_with_descriptions()]
    assert names == ["debug", "default"]


def test_load_settings_strips_profile_metadata():
    ensure_workspace_seeded()
    s = config.load_settings("debug")
    assert s.name == "debug"
    assert "Debug tracing" in s.description
    assert "PROFILE" not in s.data
    assert s.data["CONTROLLER"]["SLOW_THRESHOLD_S"] == 0.25


def test_load_settings_defaults_to_default_profile():
    ensure_workspace_seeded()
    assert config.load_settings(None).name == "default"


def test_missing_profile_raises():
    ensure_workspace_seeded()
    assert not config.has_profile("nope")
    with pytest.raises(FileNotFoundError):
        config.load_settings("nope")


def test_broken_profile_is_a_user_error(isolated_workspace):
    ensure_workspace_seeded()
    (isolated_workspace / "profiles" / "broken.toml").write_text("[BEHAVIOUR\nDEBUG = ", encoding="utf-8")
    with pytest.raises(UserInputError, match=r"reading broken\.toml: .*line 1"):
        config.load_settings("broken")


def test_profile_without_metadata_uses_file_name(isolated_workspace):
    ensure_workspace_seeded()
    (isolated_workspace / "profiles" / "plain.toml").write_text("[HISTORY]\nMAX_ITEMS = 5\n", encoding="utf-8")
    s = config.load_settings("plain")
    assert s.name == "plain"
    assert s.description == "(no description)"


def test_current_profile_round_trip():
    assert config.read_current_profile() is None
    config.write_current_profile("debug.toml")
    assert config.read_current_profile() == "debug"


def test_apply_settings_feeds_cfg_and_debug_flag():
    ensure_workspace_seeded()
    APPLY(config.load_settings("debug"))
    rt = _rt_current()
    assert rt.profile_name == "debug"
    assert rt.debug is True
    assert CFG("FORMATTING.THOUSANDS_SEPARATOR") == "_"
    assert CFG("FORMATTING.MISSING", "fallback") == "fallback"
    assert CFG("", 1) == 1


def test_session_debug_choice_outlives_profile_switch():
    ensure_workspace_seeded()
    rt = _rt_current()
    rt.debug = False
    APPLY(config.load_settings("debug"))
    assert rt.debug is False

    rt.debug_override = None
    assert rt.debug is True

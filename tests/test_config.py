"""Unit tests for settings persistence."""

import json

import pytest

from market_cma.config import AppSettings, SettingsStore
from market_cma.report.client import DEFAULT_MODEL


def test_app_settings_trims_key():
    settings = AppSettings(gemini_api_key="  abc  ")
    assert settings.gemini_api_key == "abc"
    assert settings.has_api_key
    assert not AppSettings(gemini_api_key="   ").has_api_key
    assert "abc" not in repr(settings)


def test_load_without_file_or_env(tmp_path):
    settings = SettingsStore(path=tmp_path / "settings.json", environ={}).load()
    assert settings == AppSettings()
    assert settings.model == DEFAULT_MODEL


def test_save_then_load(tmp_path):
    store = SettingsStore(path=tmp_path / "nested" / "settings.json", environ={})
    path = store.save(AppSettings(gemini_api_key="abc", model="gemini-x"))
    assert json.loads(path.read_text()) == {"gemini_api_key": "abc", "model": "gemini-x"}
    assert store.load() == AppSettings(gemini_api_key="abc", model="gemini-x")


def test_environment_overrides_file(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"gemini_api_key": "from-file", "extra": 1}))
    store = SettingsStore(path=path, environ={"API_KEY": "from-env"})
    assert store.load().gemini_api_key == "from-env"

    store = SettingsStore(
        path=path,
        environ={"MARKET_CMA_GEMINI_API_KEY": "preferred", "API_KEY": "fallback"},
    )
    assert store.load().gemini_api_key == "preferred"


def test_blank_environment_value_is_ignored(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"gemini_api_key": "from-file"}))
    store = SettingsStore(path=path, environ={"MARKET_CMA_GEMINI_API_KEY": "  "})
    assert store.load().gemini_api_key == "from-file"


@pytest.mark.parametrize("content", ["not json", json.dumps({"model": 5})])
def test_invalid_settings_file(tmp_path, content):
    path = tmp_path / "settings.json"
    path.write_text(content)
    with pytest.raises(ValueError, match="Invalid settings file"):
        SettingsStore(path=path, environ={}).load()

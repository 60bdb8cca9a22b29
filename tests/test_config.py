# tests/test_config.py
import json

import pytest

from verseflow import config as config_module
from verseflow.config import AppConfig, get_app_config, load_config
from verseflow.core.matcher import AccuracyLevel
from verseflow.core.settings import RecitationSettings, clamp_word_limit


def test_defaults_are_loaded():
    cfg = load_config()
    assert cfg.get("recitation", "word_limit") == 12
    assert cfg.get("recitation", "required_accuracy") == "Low"
    assert cfg.get("connector", "type") == "local"


def test_user_file_overrides_nested_keys(tmp_path):
    user = tmp_path / "user.json"
    user.write_text(json.dumps({"recitation": {"word_limit": 8}}), encoding="utf-8")
    cfg = load_config(user)
    assert cfg.get("recitation", "word_limit") == 8
    # Sibling keys survive the merge.
    assert cfg.get("recitation", "required_accuracy") == "Low"


def test_missing_user_file_is_ignored(tmp_path):
    cfg = load_config(tmp_path / "nope.json")
    assert cfg.get("recitation", "word_limit") == 12


def test_env_var_selects_user_file(tmp_path, monkeypatch):
    user = tmp_path / "env.json"
    user.write_text(json.dumps({"logging": {"level": "DEBUG"}}), encoding="utf-8")
    monkeypatch.setenv(config_module.CONFIG_ENV_VAR, str(user))
    assert get_app_config().get("logging", "level") == "DEBUG"


def test_missing_default_file_gives_empty_config(monkeypatch):
    monkeypatch.setattr(config_module, "DEFAULT_CONFIG_NAME", "no_such_settings.json")
    cfg = load_config()
    assert cfg.data == {}
    assert RecitationSettings.from_config(cfg) == RecitationSettings()


def test_get_returns_default_for_missing_path():
    cfg = AppConfig({"a": {"b": 1}})
    assert cfg.get("a", "b") == 1
    assert cfg.get("a", "c", default=5) == 5
    assert cfg.get("a", "b", "c", default=None) is None


@pytest.mark.parametrize("raw, expected", [(100, 30), (1, 3), ("abc", 12), (None, 12), ("7", 7)])
def test_word_limit_is_clamped(raw, expected):
    assert clamp_word_limit(raw) == expected


def test_settings_from_config():
    cfg = AppConfig({"recitation": {"required_accuracy": "high", "word_limit": 50, "speech_rate": 0.25}})
    settings = RecitationSettings.from_config(cfg)
    assert settings.accuracy is AccuracyLevel.HIGH
    assert settings.word_limit == 30
    assert settings.speech_rate == 0.25
    assert settings.voice_identifier == ""


def test_unknown_accuracy_falls_back_to_low():
    cfg = AppConfig({"recitation": {"required_accuracy": "perfect"}})
    assert RecitationSettings.from_config(cfg).accuracy is AccuracyLevel.LOW


def test_settings_replace_validates():
    settings = RecitationSettings().replace(accuracy="exact", word_limit=2)
    assert settings.accuracy is AccuracyLevel.EXACT
    assert settings.word_limit == 3


def test_section_returns_a_copy():
    cfg = AppConfig({"speech": {"samplerate": 16000}, "odd": 3})
    speech = cfg.section("speech")
    speech["samplerate"] = 8000
    assert cfg.get("speech", "samplerate") == 16000
    assert cfg.section("odd") == {}
    assert cfg.section("missing") == {}

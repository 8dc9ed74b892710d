"""Tests for config.py configuration management."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from dailyreport.config import DEFAULT_DATA_PATH, Config, ProfileConfig
from dailyreport.exceptions import ConfigurationError


def _profile(**overrides):
    """Create a minimal ProfileConfig."""
    defaults = {"name": "test"}
    defaults.update(overrides)
    return ProfileConfig(**defaults)


def _minimal_env(**overrides):
    """Minimal env vars."""
    env = {
        "OPENAI_API_KEY": "test-key",
        "MODEL_ID": "test-model",
    }
    env.update(overrides)
    return env


class TestConfigFromProfile:
    """Tests for Config.from_profile() method."""

    def test_missing_api_key_is_allowed(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_profile(_profile())
            assert config.api_key is None

    def test_env_values(self):
        with patch.dict(os.environ, _minimal_env(), clear=True):
            config = Config.from_profile(_profile())
            assert config.api_key == "test-key"
            assert config.model_id == "test-model"
            assert config.base_url is None

    def test_profile_overrides_env(self):
        with patch.dict(os.environ, _minimal_env(), clear=True):
            config = Config.from_profile(_profile(api_key="profile-key", model_id="profile-model"))
            assert config.api_key == "profile-key"
            assert config.model_id == "profile-model"

    def test_default_data_path(self):
        with patch.dict(os.environ, {}, clear=True):
            assert Config.from_profile(_profile()).data_path == DEFAULT_DATA_PATH

    def test_data_path_from_env(self):
        with patch.dict(os.environ, {"DAILY_REPORT_DATA_PATH": "/tmp/reports.json"}, clear=True):
            assert Config.from_profile(_profile()).data_path == Path("/tmp/reports.json")

    def test_data_path_from_profile_wins(self):
        env = {"DAILY_REPORT_DATA_PATH": "/tmp/env.json"}
        with patch.dict(os.environ, env, clear=True):
            config = Config.from_profile(_profile(data_path=Path("/tmp/profile.json")))
            assert config.data_path == Path("/tmp/profile.json")

    def test_custom_base_url(self):
        env = _minimal_env(OPENAI_BASE_URL="https://custom.api/v1")
        with patch.dict(os.environ, env, clear=True):
            assert Config.from_profile(_profile()).base_url == "https://custom.api/v1"

    def test_generation_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_profile(_profile())
            assert config.temperature == 0.3
            assert config.max_tokens == 2000
            assert config.request_timeout == 60.0

    def test_timeout_from_env(self):
        with patch.dict(os.environ, {"REQUEST_TIMEOUT": "15"}, clear=True):
            assert Config.from_profile(_profile()).request_timeout == 15.0

    def test_profile_timeout_overrides_env(self):
        with patch.dict(os.environ, {"REQUEST_TIMEOUT": "15"}, clear=True):
            assert Config.from_profile(_profile(request_timeout=5)).request_timeout == 5.0

    def test_non_numeric_timeout_raises(self):
        with patch.dict(os.environ, {"REQUEST_TIMEOUT": "soon"}, clear=True):
            with pytest.raises(ConfigurationError, match="REQUEST_TIMEOUT"):
                Config.from_profile(_profile())

    def test_negative_timeout_raises(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="request_timeout"):
                Config.from_profile(_profile(request_timeout=-1))

    def test_temperature_out_of_range_raises(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ConfigurationError, match="temperature"):
                Config.from_profile(_profile(temperature=3.5))

    def test_zero_temperature_kept(self):
        with patch.dict(os.environ, {}, clear=True):
            assert Config.from_profile(_profile(temperature=0)).temperature == 0.0

    def test_from_env(self):
        with patch.dict(os.environ, _minimal_env(), clear=True):
            assert Config.from_env().api_key == "test-key"


class TestWithSettings:
    """Tests for Config.with_settings()."""

    def test_fills_from_settings(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_profile(_profile()).with_settings(
                {"api": {"apiKey": "stored-key", "model": "gpt-4o-mini"}}
            )
            assert config.api_key == "stored-key"
            assert config.model_id == "gpt-4o-mini"

    def test_env_beats_settings(self):
        with patch.dict(os.environ, _minimal_env(), clear=True):
            config = Config.from_profile(_profile()).with_settings(
                {"api": {"apiKey": "stored-key", "model": "gpt-4o-mini"}}
            )
            assert config.api_key == "test-key"
            assert config.model_id == "test-model"

    def test_empty_settings_default_model(self):
        with patch.dict(os.environ, {}, clear=True):
            config = Config.from_profile(_profile()).with_settings({"api": {"apiKey": "", "model": ""}})
            assert config.api_key is None
            assert config.model_id == "gpt-4o"


class TestProfileConfig:
    """Tests for ProfileConfig.from_file()."""

    def test_yaml_profile(self, tmp_path):
        path = tmp_path / "work.yaml"
        path.write_text(
            "name: work\n"
            "data_path: /tmp/work.json\n"
            "model_id: gpt-4o-mini\n"
            "request_timeout: 30\n",
            encoding="utf-8",
        )
        profile = ProfileConfig.from_file(path)
        assert profile.name == "work"
        assert profile.data_path == Path("/tmp/work.json")
        assert profile.model_id == "gpt-4o-mini"
        assert profile.request_timeout == 30

    def test_json_profile_name_defaults_to_stem(self, tmp_path):
        path = tmp_path / "home.json"
        path.write_text(json.dumps({"api_key": "k"}), encoding="utf-8")
        profile = ProfileConfig.from_file(path)
        assert profile.name == "home"
        assert profile.api_key == "k"
        assert profile.data_path is None

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("", encoding="utf-8")
        assert ProfileConfig.from_file(path).name == "empty"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ProfileConfig.from_file(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("name: [unclosed", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            ProfileConfig.from_file(path)

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError, match="mapping"):
            ProfileConfig.from_file(path)

"""Configuration management for dailyreport.

Centralizes profile and environment configuration loading and validation.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from dailyreport.exceptions import ConfigurationError


DEFAULT_DATA_PATH = Path.home() / ".daily-report-converter" / "db.json"
DEFAULT_MODEL_ID = "gpt-4o"
DEFAULT_TEMPERATURE = 0.3
DEFAULT_MAX_TOKENS = 2000
DEFAULT_REQUEST_TIMEOUT = 60.0


@dataclass
class ProfileConfig:
    """Profile configuration loaded from a YAML or JSON file.

    Every field is optional; unset values fall back to the environment and then
    to the settings stored alongside the reports.
    """

    name: str
    data_path: Path | None = None

    # API configuration
    api_key: str | None = None
    base_url: str | None = None
    model_id: str | None = None
    request_timeout: float | None = None

    # Generation configuration
    temperature: float | None = None
    max_tokens: int | None = None

    @classmethod
    def from_file(cls, profile_path: Path) -> "ProfileConfig":
        """Load profile from YAML or JSON file."""
        if not profile_path.exists():
            raise FileNotFoundError(f"Profile not found: {profile_path}")

        content = profile_path.read_text(encoding="utf-8")

        try:
            if profile_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(content) or {}
            else:
                data = json.loads(content)
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Profile '{profile_path}' is not valid: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Profile '{profile_path}' must be a mapping")

        data_path = data.get("data_path")
        return cls(
            name=data.get("name", profile_path.stem),
            data_path=Path(data_path).expanduser() if data_path else None,
            api_key=data.get("api_key"),
            base_url=data.get("base_url"),
            model_id=data.get("model_id"),
            request_timeout=data.get("request_timeout"),
            temperature=data.get("temperature"),
            max_tokens=data.get("max_tokens"),
        )


def _env_float(name: str) -> float | None:
    raw = os.getenv(name)
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}")


@dataclass
class Config:
    """Configuration for the daily report converter.

    Values are resolved with priority: profile > environment > defaults.
    ``api_key`` and ``model_id`` may additionally come from the stored settings
    via ``with_settings``. A missing API key is not an error: monthly reports
    then use the basic rendering.
    """

    # Storage
    data_path: Path

    # API Configuration
    api_key: str | None
    base_url: str | None
    model_id: str | None
    request_timeout: float

    # Generation Configuration
    temperature: float
    max_tokens: int

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables only."""
        return cls.from_profile(ProfileConfig(name="env"))

    @classmethod
    def from_profile(cls, profile: ProfileConfig) -> "Config":
        """Load configuration from a profile, filling gaps from the environment.

        Raises:
            ConfigurationError: If a numeric setting is out of range.
        """
        env_path = os.getenv("DAILY_REPORT_DATA_PATH")
        data_path = profile.data_path or (Path(env_path).expanduser() if env_path else DEFAULT_DATA_PATH)

        request_timeout = profile.request_timeout
        if request_timeout is None:
            request_timeout = _env_float("REQUEST_TIMEOUT") or DEFAULT_REQUEST_TIMEOUT
        if request_timeout <= 0:
            raise ConfigurationError(f"Profile '{profile.name}': request_timeout must be positive")

        temperature = DEFAULT_TEMPERATURE if profile.temperature is None else profile.temperature
        if not 0.0 <= temperature <= 2.0:
            raise ConfigurationError(f"Profile '{profile.name}': temperature must be between 0 and 2")

        max_tokens = profile.max_tokens or DEFAULT_MAX_TOKENS
        if max_tokens < 1:
            raise ConfigurationError(f"Profile '{profile.name}': max_tokens must be positive")

        return cls(
            data_path=data_path,
            api_key=profile.api_key or os.getenv("OPENAI_API_KEY") or None,
            base_url=profile.base_url or os.getenv("OPENAI_BASE_URL") or None,
            model_id=profile.model_id or os.getenv("MODEL_ID") or None,
            request_timeout=float(request_timeout),
            temperature=float(temperature),
            max_tokens=int(max_tokens),
        )

    def with_settings(self, settings: dict[str, Any]) -> "Config":
        """Fill API key and model from the stored ``settings.api`` block."""
        api = settings.get("api") or {}
        return Config(
            data_path=self.data_path,
            api_key=self.api_key or api.get("apiKey") or None,
            base_url=self.base_url,
            model_id=self.model_id or api.get("model") or DEFAULT_MODEL_ID,
            request_timeout=self.request_timeout,
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

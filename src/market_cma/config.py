"""User settings: the Gemini API key and model, persisted as a small JSON file."""

from __future__ import annotations

import json
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
import marshmallow as ma
import structlog
from attrs import define, evolve, field

from .report.client import DEFAULT_MODEL

logger = structlog.get_logger(__name__)

APP_NAME = "market-cma"
SETTINGS_FILENAME = "settings.json"
# Checked in order; the first non-empty value wins over the settings file.
API_KEY_ENV_VARS = ("MARKET_CMA_GEMINI_API_KEY", "API_KEY")


def _clean_key(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


@define(slots=True, frozen=True)
class AppSettings:
    """Configuration handed to the session controller at start-up."""

    gemini_api_key: str | None = field(default=None, converter=_clean_key, repr=False)
    model: str = DEFAULT_MODEL

    @property
    def has_api_key(self) -> bool:
        """Return True when a usable key is configured."""
        return bool(self.gemini_api_key)


class SettingsSchema(ma.Schema):
    """Marshmallow schema for :class:`AppSettings` files."""

    gemini_api_key = ma.fields.Str(allow_none=True, load_default=None)
    model = ma.fields.Str(load_default=DEFAULT_MODEL)

    class Meta:
        unknown = ma.EXCLUDE

    @ma.post_load
    def make_settings(self, data: dict[str, Any], **kwargs: object) -> AppSettings:
        """Instantiate :class:`AppSettings` from validated payloads."""
        return AppSettings(**data)


def default_settings_path() -> Path:
    """Return the per-user settings file location."""
    return Path(click.get_app_dir(APP_NAME)) / SETTINGS_FILENAME


@define(slots=True)
class SettingsStore:
    """Load and save :class:`AppSettings` with explicit environment overrides."""

    path: Path = field(factory=default_settings_path, converter=Path)
    environ: Mapping[str, str] = field(factory=lambda: os.environ)

    def load(self) -> AppSettings:
        """Read the settings file (if any), then apply environment overrides."""
        settings = AppSettings()
        if self.path.exists():
            try:
                settings = SettingsSchema().load(json.loads(self.path.read_text()))
            except (json.JSONDecodeError, ma.ValidationError) as exc:
                raise ValueError(f"Invalid settings file {self.path}: {exc}") from exc
            logger.debug("settings.loaded", path=str(self.path))
        env_key = self._env_api_key()
        if env_key:
            settings = evolve(settings, gemini_api_key=env_key)
            logger.debug("settings.env_override", has_api_key=True)
        return settings

    def save(self, settings: AppSettings) -> Path:
        """Persist ``settings``; the key is trimmed on the way in."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        document = SettingsSchema().dump(settings)
        self.path.write_text(json.dumps(document, indent=2))
        logger.info("settings.saved", path=str(self.path), has_api_key=settings.has_api_key)
        return self.path

    def _env_api_key(self) -> str | None:
        for name in API_KEY_ENV_VARS:
            value = _clean_key(self.environ.get(name))
            if value:
                return value
        return None


__all__ = ["APP_NAME", "AppSettings", "SettingsSchema", "SettingsStore", "default_settings_path"]

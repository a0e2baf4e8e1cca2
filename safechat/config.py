"""Process configuration for the safety endpoints and the completion engine.

Settings are loaded once per process from an optional YAML file and the
environment (environment wins) and then passed explicitly to the objects that
need them.  Nothing in the package reads the environment after start-up.

Example YAML::

    safety:
      endpoint: https://my-resource.cognitiveservices.azure.com/contentsafety
      key: ...
    completion:
      model: claude-sonnet-4-5-20250929
      temperature: 0.6
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

DEFAULT_MODEL = "claude-sonnet-4-5-20250929"
DEFAULT_MAX_TOKENS = 2500
DEFAULT_TEMPERATURE = 0.6

SHIELD_API_VERSION = "2024-02-15-preview"
MODERATION_API_VERSION = "2023-10-01"


class ConfigError(ValueError):
    """Raised when a required setting is absent."""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SafetyConfig:
    """Endpoint/key pairs for the two content-safety classifiers."""

    shield_endpoint: str = ""
    shield_key: str = ""
    moderation_endpoint: str = ""
    moderation_key: str = ""
    shield_api_version: str = SHIELD_API_VERSION
    moderation_api_version: str = MODERATION_API_VERSION
    timeout: float | None = None

    def missing(self) -> list[str]:
        """Return the names of unset required fields, in declaration order."""
        required = ("shield_endpoint", "shield_key", "moderation_endpoint", "moderation_key")
        return [name for name in required if not getattr(self, name)]

    @property
    def shield_url(self) -> str:
        return f"{self.shield_endpoint.rstrip('/')}/text:shieldPrompt?api-version={self.shield_api_version}"

    @property
    def moderation_url(self) -> str:
        return f"{self.moderation_endpoint.rstrip('/')}/text:analyze?api-version={self.moderation_api_version}"


@dataclass(frozen=True)
class CompletionConfig:
    """Settings for the streaming completion engine."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    max_tokens: int = DEFAULT_MAX_TOKENS
    temperature: float = DEFAULT_TEMPERATURE

    def require(self) -> CompletionConfig:
        """Return *self*, or raise :class:`ConfigError` if no API key is set."""
        if not self.api_key:
            raise ConfigError("Completion engine not configured. Set ANTHROPIC_API_KEY.")
        return self


@dataclass(frozen=True)
class AppConfig:
    safety: SafetyConfig
    completion: CompletionConfig


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_yaml(path: str | Path | None) -> dict:
    if path is None:
        return {}
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text()) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")
    return data


def _first(*values: object) -> str:
    for value in values:
        if value:
            return str(value)
    return ""


def load_safety_config(
    file_data: Mapping | None = None,
    environ: Mapping[str, str] | None = None,
) -> SafetyConfig:
    """Build a :class:`SafetyConfig` from YAML data and environment variables.

    ``AZURE_CONTENT_SAFETY_ENDPOINT`` / ``AZURE_CONTENT_SAFETY_KEY`` serve both
    classifiers; the ``AZURE_PROMPT_SHIELD_*`` and ``AZURE_TEXT_MODERATION_*``
    variables override them individually.
    """
    env = os.environ if environ is None else environ
    section = dict((file_data or {}).get("safety") or {})

    shared_endpoint = _first(env.get("AZURE_CONTENT_SAFETY_ENDPOINT"), section.get("endpoint"))
    shared_key = _first(env.get("AZURE_CONTENT_SAFETY_KEY"), section.get("key"))
    shield = section.get("shield") or {}
    moderation = section.get("moderation") or {}

    timeout = section.get("timeout")
    return SafetyConfig(
        shield_endpoint=_first(env.get("AZURE_PROMPT_SHIELD_ENDPOINT"), shield.get("endpoint"), shared_endpoint),
        shield_key=_first(env.get("AZURE_PROMPT_SHIELD_KEY"), shield.get("key"), shared_key),
        moderation_endpoint=_first(
            env.get("AZURE_TEXT_MODERATION_ENDPOINT"), moderation.get("endpoint"), shared_endpoint
        ),
        moderation_key=_first(env.get("AZURE_TEXT_MODERATION_KEY"), moderation.get("key"), shared_key),
        shield_api_version=_first(shield.get("api_version"), SHIELD_API_VERSION),
        moderation_api_version=_first(moderation.get("api_version"), MODERATION_API_VERSION),
        timeout=float(timeout) if timeout is not None else None,
    )


def load_completion_config(
    file_data: Mapping | None = None,
    environ: Mapping[str, str] | None = None,
) -> CompletionConfig:
    """Build a :class:`CompletionConfig` from YAML data and environment variables."""
    env = os.environ if environ is None else environ
    section = dict((file_data or {}).get("completion") or {})
    return CompletionConfig(
        api_key=_first(env.get("ANTHROPIC_API_KEY"), section.get("api_key")),
        model=_first(env.get("SAFECHAT_MODEL"), section.get("model"), DEFAULT_MODEL),
        max_tokens=int(section.get("max_tokens", DEFAULT_MAX_TOKENS)),
        temperature=float(section.get("temperature", DEFAULT_TEMPERATURE)),
    )


def load_config(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load the full application config.  Call once at start-up."""
    data = _read_yaml(path)
    return AppConfig(
        safety=load_safety_config(data, environ),
        completion=load_completion_config(data, environ),
    )

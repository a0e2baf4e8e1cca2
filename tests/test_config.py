"""Tests for configuration loading."""

import pytest
import yaml

from safechat.config import (
    DEFAULT_MAX_TOKENS,
    DEFAULT_MODEL,
    CompletionConfig,
    ConfigError,
    SafetyConfig,
    load_completion_config,
    load_config,
    load_safety_config,
)


def test_shared_safety_settings_fill_both_classifiers():
    config = load_safety_config(
        environ={
            "AZURE_CONTENT_SAFETY_ENDPOINT": "https://cs.test/contentsafety/",
            "AZURE_CONTENT_SAFETY_KEY": "secret",
        }
    )
    assert config.missing() == []
    assert config.shield_key == config.moderation_key == "secret"
    assert config.shield_url == "https://cs.test/contentsafety/text:shieldPrompt?api-version=2024-02-15-preview"
    assert config.moderation_url == "https://cs.test/contentsafety/text:analyze?api-version=2023-10-01"


def test_per_classifier_overrides():
    config = load_safety_config(
        environ={
            "AZURE_CONTENT_SAFETY_ENDPOINT": "https://shared.test",
            "AZURE_CONTENT_SAFETY_KEY": "shared",
            "AZURE_TEXT_MODERATION_ENDPOINT": "https://moderation.test",
            "AZURE_TEXT_MODERATION_KEY": "mod",
        }
    )
    assert config.shield_endpoint == "https://shared.test"
    assert config.moderation_endpoint == "https://moderation.test"
    assert config.moderation_key == "mod"


def test_missing_safety_settings_are_reported():
    config = load_safety_config(environ={})
    assert config.missing() == ["shield_endpoint", "shield_key", "moderation_endpoint", "moderation_key"]
    assert SafetyConfig(shield_endpoint="x", shield_key="y").missing() == [
        "moderation_endpoint",
        "moderation_key",
    ]


def test_completion_defaults():
    config = load_completion_config(environ={"ANTHROPIC_API_KEY": "sk-test"})
    assert config.api_key == "sk-test"
    assert config.model == DEFAULT_MODEL
    assert config.max_tokens == DEFAULT_MAX_TOKENS
    assert config.temperature == 0.6
    assert config.require() is config


def test_completion_requires_api_key():
    with pytest.raises(ConfigError):
        CompletionConfig().require()


def test_yaml_file_with_environment_override(tmp_path):
    path = tmp_path / "safechat.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "safety": {
                    "endpoint": "https://file.test",
                    "key": "file-key",
                    "shield": {"api_version": "2024-09-01"},
                    "timeout": 5,
                },
                "completion": {"model": "claude-haiku-3-5-20241022", "max_tokens": 512},
            }
        )
    )
    config = load_config(path, environ={"AZURE_CONTENT_SAFETY_KEY": "env-key", "ANTHROPIC_API_KEY": "sk"})

    assert config.safety.shield_endpoint == "https://file.test"
    assert config.safety.shield_key == "env-key"
    assert config.safety.shield_api_version == "2024-09-01"
    assert config.safety.timeout == 5.0
    assert config.completion.model == "claude-haiku-3-5-20241022"
    assert config.completion.max_tokens == 512
    assert config.completion.api_key == "sk"


def test_missing_config_file(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "nope.yaml", environ={})


def test_config_file_must_be_a_mapping(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("- just\n- a list\n")
    with pytest.raises(ConfigError):
        load_config(path, environ={})

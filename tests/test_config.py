"""Tests for settings loading."""
from __future__ import annotations

import pytest

from l1m.config import Settings, _expand_env_vars, load_settings
from l1m.models import ProviderConfig


class TestEnvVarExpansion:
    """Tests for environment variable expansion."""

    def test_expand_simple_var(self, monkeypatch):
        monkeypatch.setenv("TEST_VAR", "test_value")
        assert _expand_env_vars("${TEST_VAR}") == "test_value"

    def test_expand_var_with_default(self, monkeypatch):
        monkeypatch.delenv("UNSET_VAR", raising=False)
        assert _expand_env_vars("${UNSET_VAR:-default_value}") == "default_value"

        monkeypatch.setenv("SET_VAR", "actual_value")
        assert _expand_env_vars("${SET_VAR:-default_value}") == "actual_value"

    def test_expand_nested(self, monkeypatch):
        monkeypatch.setenv("API_KEY", "secret123")
        data = {"provider": {"key": "${API_KEY}"}, "list": ["${API_KEY}"], "n": 3}
        assert _expand_env_vars(data) == {
            "provider": {"key": "secret123"},
            "list": ["secret123"],
            "n": 3,
        }


class TestLoadSettings:
    """Tests for load_settings precedence."""

    def test_defaults(self):
        settings = load_settings()
        assert settings == Settings()
        assert settings.timeout_s == 30.0
        assert settings.max_attempts == 1
        assert settings.port == 3000
        assert settings.default_provider() is None

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("L1M_PROVIDER_URL", "https://api.openai.com/v1")
        monkeypatch.setenv("L1M_PROVIDER_KEY", "sk-test")
        monkeypatch.setenv("L1M_PROVIDER_MODEL", "gpt-4o-mini")
        monkeypatch.setenv("L1M_MAX_ATTEMPTS", "3")
        monkeypatch.setenv("LOG_LEVEL", "debug")

        settings = load_settings()

        assert settings.max_attempts == 3
        assert settings.log_level == "DEBUG"
        assert settings.default_provider() == ProviderConfig(
            url="https://api.openai.com/v1", key="sk-test", model="gpt-4o-mini"
        )

    def test_yaml_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "ant-secret")
        config_file = tmp_path / "l1m.yaml"
        config_file.write_text(
            "provider:\n"
            "  url: https://api.anthropic.com/v1\n"
            "  key: ${ANTHROPIC_API_KEY}\n"
            "  model: claude-3-5-haiku-latest\n"
            "timeout_s: 10\n"
            "max_attempts: 2\n"
        )

        settings = load_settings(str(config_file))

        assert settings.provider_key == "ant-secret"
        assert settings.timeout_s == 10.0
        assert settings.max_attempts == 2

    def test_env_beats_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "l1m.yaml"
        config_file.write_text("max_attempts: 2\nport: 8080\n")
        monkeypatch.setenv("L1M_CONFIG_PATH", str(config_file))
        monkeypatch.setenv("L1M_MAX_ATTEMPTS", "5")

        settings = load_settings()

        assert settings.max_attempts == 5
        assert settings.port == 8080

    def test_unknown_keys_ignored(self, tmp_path):
        config_file = tmp_path / "l1m.yaml"
        config_file.write_text("colour: blue\nhost: 127.0.0.1\n")

        settings = load_settings(str(config_file))

        assert settings.host == "127.0.0.1"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_settings(str(tmp_path / "missing.yaml"))

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("L1M_TIMEOUT_S", "soon")
        with pytest.raises(ValueError, match="timeout_s"):
            load_settings()

    def test_partial_provider(self, monkeypatch):
        monkeypatch.setenv("L1M_PROVIDER_URL", "https://api.openai.com/v1")
        assert load_settings().default_provider() is None


class TestMaxAttemptsLimit:

    def test_default(self):
        assert load_settings().max_attempts_limit == 10

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("L1M_MAX_ATTEMPTS_LIMIT", "4")
        assert load_settings().max_attempts_limit == 4

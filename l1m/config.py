"""Configuration loading.

Settings are resolved from, lowest to highest precedence:

1. Built-in defaults
2. A YAML file (``L1M_CONFIG_PATH`` or an explicit path)
3. Environment variables

Example YAML::

    provider:
      url: https://api.anthropic.com/v1/messages
      key: ${ANTHROPIC_API_KEY}
      model: claude-3-5-haiku-latest
    timeout_s: 30
    max_attempts: 3
    max_attempts_limit: 10
    log_level: INFO
"""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from l1m.models import ProviderConfig

log = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.l1m.io"

# setting name -> environment variable
ENV_VARS = {
    "provider_url": "L1M_PROVIDER_URL",
    "provider_key": "L1M_PROVIDER_KEY",
    "provider_model": "L1M_PROVIDER_MODEL",
    "base_url": "L1M_BASE_URL",
    "timeout_s": "L1M_TIMEOUT_S",
    "max_attempts": "L1M_MAX_ATTEMPTS",
    "max_attempts_limit": "L1M_MAX_ATTEMPTS_LIMIT",
    "log_level": "LOG_LEVEL",
    "host": "HOST",
    "port": "PORT",
}


@dataclass(frozen=True)
class Settings:
    provider_url: Optional[str] = None
    provider_key: Optional[str] = None
    provider_model: Optional[str] = None

    # Remote l1m proxy; unset means the CLI runs extraction in-process
    base_url: Optional[str] = None

    timeout_s: float = 30.0
    max_attempts: int = 1
    # Ceiling for the per-request x-max-attempts header
    max_attempts_limit: int = 10
    log_level: str = "INFO"

    # Proxy server
    host: str = "0.0.0.0"
    port: int = 3000

    def default_provider(self) -> Optional[ProviderConfig]:
        """Provider built from settings, when url, key and model are all set."""
        if self.provider_url and self.provider_key and self.provider_model:
            return ProviderConfig(
                url=self.provider_url,
                key=self.provider_key,
                model=self.provider_model,
            )
        return None


def _expand_env_vars(value: Any) -> Any:
    """Expand ``${VAR}`` and ``${VAR:-default}`` in configuration values."""
    if isinstance(value, str):
        pattern = r"\$\{([^}:]+)(?::-([^}]*))?\}"

        def replacer(match):
            return os.getenv(match.group(1), match.group(2) or "")

        return re.sub(pattern, replacer, value)
    elif isinstance(value, dict):
        return {k: _expand_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_expand_env_vars(item) for item in value]
    return value


def _coerce(name: str, value: Any) -> Any:
    if value is None or value == "":
        return None
    if name == "timeout_s":
        return float(value)
    if name in ("max_attempts", "max_attempts_limit", "port"):
        return int(value)
    if name == "log_level":
        return str(value).upper()
    return str(value)


def _flatten_file_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    values = dict(raw)
    provider = values.pop("provider", None) or {}
    for key in ("url", "key", "model"):
        if provider.get(key) is not None:
            values[f"provider_{key}"] = provider[key]
    known = {f.name for f in fields(Settings)}
    unknown = sorted(set(values) - known)
    if unknown:
        log.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")
    return {k: v for k, v in values.items() if k in known}


def _read_file(config_path: str) -> Dict[str, Any]:
    log.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, "r") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse configuration file: {e}") from e

    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file must contain a mapping: {config_path}")
    return _flatten_file_config(_expand_env_vars(raw))


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Build :class:`Settings` from defaults, an optional YAML file and the environment.

    Raises:
        FileNotFoundError: ``config_path`` was given but does not exist
        ValueError: the file or an environment value cannot be parsed
    """
    path = config_path or os.getenv("L1M_CONFIG_PATH")
    values: Dict[str, Any] = {}

    if path:
        if not Path(path).exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")
        values.update(_read_file(path))

    for name, env_var in ENV_VARS.items():
        env_value = os.getenv(env_var)
        if env_value:
            values[name] = env_value

    coerced = {}
    for name, value in values.items():
        try:
            value = _coerce(name, value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid value for {name}: {value!r}") from e
        if value is not None:
            coerced[name] = value

    return replace(Settings(), **coerced)

"""Configuration management for mimimatch.

Loads config from YAML file with environment variable overrides.
Priority: env vars > YAML > defaults.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from mimimatch.decisions import DEFAULT_SETTLE_DELAY

DEFAULT_DATA_DIR = "~/.mimimatch"

# Mapping of env var names to (config field, type converter)
_ENV_OVERRIDES: dict[str, tuple[str, type]] = {
    "MIMIMATCH_DATA_DIR": ("data_dir", str),
    "MIMIMATCH_DATASET": ("dataset_path", str),
    "MIMIMATCH_SETTLE_DELAY": ("settle_delay", float),
    "MIMIMATCH_SHUFFLE_SEED": ("shuffle_seed", int),
}


class AppConfig(BaseModel, frozen=True):
    """Application configuration. Immutable."""

    # Storage
    data_dir: str = DEFAULT_DATA_DIR

    # Dataset (None = bundled names.yaml)
    dataset_path: str | None = None

    # Swiping
    settle_delay: float = Field(default=DEFAULT_SETTLE_DELAY, ge=0.0)
    shuffle_seed: int | None = None

    @property
    def data_path(self) -> Path:
        """Storage directory with '~' expanded."""
        return Path(self.data_dir).expanduser()


def _flatten_yaml(data: dict[str, Any], *, _prefix: str = "") -> dict[str, Any]:
    """Flatten nested YAML structure to flat config fields (recursive).

    Example: {"shuffle": {"seed": 7}}
    becomes: {"shuffle_seed": 7}
    """
    flat: dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{_prefix}{key}" if not _prefix else f"{_prefix}_{key}"
        if isinstance(value, dict):
            flat.update(_flatten_yaml(value, _prefix=full_key))
        else:
            flat[full_key] = value
    return flat


def _apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides to config dict."""
    result = dict(config_dict)
    for env_var, (field_name, converter) in _ENV_OVERRIDES.items():
        env_value = os.environ.get(env_var)
        if env_value is not None:
            result[field_name] = converter(env_value)
    return result


def load_config(config_path: str | None = None) -> AppConfig:
    """Load configuration from YAML file with env var overrides.

    Priority: env vars > YAML file > defaults.

    Args:
        config_path: Path to YAML config file, or None for defaults.

    Returns:
        Frozen AppConfig instance.

    Raises:
        FileNotFoundError: If config_path is specified but doesn't exist.
        ValueError: If YAML file is invalid.
    """
    config_dict: dict[str, Any] = {}

    if config_path is not None:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        raw = path.read_text(encoding="utf-8")
        try:
            parsed = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e

        if isinstance(parsed, dict):
            config_dict = _flatten_yaml(parsed)

    config_dict = _apply_env_overrides(config_dict)

    return AppConfig(**config_dict)

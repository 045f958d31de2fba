"""
pricetoml/config.py

Resolves converter settings from defaults, environment variables and
explicit overrides (CLI options), in that order of precedence.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict

from . import (
    DEFAULT_ATTEMPTS,
    DEFAULT_OUTPUT_PATH,
    DEFAULT_TIMEOUT,
    LITELLM_PRICES_URL,
    MODELSDEV_URL,
)


@dataclass
class ConverterConfig:
    """Settings for one converter run."""

    litellm_url: str = LITELLM_PRICES_URL
    modelsdev_url: str = MODELSDEV_URL
    output_path: Path = Path(DEFAULT_OUTPUT_PATH)
    timeout: float = DEFAULT_TIMEOUT  # seconds, per HTTP attempt
    attempts: int = DEFAULT_ATTEMPTS
    fetch_modelsdev: bool = True


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# env var -> (config field, converter)
_ENV_VARS: Dict[str, tuple] = {
    "PRICETOML_LITELLM_URL": ("litellm_url", str),
    "PRICETOML_MODELSDEV_URL": ("modelsdev_url", str),
    "PRICETOML_OUTPUT": ("output_path", Path),
    "PRICETOML_TIMEOUT": ("timeout", float),
    "PRICETOML_ATTEMPTS": ("attempts", int),
    "PRICETOML_SKIP_MODELSDEV": ("fetch_modelsdev", lambda v: not _parse_bool(v)),
}


def _from_environment() -> Dict[str, Any]:
    values: Dict[str, Any] = {}
    for env_var, (field_name, convert) in _ENV_VARS.items():
        raw = os.environ.get(env_var)
        if raw is None or raw.strip() == "":
            continue
        try:
            values[field_name] = convert(raw.strip())
        except ValueError as e:
            raise ValueError(f"Invalid value for {env_var}: {raw!r}") from e
    return values


def load_config(**overrides: Any) -> ConverterConfig:
    """Build a :class:`ConverterConfig`.

    Environment variables override the defaults; keyword overrides whose value
    is not ``None`` override both.
    """
    known = {f.name for f in fields(ConverterConfig)}
    values = _from_environment()
    for key, value in overrides.items():
        if key not in known:
            raise TypeError(f"Unknown config option: {key}")
        if value is not None:
            values[key] = value

    config = ConverterConfig(**values)
    config.output_path = Path(config.output_path)
    if config.attempts < 1:
        raise ValueError("attempts must be at least 1")
    return config

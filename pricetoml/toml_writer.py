"""
pricetoml/toml_writer.py

Deterministic TOML rendering of the model map.  Model sections are sorted by
name, top-level keys follow a fixed order and every table is key-sorted, so
identical inputs always give byte-identical output and the same checksum.
"""
from __future__ import annotations

import hashlib
import re
from datetime import date
from typing import Any, Dict, List, Mapping, Sequence, Union

from .models import SCALAR_FIELDS, NormalizedModel

# Order of top-level keys in a model section; other keys follow alphabetically
TOP_LEVEL_KEYS = SCALAR_FIELDS

_BARE_KEY = re.compile(r"^[A-Za-z0-9_-]+$")

ModelLike = Union[NormalizedModel, Mapping[str, Any]]


def escape_toml_string(text: str) -> str:
    return text.replace("\\", "\\\\").replace('"', '\\"')


def format_toml_key(key: str) -> str:
    """Bare keys stay as they are; anything else is quoted."""
    if _BARE_KEY.match(key):
        return key
    return f'"{escape_toml_string(key)}"'


def to_toml_value(value: Any) -> str:
    """Encode a value for the right-hand side of ``key = value``."""
    if value is None:
        return '""'
    if isinstance(value, str):
        return f'"{escape_toml_string(value)}"'
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        return "[" + ", ".join(to_toml_value(v) for v in value) + "]"
    if isinstance(value, dict):
        if not value:
            return "{}"
        items = ", ".join(f"{format_toml_key(k)} = {to_toml_value(value[k])}" for k in sorted(value))
        return "{ " + items + " }"
    return str(value)


def _as_dict(model: ModelLike) -> Dict[str, Any]:
    if isinstance(model, NormalizedModel):
        return model.to_dict()
    return dict(model)


def normalized_model_to_toml(model_name: str, model: ModelLike) -> str:
    """Render one ``[models."<name>"]`` section with its sub-tables."""
    data = _as_dict(model)
    header = f'models."{escape_toml_string(model_name)}"'
    lines: List[str] = [f"[{header}]"]
    nested_sections: List[tuple] = []
    pricing_sections: List[str] = []

    extra_keys = sorted(k for k in data if k not in TOP_LEVEL_KEYS and k != "pricing")
    for key in list(TOP_LEVEL_KEYS) + extra_keys:
        value = data.get(key)
        if value is None:
            continue
        if isinstance(value, dict):
            nested_sections.append((key, value))
        else:
            lines.append(f"{format_toml_key(key)} = {to_toml_value(value)}")

    for key, value in nested_sections:
        lines.append("")
        lines.append(f"[{header}.{format_toml_key(key)}]")
        for nested_key in sorted(value):
            lines.append(f"{format_toml_key(nested_key)} = {to_toml_value(value[nested_key])}")

    pricing = data.get("pricing") or {}
    for provider_key in sorted(pricing):
        block = pricing[provider_key]
        if not isinstance(block, dict):
            continue
        block_lines = [f'[{header}.pricing."{escape_toml_string(provider_key)}"]']
        for key in sorted(block):
            if block[key] is not None:
                block_lines.append(f"{format_toml_key(key)} = {to_toml_value(block[key])}")
        # A header with no values is dropped
        if len(block_lines) > 1:
            pricing_sections.append("\n".join(block_lines))

    if pricing_sections:
        lines.append("")
        lines.extend(pricing_sections)

    return "\n".join(lines)


def render_models_section(models: Mapping[str, ModelLike]) -> str:
    return "\n\n".join(normalized_model_to_toml(name, models[name]) for name in sorted(models))


def generate_checksum(data: str) -> str:
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def format_version(day: date) -> str:
    return f"{day.year}.{day.month:02d}.{day.day:02d}"


def render_document(
    models_toml: str,
    *,
    checksum: str,
    version: str,
    sources: Sequence[str],
    litellm_raw_models: int,
    modelsdev_raw_models: int,
    custom_models: int,
    total_models: int,
) -> str:
    """Assemble the full output file: header comments, metadata, models."""
    lines = [
        "# Generated by pricetoml (LiteLLM price table converter)",
        "# Sources: LiteLLM + models.dev" if "modelsdev" in sources else "# Source: LiteLLM",
        "",
        "[metadata]",
        f"version = {to_toml_value(version)}",
        f"checksum = {to_toml_value(checksum)}",
        f"sources = {to_toml_value(list(sources))}",
        f"total_models = {total_models}",
        f"litellm_raw_models = {litellm_raw_models}",
        f"modelsdev_raw_models = {modelsdev_raw_models}",
        f"custom_models = {custom_models}",
        "",
        models_toml,
        "",
    ]
    return "\n".join(lines)

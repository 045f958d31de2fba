"""
pricetoml/custom_models.py

Preserves hand-written models across runs.

A model section in the previous output that contains ``source = "custom"`` is
recovered with a small line-oriented reader and laid back over the freshly
merged models at the end of the run.  The reader only understands the shapes
``toml_writer`` emits; it is not a general TOML parser and never raises on
bad input, so a damaged file loses individual lines rather than the run.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

from .model_names import normalize_provider_id
from .models import (
    CUSTOM_PROVIDER,
    SOURCE_CUSTOM,
    ModelPricing,
    NormalizedModel,
    extract_pricing,
    is_number,
)

logger = logging.getLogger(__name__)

CUSTOM_MARKER = 'source = "custom"'

_MODEL_HEADER = re.compile(r'^\[models\."((?:[^"\\]|\\.)+)"\]\s*$', re.MULTILINE)
# Bare keys use the same character set the writer leaves unquoted
_KEY_VALUE = re.compile(r'^([A-Za-z0-9_-]+|"(?:[^"\\]|\\.)*")\s*=\s*(.+)$')
_ESCAPE = re.compile(r'\\(["\\])')


# ---------------------------------------------------------------------------
# Line-level parsing
# ---------------------------------------------------------------------------


def _unescape(text: str) -> str:
    return _ESCAPE.sub(r"\1", text)


def _parse_number(text: str) -> Union[int, float, None]:
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return None


def parse_toml_value(raw: str) -> Any:
    """Decode the right-hand side of a ``key = value`` line."""
    value = raw.strip()
    if value == "true":
        return True
    if value == "false":
        return False

    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return _unescape(value[1:-1])

    if value.startswith("["):
        try:
            return json.loads(value)
        except ValueError:
            try:
                return json.loads(value.replace("'", '"'))
            except ValueError:
                return value

    number = _parse_number(value)
    if number is not None:
        return number
    return value


def parse_toml_dotted_path(path: str) -> List[str]:
    """Split ``pricing."bedrock/us.east"`` on dots that are outside quotes."""
    parts: List[str] = []
    current = ""
    in_quotes = False
    for ch in path:
        if ch == '"':
            in_quotes = not in_quotes
            continue
        if ch == "." and not in_quotes:
            if current:
                parts.append(current)
                current = ""
            continue
        current += ch
    if current:
        parts.append(current)
    return [p for p in parts if p]


def _get_or_create_nested(root: Dict[str, Any], path: List[str]) -> Dict[str, Any]:
    current = root
    for key in path:
        existing = current.get(key)
        if isinstance(existing, dict):
            current = existing
        else:
            nested: Dict[str, Any] = {}
            current[key] = nested
            current = nested
    return current


def parse_custom_model_block(model_name: str, section: str) -> Dict[str, Any]:
    """Parse one ``[models."<name>"]`` section (with its sub-tables) into a dict."""
    info: Dict[str, Any] = {}
    target = info
    top_header = f'[models."{model_name}"]'
    nested_prefix = f'[models."{model_name}".'

    for raw_line in section.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        if line == top_header:
            target = info
            continue

        if line.startswith(nested_prefix) and line.endswith("]"):
            segments = [s.strip() for s in parse_toml_dotted_path(line[len(nested_prefix):-1])]
            target = _get_or_create_nested(info, [s for s in segments if s])
            continue

        match = _KEY_VALUE.match(line)
        if not match:
            continue
        key, raw_value = match.groups()
        if key.startswith('"'):
            key = _unescape(key[1:-1])
        target[key] = parse_toml_value(raw_value)

    return info


def parse_custom_models(content: str) -> Dict[str, Dict[str, Any]]:
    """Return ``{model_name: fields}`` for every custom section of *content*."""
    custom_models: Dict[str, Dict[str, Any]] = {}

    # Header positions are collected once; each section runs to the next header
    headers = [(m.group(1), m.start()) for m in _MODEL_HEADER.finditer(content)]
    for i, (model_name, start) in enumerate(headers):
        end = headers[i + 1][1] if i + 1 < len(headers) else len(content)
        section = content[start:end]
        if CUSTOM_MARKER not in section:
            continue
        info = parse_custom_model_block(model_name, section)
        if info.get("source") == SOURCE_CUSTOM:
            custom_models[_unescape(model_name)] = info

    return custom_models


def load_existing_custom_models(path: Union[str, Path]) -> Dict[str, Dict[str, Any]]:
    """Read custom models from a previous output file; a missing file yields ``{}``."""
    path = Path(path)
    if not path.is_file():
        logger.debug("No existing price table at %s", path)
        return {}
    return parse_custom_models(path.read_text(encoding="utf-8", errors="replace"))


# ---------------------------------------------------------------------------
# Override layer
# ---------------------------------------------------------------------------


def merge_pricing_deep(
    base: Mapping[str, ModelPricing],
    overlay: Mapping[str, Any],
) -> Dict[str, ModelPricing]:
    """Merge *overlay* pricing into *base* one provider block at a time.

    Only numeric cost fields of the overlay are taken; fields the overlay does
    not mention keep their base value.
    """
    result: Dict[str, ModelPricing] = {key: dict(value) for key, value in base.items()}
    for provider_key, maybe_pricing in overlay.items():
        if not isinstance(maybe_pricing, dict):
            continue
        merged = dict(result.get(provider_key, {}))
        merged.update(extract_pricing(maybe_pricing))
        result[provider_key] = merged
    return result


def _model_from_custom(info: Mapping[str, Any]) -> NormalizedModel:
    hint = info.get("litellm_provider")
    litellm_provider = normalize_provider_id(hint if isinstance(hint, str) else None) or CUSTOM_PROVIDER

    model = NormalizedModel.from_fields(info)
    mode = info.get("mode")
    model.mode = mode if isinstance(mode, str) else "chat"
    model.providers = [litellm_provider] if litellm_provider != CUSTOM_PROVIDER else []
    model.litellm_provider = litellm_provider
    model.pricing = {}
    model.source = SOURCE_CUSTOM

    overlay_pricing = info.get("pricing")
    if isinstance(overlay_pricing, dict):
        model.pricing = merge_pricing_deep({}, overlay_pricing)
    else:
        flat = extract_pricing(model.to_dict())
        if flat:
            model.pricing[litellm_provider] = flat
    return model


def apply_custom_models(
    models: Dict[str, NormalizedModel],
    custom_models: Mapping[str, Mapping[str, Any]],
) -> None:
    """Lay every custom model over *models*; custom fields always win.

    Pricing is merged per provider block instead of being replaced.  Custom
    models that no upstream source mentions any more are recreated from the
    custom fields alone.
    """
    for name, info in custom_models.items():
        existing = models.get(name)
        if existing is None:
            models[name] = _model_from_custom(info)
            continue

        base_pricing = existing.pricing
        overlay_pricing = info.get("pricing")
        existing.update(info)
        existing.source = SOURCE_CUSTOM
        if isinstance(overlay_pricing, dict):
            existing.pricing = merge_pricing_deep(base_pricing, overlay_pricing)
        else:
            existing.pricing = base_pricing


def count_numeric_prices(info: Mapping[str, Any]) -> int:
    """Number of numeric cost values across the pricing blocks of a custom entry."""
    pricing = info.get("pricing")
    if not isinstance(pricing, dict):
        return len(extract_pricing(info))
    return sum(
        1
        for block in pricing.values()
        if isinstance(block, dict)
        for value in block.values()
        if is_number(value)
    )

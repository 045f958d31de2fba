"""
pricetoml/merge_models.py

Groups LiteLLM rows that normalize to the same bare model id into one
``NormalizedModel``, keeping each provider's (or provider/region's) pricing
as its own block.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from .model_names import ParsedModelName, normalize_provider_id, parse_model_name
from .models import DEFAULT_PROVIDER, NormalizedModel, extract_pricing, is_number

logger = logging.getLogger(__name__)

# LiteLLM documentation row describing the schema, not a model
_SKIP_KEYS = {"sample_spec"}

_LIMIT_FIELDS = ("max_input_tokens", "max_output_tokens", "max_tokens")
_ARRAY_FIELDS = ("supported_modalities", "supported_output_modalities", "supported_endpoints")


def pricing_key(provider: str, region: Optional[str]) -> str:
    """``provider`` or ``provider/region``."""
    return f"{provider}/{region}" if region else provider


def merge_string_array_unique(model: NormalizedModel, key: str, value: Any) -> None:
    """Union the string items of *value* into ``model[key]``, first-seen order."""
    if not isinstance(value, list):
        return
    items = [v for v in value if isinstance(v, str)]
    if not items:
        return

    merged: Dict[str, None] = {}
    existing = model.get(key)
    if isinstance(existing, list):
        for v in existing:
            if isinstance(v, str):
                merged[v] = None
    for v in items:
        merged[v] = None
    model.set(key, list(merged))


def merge_models_with_same_name(
    models: Dict[str, NormalizedModel],
    parsed: ParsedModelName,
    info: Mapping[str, Any],
) -> None:
    """Fold one LiteLLM row into *models* under ``parsed.model_id``.

    The first row for an id seeds the record.  Later rows replace the pricing
    block for their own pricing key, OR the ``supports_*`` flags, keep the
    largest token limits and union the modality/endpoint lists.
    """
    provider_id = (
        normalize_provider_id(parsed.provider or info.get("litellm_provider"))
        or DEFAULT_PROVIDER
    )
    key = pricing_key(provider_id, parsed.region)
    model_id = parsed.model_id

    existing = models.get(model_id)
    if existing is None:
        model = NormalizedModel.from_fields(info)
        mode = info.get("mode")
        model.mode = mode if isinstance(mode, str) else "chat"
        model.providers = [provider_id] if provider_id != DEFAULT_PROVIDER else []
        model.litellm_provider = provider_id
        model.pricing = {key: extract_pricing(info)}
        models[model_id] = model
        return

    existing.pricing[key] = extract_pricing(info)

    if provider_id != DEFAULT_PROVIDER and provider_id not in existing.providers:
        existing.providers.append(provider_id)

    for field_name, value in info.items():
        if field_name.startswith("supports_") and isinstance(value, bool):
            if value and not existing.get(field_name):
                existing.set(field_name, True)

    for field_name in _LIMIT_FIELDS:
        value = info.get(field_name)
        if not is_number(value):
            continue
        current = existing.get(field_name)
        if not is_number(current) or value > current:
            existing.set(field_name, value)

    for field_name in _ARRAY_FIELDS:
        merge_string_array_unique(existing, field_name, info.get(field_name))

    if not existing.litellm_provider or existing.litellm_provider == DEFAULT_PROVIDER:
        existing.litellm_provider = provider_id


def normalize_providers_and_pricing(model: NormalizedModel) -> None:
    """Make ``providers`` cover every pricing key, lowercase and de-duplicated.

    The ``litellm_provider`` sorts first, the rest alphabetically.
    """
    if not isinstance(model.providers, list):
        model.providers = []
    if not isinstance(model.pricing, dict):
        model.pricing = {}

    providers = [p for p in model.providers if isinstance(p, str)]
    for key in model.pricing:
        base_provider = key.split("/")[0]
        if base_provider and base_provider not in providers:
            providers.append(base_provider)

    preferred = normalize_provider_id(model.litellm_provider)
    unique = sorted({p.lower() for p in providers})
    if preferred in unique:
        unique.remove(preferred)
        unique.insert(0, preferred)
    model.providers = unique


def merge_litellm_models(models: Dict[str, NormalizedModel], litellm_data: Mapping[str, Any]) -> int:
    """Run every row of a LiteLLM catalog through the merger.

    Returns the number of rows merged.
    """
    merged = 0
    for full_name, info in litellm_data.items():
        if full_name in _SKIP_KEYS:
            continue
        if not isinstance(info, dict):
            logger.debug("Skipping non-object LiteLLM entry %r", full_name)
            continue
        provider_hint = info.get("litellm_provider")
        parsed = parse_model_name(full_name, provider_hint if isinstance(provider_hint, str) else None)
        merge_models_with_same_name(models, parsed, info)
        merged += 1
    return merged

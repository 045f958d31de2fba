"""
pricetoml/enrich_modelsdev.py

Layers the models.dev catalog over the merged LiteLLM models.  models.dev is
strictly supplementary: matched models only gain fields they do not have yet,
and unmatched models are only added when models.dev has prices for them.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from .model_names import apply_alias_normalization, normalize_leading_provider_prefix
from .models import (
    SOURCE_MODELSDEV,
    ModelPricing,
    ModelsDevCost,
    ModelsDevModel,
    NormalizedModel,
    is_number,
)

logger = logging.getLogger(__name__)

# models.dev quotes USD per million units; LiteLLM quotes USD per unit
PER_MILLION = 1_000_000

_COST_FIELDS = (
    ("input", "input_cost_per_token"),
    ("output", "output_cost_per_token"),
    ("cache_read", "cache_read_input_token_cost"),
    ("reasoning", "reasoning_cost_per_token"),
)


def modelsdev_cost_to_pricing(cost: Optional[ModelsDevCost]) -> ModelPricing:
    """Convert a models.dev cost block to per-unit pricing.

    Zero or missing prices are left out rather than written as ``0``.
    """
    pricing: ModelPricing = {}
    if cost is None:
        return pricing
    for source_field, target_field in _COST_FIELDS:
        value = getattr(cost, source_field)
        if value:
            pricing[target_field] = value / PER_MILLION
    return pricing


def candidate_keys(provider_id: str, model_id: str) -> List[str]:
    """Lookup keys for a models.dev model, most canonical first."""
    normalized_id = normalize_leading_provider_prefix(model_id)
    canonical_id = apply_alias_normalization(normalized_id)
    candidates = [
        canonical_id,
        normalized_id,
        model_id,
        f"{provider_id}/{canonical_id}",
        f"{provider_id}/{normalized_id}",
        f"{provider_id}/{model_id}",
    ]
    return [c for c in dict.fromkeys(candidates) if c]


def find_first_match_key(by_lower_id: Mapping[str, str], candidates: List[str]) -> Optional[str]:
    for candidate in candidates:
        key = by_lower_id.get(candidate.lower())
        if key:
            return key
    return None


def _fill_if_absent(model: NormalizedModel, field_name: str, value: Any) -> None:
    if model.get(field_name) is None and value is not None:
        model.set(field_name, value)


def _or_flag(model: NormalizedModel, field_name: str, value: Optional[bool]) -> None:
    if value is None:
        return
    model.set(field_name, bool(model.get(field_name)) or value)


def enrich_existing_model(
    model: NormalizedModel,
    provider_id: str,
    md_model: ModelsDevModel,
    cost_pricing: ModelPricing,
) -> None:
    """Fill the gaps of an already-known model from a matching models.dev entry."""
    modalities = md_model.modalities
    limit = md_model.limit

    _fill_if_absent(model, "display_name", md_model.name)
    _fill_if_absent(model, "model_family", md_model.family)
    _fill_if_absent(model, "open_weights", md_model.open_weights)
    _fill_if_absent(model, "knowledge_cutoff", md_model.knowledge)
    _fill_if_absent(model, "release_date", md_model.release_date)
    _fill_if_absent(model, "supported_modalities", modalities.input if modalities else None)
    _fill_if_absent(model, "supported_output_modalities", modalities.output if modalities else None)

    _or_flag(model, "supports_reasoning", md_model.reasoning)
    _or_flag(model, "supports_function_calling", md_model.tool_call)

    if limit is not None:
        if not is_number(model.max_input_tokens) and limit.context is not None:
            model.max_input_tokens = limit.context
        if not is_number(model.max_output_tokens) and limit.output is not None:
            model.max_output_tokens = limit.output

    if not is_number(model.get("reasoning_cost_per_token")) and "reasoning_cost_per_token" in cost_pricing:
        model.set("reasoning_cost_per_token", cost_pricing["reasoning_cost_per_token"])

    if cost_pricing and provider_id not in model.pricing:
        model.pricing[provider_id] = dict(cost_pricing)
        if provider_id not in model.providers:
            model.providers.append(provider_id)


def model_from_modelsdev(provider_id: str, md_model: ModelsDevModel, cost_pricing: ModelPricing) -> NormalizedModel:
    """Mint a new logical model that only models.dev knows about."""
    modalities = md_model.modalities
    limit = md_model.limit
    model = NormalizedModel(
        display_name=md_model.name,
        model_family=md_model.family,
        mode="chat",
        max_input_tokens=limit.context if limit else None,
        max_output_tokens=limit.output if limit else None,
        supports_reasoning=md_model.reasoning,
        supports_function_calling=md_model.tool_call,
        open_weights=md_model.open_weights,
        knowledge_cutoff=md_model.knowledge,
        release_date=md_model.release_date,
        supported_modalities=modalities.input if modalities else None,
        supported_output_modalities=modalities.output if modalities else None,
        providers=[provider_id],
        litellm_provider=provider_id,
        input_cost_per_token=cost_pricing.get("input_cost_per_token"),
        output_cost_per_token=cost_pricing.get("output_cost_per_token"),
        cache_read_input_token_cost=cost_pricing.get("cache_read_input_token_cost"),
        pricing={provider_id: dict(cost_pricing)},
        source=SOURCE_MODELSDEV,
    )
    model.set("reasoning_cost_per_token", cost_pricing.get("reasoning_cost_per_token"))
    return model


def enrich_with_modelsdev_data(
    models: Dict[str, NormalizedModel],
    by_lower_id: Dict[str, str],
    modelsdev_data: Mapping[str, Any],
) -> int:
    """Apply the models.dev catalog to *models* in place.

    *by_lower_id* maps lowercased model ids to their keys in *models* and is
    kept current as new models are minted.  Returns the number of new models.
    """
    added = 0
    for provider_id_raw, provider in modelsdev_data.items():
        if not isinstance(provider, dict):
            logger.debug("Skipping non-object models.dev provider %r", provider_id_raw)
            continue
        provider_id = provider_id_raw.lower()
        provider_models = provider.get("models") or {}
        if not isinstance(provider_models, dict):
            continue

        for model_id, raw_model in provider_models.items():
            try:
                md_model = ModelsDevModel.model_validate(raw_model)
            except ValidationError as e:
                logger.debug("Skipping malformed models.dev model %s/%s: %s", provider_id, model_id, e)
                continue

            cost_pricing = modelsdev_cost_to_pricing(md_model.cost)
            key = find_first_match_key(by_lower_id, candidate_keys(provider_id, model_id))

            if key is not None:
                existing = models.get(key)
                if existing is not None:
                    enrich_existing_model(existing, provider_id, md_model, cost_pricing)
                continue

            if not cost_pricing:
                continue

            new_key = apply_alias_normalization(normalize_leading_provider_prefix(model_id))
            if new_key.lower() in by_lower_id:
                continue

            models[new_key] = model_from_modelsdev(provider_id, md_model, cost_pricing)
            by_lower_id[new_key.lower()] = new_key
            added += 1
    return added

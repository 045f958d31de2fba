"""
pricetoml/model_names.py

Parses LiteLLM model identifiers such as ``bedrock/us-east-1/anthropic/claude-3``
into ``{provider, region, model_id}`` and normalizes ids for cross-source
matching.  Provider and region recognition uses a closed vocabulary so that
arbitrary path segments (``meta-llama/...``) are never taken for structure.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import List, Optional

# ---------------------------------------------------------------------------
# Closed vocabularies
# ---------------------------------------------------------------------------

KNOWN_PROVIDERS = frozenset({
    "openai",
    "azure",
    "anthropic",
    "google",
    "gemini",
    "vertex_ai",
    "bedrock",
    "bedrock_converse",
    "cohere",
    "mistral",
    "groq",
    "together",
    "anyscale",
    "aiml",
    "deepinfra",
    "replicate",
    "huggingface",
    "fireworks_ai",
    "ollama",
    "perplexity",
    "amazon-nova",
    "amazon_nova",
    "nvidia_nim",
    "databricks",
    "friendliai",
    "voyage",
    "xinference",
    "cloudflare",
    "aleph_alpha",
    "nlp_cloud",
    "petals",
    "openrouter",
    "palm",
    "ai21",
    "sagemaker",
    "amazon",
    "aws_polly",
    "assemblyai",
    "cerebras",
})

KNOWN_REGIONS = frozenset({
    "eu",
    "us",
    "global",
    "global-standard",
    "apac",
    "us-east-1",
    "us-west-2",
    "eu-west-1",
})

# Version punctuation between two digits: "3.5" -> "3-5"
_VERSION_DOT = re.compile(r"(\d)\.(\d)")


@dataclass(frozen=True)
class ParsedModelName:
    """Structural decomposition of a model identifier."""

    provider: Optional[str]
    region: Optional[str]
    model_id: str  # bare id, no leading provider/region segments
    original_name: str


def normalize_provider_id(provider: Optional[str]) -> Optional[str]:
    """Return *provider* trimmed and lowercased, or ``None`` if empty."""
    if not provider or not isinstance(provider, str):
        return None
    trimmed = provider.strip()
    if not trimmed:
        return None
    return trimmed.lower()


def normalize_leading_provider_prefix(model_id: str) -> str:
    """Strip leading ``provider[/region]/`` segments, repeatedly.

    At least one segment is always kept, so ``openai/gpt-4o`` becomes
    ``gpt-4o`` while a bare ``openai`` is returned unchanged.
    """
    parts: List[str] = model_id.split("/")
    while len(parts) > 1:
        first = parts[0].lower()
        if first not in KNOWN_PROVIDERS:
            break
        parts = parts[1:]
        if len(parts) > 1 and parts[0].lower() in KNOWN_REGIONS:
            parts = parts[1:]
    return "/".join(parts)


def parse_model_name(full_name: str, explicit_provider: Optional[str] = None) -> ParsedModelName:
    """Split *full_name* into provider, region and bare model id.

    *explicit_provider* is the row's ``litellm_provider`` hint.  It is used as
    the provider for single-segment names and for names whose first segment is
    not structural, and it also counts as a recognized prefix when the first
    segment equals it.
    """
    parts = full_name.split("/")
    hint = normalize_provider_id(explicit_provider)

    if len(parts) == 1:
        return ParsedModelName(provider=hint, region=None, model_id=full_name, original_name=full_name)

    first = parts[0].lower()
    is_provider_prefix = bool(first) and (first in KNOWN_PROVIDERS or first == hint)
    if not is_provider_prefix:
        return ParsedModelName(provider=hint, region=None, model_id=full_name, original_name=full_name)

    second = parts[1].lower()
    if len(parts) > 2 and second in KNOWN_REGIONS:
        return ParsedModelName(
            provider=first,
            region=second,
            model_id=normalize_leading_provider_prefix("/".join(parts[2:])),
            original_name=full_name,
        )

    return ParsedModelName(
        provider=first,
        region=None,
        model_id=normalize_leading_provider_prefix("/".join(parts[1:])),
        original_name=full_name,
    )


def apply_alias_normalization(model_id: str) -> str:
    """Canonicalize version punctuation, e.g. ``claude-3.5-sonnet`` -> ``claude-3-5-sonnet``."""
    return _VERSION_DOT.sub(r"\1-\2", model_id)

"""
pricetoml/models.py

Record types shared by the pipeline stages: the merged ``NormalizedModel``
and the pydantic schema of a models.dev catalog entry.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Iterator, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict

ModelPricing = Dict[str, float]

# Synthetic provider used when a row names no provider at all
DEFAULT_PROVIDER = "default"
# Synthetic provider for custom models without a litellm_provider hint
CUSTOM_PROVIDER = "custom"

SOURCE_CUSTOM = "custom"
SOURCE_MODELSDEV = "modelsdev"


def is_number(value: Any) -> bool:
    """True for int/float values, excluding booleans."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def extract_pricing(record: Mapping[str, Any]) -> ModelPricing:
    """Copy the numeric ``*cost*`` fields of *record* into a pricing block."""
    return {
        key: value
        for key, value in record.items()
        if is_number(value) and "cost" in key.lower()
    }


# ---------------------------------------------------------------------------
# Normalized model
# ---------------------------------------------------------------------------


@dataclass
class NormalizedModel:
    """One logical model, keyed by bare model id in the pipeline's model map.

    Well-known fields are typed attributes; every other upstream field lives
    in ``extra`` and is written back out unchanged.  ``None`` means absent.
    """

    display_name: Optional[str] = None
    model_family: Optional[str] = None
    mode: Optional[str] = "chat"
    max_input_tokens: Optional[int] = None
    max_output_tokens: Optional[int] = None
    max_tokens: Optional[int] = None
    # Legacy flat prices, kept at top level for older readers
    input_cost_per_token: Optional[float] = None
    output_cost_per_token: Optional[float] = None
    cache_read_input_token_cost: Optional[float] = None
    cache_creation_input_token_cost: Optional[float] = None
    litellm_provider: Optional[str] = None
    providers: List[str] = field(default_factory=list)
    supports_function_calling: Optional[bool] = None
    supports_vision: Optional[bool] = None
    supports_reasoning: Optional[bool] = None
    supports_prompt_caching: Optional[bool] = None
    supports_pdf_input: Optional[bool] = None
    open_weights: Optional[bool] = None
    knowledge_cutoff: Optional[str] = None
    release_date: Optional[str] = None
    deprecation_date: Optional[str] = None
    supported_modalities: Optional[List[str]] = None
    supported_output_modalities: Optional[List[str]] = None
    source: Optional[str] = None
    pricing: Dict[str, ModelPricing] = field(default_factory=dict)
    extra: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        if key in SCALAR_FIELDS:
            value = getattr(self, key)
        elif key == "pricing":
            value = self.pricing
        else:
            value = self.extra.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """Assign *key*, routing unknown names into ``extra``."""
        if key in SCALAR_FIELDS:
            setattr(self, key, value)
        elif key == "pricing":
            self.pricing = value if isinstance(value, dict) else {}
        elif value is None:
            self.extra.pop(key, None)
        else:
            self.extra[key] = value

    def update(self, values: Mapping[str, Any]) -> None:
        """Shallow overlay: every key of *values* replaces the current value."""
        for key, value in values.items():
            self.set(key, value)

    def keys(self) -> Iterator[str]:
        """Names of all present (non-``None``) fields except ``pricing``."""
        for name in SCALAR_FIELDS:
            if getattr(self, name) is not None:
                yield name
        for name, value in self.extra.items():
            if value is not None:
                yield name

    def to_dict(self) -> Dict[str, Any]:
        data = {key: self.get(key) for key in self.keys()}
        data["pricing"] = self.pricing
        return data

    @classmethod
    def from_fields(cls, values: Mapping[str, Any]) -> "NormalizedModel":
        model = cls()
        model.update(values)
        return model


SCALAR_FIELDS = tuple(
    f.name for f in fields(NormalizedModel) if f.name not in ("pricing", "extra")
)


# ---------------------------------------------------------------------------
# models.dev catalog schema
# ---------------------------------------------------------------------------


class ModelsDevCost(BaseModel):
    """Prices in USD per million units."""

    model_config = ConfigDict(extra="ignore")

    input: Optional[float] = None
    output: Optional[float] = None
    cache_read: Optional[float] = None
    reasoning: Optional[float] = None


class ModelsDevLimit(BaseModel):
    model_config = ConfigDict(extra="ignore")

    context: Optional[int] = None
    output: Optional[int] = None


class ModelsDevModalities(BaseModel):
    model_config = ConfigDict(extra="ignore")

    input: Optional[List[str]] = None
    output: Optional[List[str]] = None


class ModelsDevModel(BaseModel):
    """A single model of a models.dev provider.  Absent fields stay ``None``."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    family: Optional[str] = None
    modalities: Optional[ModelsDevModalities] = None
    reasoning: Optional[bool] = None
    tool_call: Optional[bool] = None
    open_weights: Optional[bool] = None
    knowledge: Optional[str] = None
    release_date: Optional[str] = None
    cost: Optional[ModelsDevCost] = None
    limit: Optional[ModelsDevLimit] = None

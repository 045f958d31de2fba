"""
pricetoml/convert_prices.py

Runs the whole conversion: load custom models from the previous output,
fetch both catalogs, merge, enrich, re-apply custom models, render and write.

Usage:
    pricetoml update [--output PATH]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from rich.markup import escape

from . import console
from .config import ConverterConfig
from .custom_models import apply_custom_models, load_existing_custom_models
from .enrich_modelsdev import enrich_with_modelsdev_data
from .errors import WriteError
from .fetch_sources import count_modelsdev_models, fetch_all_sources
from .merge_models import merge_litellm_models, normalize_providers_and_pricing
from .models import NormalizedModel
from .toml_writer import format_version, generate_checksum, render_document, render_models_section

logger = logging.getLogger(__name__)


@dataclass
class ConversionResult:
    """Summary of one converter run."""

    output_path: Path
    version: str
    checksum: str
    sources: List[str]
    total_models: int
    litellm_raw_models: int
    modelsdev_raw_models: int
    custom_models: int


class PriceTableBuilder:
    """Owns the model map while it passes through the pipeline stages."""

    def __init__(self) -> None:
        self.models: Dict[str, NormalizedModel] = {}
        self.by_lower_id: Dict[str, str] = {}

    def _reindex(self) -> None:
        self.by_lower_id = {model_id.lower(): model_id for model_id in self.models}

    def add_litellm_models(self, litellm_data: Mapping[str, Any]) -> int:
        merged = merge_litellm_models(self.models, litellm_data)
        self._reindex()
        return merged

    def enrich_with_modelsdev(self, modelsdev_data: Mapping[str, Any]) -> int:
        return enrich_with_modelsdev_data(self.models, self.by_lower_id, modelsdev_data)

    def apply_custom_models(self, custom_models: Mapping[str, Mapping[str, Any]]) -> None:
        apply_custom_models(self.models, custom_models)
        self._reindex()

    def finalize(self) -> Dict[str, NormalizedModel]:
        for model in self.models.values():
            normalize_providers_and_pricing(model)
        return self.models


def build_price_table(
    litellm_data: Mapping[str, Any],
    modelsdev_data: Mapping[str, Any],
    custom_models: Mapping[str, Mapping[str, Any]],
) -> Dict[str, NormalizedModel]:
    """Merge, enrich and apply custom models; no I/O."""
    builder = PriceTableBuilder()

    console.print("Normalizing and merging LiteLLM models...")
    builder.add_litellm_models(litellm_data)
    console.print(f"Normalized to {len(builder.models)} unique models")

    if modelsdev_data:
        console.print("Enriching with models.dev data...")
        builder.enrich_with_modelsdev(modelsdev_data)
        console.print(f"After models.dev enrichment: {len(builder.models)} models")

    console.print("Preserving custom models...")
    builder.apply_custom_models(custom_models)
    return builder.finalize()


def render_price_table(
    models: Mapping[str, NormalizedModel],
    *,
    litellm_raw_models: int,
    modelsdev_raw_models: int,
    custom_models: int,
    today: Optional[date] = None,
) -> Tuple[str, str, str, List[str]]:
    """Render the output document.  Returns ``(text, checksum, version, sources)``."""
    models_toml = render_models_section(models)
    checksum = generate_checksum(models_toml)
    version = format_version(today or date.today())
    sources = ["litellm", "modelsdev"] if modelsdev_raw_models > 0 else ["litellm"]
    text = render_document(
        models_toml,
        checksum=checksum,
        version=version,
        sources=sources,
        litellm_raw_models=litellm_raw_models,
        modelsdev_raw_models=modelsdev_raw_models,
        custom_models=custom_models,
        total_models=len(models),
    )
    return text, checksum, version, sources


def write_price_table(path: Path, text: str) -> None:
    """Write the rendered document, creating parent directories as needed."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise WriteError(f"Failed to write {path}: {e}") from e


def run_conversion(
    config: ConverterConfig,
    *,
    today: Optional[date] = None,
    fetch: Optional[Callable[[ConverterConfig], Tuple[Dict[str, Any], Dict[str, Any]]]] = None,
) -> ConversionResult:
    """Run the converter end to end and write ``config.output_path``."""
    fetch = fetch or fetch_all_sources
    output_path = Path(config.output_path)

    console.print("Loading existing custom models...")
    custom_models = load_existing_custom_models(output_path)
    console.print(f"Found {len(custom_models)} custom models to preserve")

    console.print("Fetching data sources in parallel...")
    litellm_data, modelsdev_data = fetch(config)

    litellm_raw = len(litellm_data)
    modelsdev_raw = count_modelsdev_models(modelsdev_data)
    console.print(f"Loaded {litellm_raw} models from LiteLLM")
    console.print(f"Loaded {modelsdev_raw} models from models.dev")

    models = build_price_table(litellm_data, modelsdev_data if modelsdev_raw > 0 else {}, custom_models)

    text, checksum, version, sources = render_price_table(
        models,
        litellm_raw_models=litellm_raw,
        modelsdev_raw_models=modelsdev_raw,
        custom_models=len(custom_models),
        today=today,
    )
    write_price_table(output_path, text)
    logger.debug("Wrote %d bytes to %s", len(text), output_path)

    console.print(f"\n[success]Success![/success] Written to: [path]{escape(str(output_path))}[/path]")
    console.print(f"  Version: {version}")
    console.print(f"  Models: {len(models)}")
    console.print(f"  Checksum: {checksum[:16]}...")

    return ConversionResult(
        output_path=output_path,
        version=version,
        checksum=checksum,
        sources=sources,
        total_models=len(models),
        litellm_raw_models=litellm_raw,
        modelsdev_raw_models=modelsdev_raw,
        custom_models=len(custom_models),
    )

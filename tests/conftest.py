"""Project-level pytest configuration and shared catalog fixtures."""

import os

import pytest
from dotenv import load_dotenv

from pricetoml import console

# Load environment variables from .env early in collection
load_dotenv()

_CONFIG_ENV_VARS = (
    "PRICETOML_LITELLM_URL",
    "PRICETOML_MODELSDEV_URL",
    "PRICETOML_OUTPUT",
    "PRICETOML_TIMEOUT",
    "PRICETOML_ATTEMPTS",
    "PRICETOML_SKIP_MODELSDEV",
)


@pytest.fixture(autouse=True)
def clean_config_env(monkeypatch):
    """Keep developer settings out of the tests."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    yield


@pytest.fixture(autouse=True)
def restore_console_quiet():
    """The CLI toggles the shared console; put it back after each test."""
    original = console.quiet
    yield
    console.quiet = original


# --- Sample upstream catalogs ---

@pytest.fixture
def litellm_catalog():
    return {
        "sample_spec": {
            "max_tokens": "LEGACY parameter",
            "input_cost_per_token": 0.0,
            "litellm_provider": "one of https://docs.litellm.ai/docs/providers",
        },
        "gpt-4o": {
            "litellm_provider": "openai",
            "mode": "chat",
            "max_input_tokens": 128000,
            "max_output_tokens": 16384,
            "input_cost_per_token": 2.5e-06,
            "output_cost_per_token": 1e-05,
            "supports_vision": True,
            "supports_function_calling": True,
        },
        "azure/gpt-4o": {
            "litellm_provider": "azure",
            "mode": "chat",
            "max_input_tokens": 128000,
            "max_output_tokens": 4096,
            "input_cost_per_token": 5e-06,
            "output_cost_per_token": 1.5e-05,
            "supports_vision": False,
        },
        "azure/eu/gpt-4o": {
            "litellm_provider": "azure",
            "mode": "chat",
            "input_cost_per_token": 5.5e-06,
            "output_cost_per_token": 1.65e-05,
        },
        "claude-3-opus-20240229": {
            "litellm_provider": "anthropic",
            "mode": "chat",
            "max_input_tokens": 200000,
            "max_output_tokens": 4096,
            "input_cost_per_token": 0.000015,
            "output_cost_per_token": 0.000075,
            "supports_vision": True,
        },
        "text-embedding-3-small": {
            "litellm_provider": "openai",
            "mode": "embedding",
            "input_cost_per_token": 2e-08,
            "output_cost_per_token": 0.0,
        },
    }


@pytest.fixture
def modelsdev_catalog():
    return {
        "openai": {
            "id": "openai",
            "models": {
                "gpt-4o": {
                    "id": "gpt-4o",
                    "name": "GPT-4o",
                    "family": "gpt-4o",
                    "modalities": {"input": ["text", "image"], "output": ["text"]},
                    "tool_call": True,
                    "reasoning": False,
                    "knowledge": "2023-10",
                    "release_date": "2024-05-13",
                    "cost": {"input": 2.5, "output": 10},
                    "limit": {"context": 128000, "output": 16384},
                },
            },
        },
        "mistral": {
            "id": "mistral",
            "models": {
                "magistral-medium-1.2": {
                    "id": "magistral-medium-1.2",
                    "name": "Magistral Medium 1.2",
                    "reasoning": True,
                    "open_weights": False,
                    "cost": {"input": 3, "output": 15, "cache_read": 0},
                    "limit": {"context": 128000, "output": 32768},
                },
                "free-preview": {
                    "id": "free-preview",
                    "name": "Free Preview",
                    "cost": {"input": 0, "output": 0},
                },
            },
        },
    }

"""Tests for pricetoml/config.py"""

from pathlib import Path

import pytest

from pricetoml import DEFAULT_OUTPUT_PATH, LITELLM_PRICES_URL, MODELSDEV_URL
from pricetoml.config import load_config


class TestLoadConfig:

    def test_defaults(self):
        config = load_config()
        assert config.litellm_url == LITELLM_PRICES_URL
        assert config.modelsdev_url == MODELSDEV_URL
        assert config.output_path == Path(DEFAULT_OUTPUT_PATH)
        assert config.timeout == 30.0
        assert config.attempts == 2
        assert config.fetch_modelsdev is True

    def test_environment_overrides_defaults(self, monkeypatch):
        monkeypatch.setenv("PRICETOML_OUTPUT", "/tmp/prices.toml")
        monkeypatch.setenv("PRICETOML_TIMEOUT", "7.5")
        monkeypatch.setenv("PRICETOML_ATTEMPTS", "3")
        monkeypatch.setenv("PRICETOML_SKIP_MODELSDEV", "yes")
        config = load_config()
        assert config.output_path == Path("/tmp/prices.toml")
        assert config.timeout == 7.5
        assert config.attempts == 3
        assert config.fetch_modelsdev is False

    def test_explicit_overrides_win(self, monkeypatch):
        monkeypatch.setenv("PRICETOML_LITELLM_URL", "https://env.test/prices.json")
        config = load_config(litellm_url="https://cli.test/prices.json", output_path="out.toml")
        assert config.litellm_url == "https://cli.test/prices.json"
        assert config.output_path == Path("out.toml")

    def test_none_overrides_are_ignored(self, monkeypatch):
        monkeypatch.setenv("PRICETOML_TIMEOUT", "12")
        assert load_config(timeout=None).timeout == 12.0

    def test_blank_environment_value_is_ignored(self, monkeypatch):
        monkeypatch.setenv("PRICETOML_ATTEMPTS", "  ")
        assert load_config().attempts == 2

    def test_invalid_environment_value(self, monkeypatch):
        monkeypatch.setenv("PRICETOML_TIMEOUT", "soon")
        with pytest.raises(ValueError, match="PRICETOML_TIMEOUT"):
            load_config()

    def test_attempts_must_be_positive(self):
        with pytest.raises(ValueError, match="attempts"):
            load_config(attempts=0)

    def test_unknown_option(self):
        with pytest.raises(TypeError):
            load_config(colour="blue")

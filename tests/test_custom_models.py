"""Tests for pricetoml/custom_models.py"""

import pytest

from pricetoml.custom_models import (
    apply_custom_models,
    count_numeric_prices,
    load_existing_custom_models,
    merge_pricing_deep,
    parse_custom_models,
    parse_toml_dotted_path,
    parse_toml_value,
)
from pricetoml.models import NormalizedModel
from pricetoml.toml_writer import render_models_section


PREVIOUS_OUTPUT = '''# Generated by pricetoml (LiteLLM price table converter)
# Source: LiteLLM

[metadata]
version = "2024.06.01"
checksum = "abc"

[models."gpt-4o"]
display_name = "GPT-4o"
mode = "chat"
providers = ["openai"]

[models."gpt-4o".pricing."openai"]
input_cost_per_token = 2.5e-06

[models."in-house-llm"]
display_name = "In-house \\"Large\\" Model"
mode = "chat"
litellm_provider = "acme"
max_input_tokens = 32000
supports_vision = false
supported_modalities = ["text", "image"]
source = "custom"
this line is not toml
= 5

[models."in-house-llm".pricing."acme/eu.west"]
input_cost_per_token = 1e-06
output_cost_per_token = 2e-06

[models."nested-marker"]
display_name = "Only the sub-table is custom"

[models."nested-marker".tiers]
source = "custom"
'''


# ---------------------------------------------------------------------------
# Value and path parsing
# ---------------------------------------------------------------------------


class TestParseTomlValue:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("true", True),
            ("false", False),
            ('"plain"', "plain"),
            ('"say \\"hi\\""', 'say "hi"'),
            ('"back\\\\slash"', "back\\slash"),
            ('["text", "image"]', ["text", "image"]),
            ("['a', 'b']", ["a", "b"]),
            ("[]", []),
            ("42", 42),
            ("1.5e-05", 1.5e-05),
            ("  7  ", 7),
            ("[broken", "[broken"),
            ("garbage", "garbage"),
        ],
    )
    def test_values(self, raw, expected):
        assert parse_toml_value(raw) == expected

    def test_integers_stay_integers(self):
        assert isinstance(parse_toml_value("128000"), int)


class TestParseTomlDottedPath:

    @pytest.mark.parametrize(
        "path, expected",
        [
            ('pricing."openai"', ["pricing", "openai"]),
            ('pricing."bedrock/us-east-1"', ["pricing", "bedrock/us-east-1"]),
            ('pricing."a.b".x', ["pricing", "a.b", "x"]),
            ("tiers", ["tiers"]),
        ],
    )
    def test_paths(self, path, expected):
        assert parse_toml_dotted_path(path) == expected


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestParseCustomModels:

    def test_only_custom_sections_are_returned(self):
        custom = parse_custom_models(PREVIOUS_OUTPUT)
        assert list(custom) == ["in-house-llm"]

    def test_fields_and_pricing(self):
        info = parse_custom_models(PREVIOUS_OUTPUT)["in-house-llm"]
        assert info["display_name"] == 'In-house "Large" Model'
        assert info["max_input_tokens"] == 32000
        assert info["supports_vision"] is False
        assert info["supported_modalities"] == ["text", "image"]
        assert info["pricing"] == {
            "acme/eu.west": {"input_cost_per_token": 1e-06, "output_cost_per_token": 2e-06}
        }

    def test_malformed_lines_are_skipped(self):
        info = parse_custom_models(PREVIOUS_OUTPUT)["in-house-llm"]
        assert "this line is not toml" not in info
        assert "" not in info

    def test_quoted_keys(self):
        content = '[models."x"]\nsource = "custom"\n"odd key" = 1\n'
        assert parse_custom_models(content)["x"]["odd key"] == 1

    def test_nested_extra_table(self):
        content = (
            '[models."x"]\nsource = "custom"\n\n'
            '[models."x".tiers]\nabove_128k = 2\nbase = 1\n'
        )
        assert parse_custom_models(content)["x"]["tiers"] == {"above_128k": 2, "base": 1}

    def test_empty_content(self):
        assert parse_custom_models("") == {}

    def test_hyphenated_keys_round_trip(self):
        content = render_models_section({"m": {"source": "custom", "tier-name": "gold"}})
        assert 'tier-name = "gold"' in content
        assert parse_custom_models(content) == {"m": {"source": "custom", "tier-name": "gold"}}

    def test_model_name_with_quotes(self):
        content = render_models_section({
            "base": {"display_name": "Base", "source": "custom"},
            'say "hi"': {"display_name": "Quoted", "source": "custom"},
        })
        custom = parse_custom_models(content)
        assert custom["base"] == {"display_name": "Base", "source": "custom"}
        assert custom['say "hi"'] == {"display_name": "Quoted", "source": "custom"}


class TestLoadExistingCustomModels:

    def test_missing_file(self, tmp_path):
        assert load_existing_custom_models(tmp_path / "nope.toml") == {}

    def test_reads_file(self, tmp_path):
        path = tmp_path / "prices.toml"
        path.write_text(PREVIOUS_OUTPUT, encoding="utf-8")
        assert list(load_existing_custom_models(path)) == ["in-house-llm"]

    def test_invalid_utf8_is_tolerated(self, tmp_path):
        path = tmp_path / "prices.toml"
        path.write_bytes(b'[models."cafe"]\ndisplay_name = "caf\xe9"\nsource = "custom"\n')

        info = load_existing_custom_models(path)["cafe"]
        assert info["source"] == "custom"
        assert info["display_name"] == "caf\ufffd"

    def test_round_trip_through_writer(self, tmp_path):
        model = NormalizedModel(
            display_name='Quote " and \\ backslash',
            mode="chat",
            max_input_tokens=8192,
            input_cost_per_token=1e-06,
            litellm_provider="acme",
            providers=["acme"],
            supports_vision=True,
            supported_modalities=["text"],
            source="custom",
            pricing={"acme": {"input_cost_per_token": 1e-06}, "acme/eu": {"input_cost_per_token": 1.2e-06}},
            extra={"tiers": {"base": 1}, "notes": "internal"},
        )
        path = tmp_path / "prices.toml"
        path.write_text(render_models_section({"in-house": model}) + "\n", encoding="utf-8")

        loaded = load_existing_custom_models(path)
        assert loaded["in-house"] == model.to_dict()


# ---------------------------------------------------------------------------
# Override layer
# ---------------------------------------------------------------------------


class TestMergePricingDeep:

    def test_merges_per_provider_block(self):
        base = {"openai": {"input_cost_per_token": 1.0, "output_cost_per_token": 2.0}}
        overlay = {
            "openai": {"input_cost_per_token": 5.0, "note": "x"},
            "azure": {"input_cost_per_token": 3.0},
            "bad": "nope",
        }
        result = merge_pricing_deep(base, overlay)
        assert result == {
            "openai": {"input_cost_per_token": 5.0, "output_cost_per_token": 2.0},
            "azure": {"input_cost_per_token": 3.0},
        }
        # Base is not mutated
        assert base["openai"]["input_cost_per_token"] == 1.0


class TestApplyCustomModels:

    def test_custom_fields_win_and_pricing_merges(self):
        models = {
            "gpt-4o": NormalizedModel(
                display_name="GPT-4o",
                litellm_provider="openai",
                providers=["openai"],
                pricing={
                    "openai": {"input_cost_per_token": 2.5e-06, "output_cost_per_token": 1e-05},
                    "azure": {"input_cost_per_token": 5e-06},
                },
            )
        }
        custom = {
            "gpt-4o": {
                "display_name": "GPT-4o (negotiated)",
                "source": "custom",
                "pricing": {"openai": {"input_cost_per_token": 2e-06}},
            }
        }
        apply_custom_models(models, custom)
        model = models["gpt-4o"]

        assert model.display_name == "GPT-4o (negotiated)"
        assert model.source == "custom"
        assert model.pricing == {
            "openai": {"input_cost_per_token": 2e-06, "output_cost_per_token": 1e-05},
            "azure": {"input_cost_per_token": 5e-06},
        }

    def test_pricing_kept_without_overlay(self):
        models = {"m": NormalizedModel(pricing={"openai": {"input_cost_per_token": 1.0}})}
        apply_custom_models(models, {"m": {"source": "custom", "display_name": "M"}})
        assert models["m"].pricing == {"openai": {"input_cost_per_token": 1.0}}

    def test_new_custom_model_is_synthesized(self):
        models = {}
        apply_custom_models(models, {
            "in-house": {
                "source": "custom",
                "litellm_provider": "Acme",
                "input_cost_per_token": 1e-06,
                "max_tokens": 4096,
            }
        })
        model = models["in-house"]
        assert model.mode == "chat"
        assert model.litellm_provider == "acme"
        assert model.providers == ["acme"]
        assert model.pricing == {"acme": {"input_cost_per_token": 1e-06}}
        assert model.source == "custom"

    def test_new_custom_model_without_provider(self):
        models = {}
        apply_custom_models(models, {"solo": {"source": "custom", "mode": "embedding"}})
        model = models["solo"]
        assert model.mode == "embedding"
        assert model.litellm_provider == "custom"
        assert model.providers == []
        assert model.pricing == {}

    def test_apply_is_idempotent(self):
        custom = {
            "gpt-4o": {
                "source": "custom",
                "display_name": "Override",
                "pricing": {"openai": {"input_cost_per_token": 2e-06}},
            }
        }

        def fresh():
            return {"gpt-4o": NormalizedModel(
                litellm_provider="openai",
                pricing={"openai": {"input_cost_per_token": 3e-06, "output_cost_per_token": 1e-05}},
            )}

        once = fresh()
        apply_custom_models(once, custom)
        twice = fresh()
        apply_custom_models(twice, custom)
        apply_custom_models(twice, custom)
        assert once["gpt-4o"].to_dict() == twice["gpt-4o"].to_dict()


def test_count_numeric_prices():
    assert count_numeric_prices({"pricing": {"a": {"x_cost": 1, "y_cost": "n/a"}, "b": {"z_cost": 2.0}}}) == 2
    assert count_numeric_prices({"input_cost_per_token": 1e-06, "max_tokens": 10}) == 1

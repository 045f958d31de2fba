"""pricetoml - LiteLLM/models.dev price table to TOML converter."""

from rich.console import Console
from rich.theme import Theme

__version__ = "0.1.0"

LITELLM_PRICES_URL = (
    "https://raw.githubusercontent.com/BerriAI/litellm/main/model_prices_and_context_window.json"
)
MODELSDEV_URL = "https://models.dev/api.json"
DEFAULT_OUTPUT_PATH = "public/config/prices-base.toml"
DEFAULT_TIMEOUT = 30.0
DEFAULT_ATTEMPTS = 2

# Shared console for operator-facing progress output
custom_theme = Theme({
    "info": "cyan",
    "warning": "yellow",
    "error": "bold red",
    "success": "green",
    "path": "dim blue",
})
console = Console(theme=custom_theme)

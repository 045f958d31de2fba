"""
pricetoml/fetch_sources.py

Downloads the two upstream catalogs.  Each source gets a bounded number of
sequential attempts; the two sources are fetched concurrently.  LiteLLM is
required, models.dev is best-effort.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, Optional, Tuple

import requests
from rich.markup import escape

from . import DEFAULT_ATTEMPTS, DEFAULT_TIMEOUT, console
from .config import ConverterConfig
from .errors import FetchError, ParseError

logger = logging.getLogger(__name__)


def fetch_json_with_retry(
    url: str,
    label: str,
    *,
    attempts: int = DEFAULT_ATTEMPTS,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """GET *url* and decode JSON, trying up to *attempts* times.

    Raises:
        FetchError: every attempt failed (HTTP error status, network error or
            a body that is not JSON).  The last underlying error is chained.
    """
    http = session or requests
    last_error: Optional[Exception] = None

    for attempt in range(attempts):
        try:
            response = http.get(url, timeout=timeout)
            if not response.ok:
                raise FetchError(
                    f"{label} fetch failed: {response.status_code} {response.reason}",
                    label=label,
                    url=url,
                )
            return response.json()
        except (requests.RequestException, ValueError, FetchError) as e:
            last_error = e
            logger.debug("%s attempt %d/%d failed: %s", label, attempt + 1, attempts, e)
            if attempt + 1 < attempts:
                logger.warning("%s fetch failed, retrying once...", label)

    if isinstance(last_error, FetchError):
        raise last_error
    raise FetchError(f"{label} fetch failed: {last_error}", label=label, url=url) from last_error


def fetch_litellm_prices(config: ConverterConfig, session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """Fetch the LiteLLM price table.  Failure is fatal to the run."""
    console.print(f"Fetching prices from: [path]{escape(config.litellm_url)}[/path]")
    data = fetch_json_with_retry(
        config.litellm_url,
        "LiteLLM",
        attempts=config.attempts,
        timeout=config.timeout,
        session=session,
    )
    if not isinstance(data, dict):
        raise ParseError(f"LiteLLM price table must be a JSON object, got {type(data).__name__}")
    return data


def fetch_modelsdev_data(config: ConverterConfig, session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """Fetch the models.dev catalog, or ``{}`` if it is unavailable."""
    if not config.fetch_modelsdev:
        return {}
    try:
        data = fetch_json_with_retry(
            config.modelsdev_url,
            "models.dev",
            attempts=config.attempts,
            timeout=config.timeout,
            session=session,
        )
    except FetchError as e:
        console.print(f"[warning]models.dev fetch failed, continuing without it:[/warning] {escape(str(e))}")
        return {}
    if not isinstance(data, dict):
        console.print("[warning]models.dev returned an unexpected payload, continuing without it[/warning]")
        return {}
    return data


def fetch_all_sources(config: ConverterConfig) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Fetch LiteLLM and models.dev concurrently.

    Returns ``(litellm_data, modelsdev_data)``.  Errors from the LiteLLM fetch
    propagate once both fetches have finished.
    """
    with ThreadPoolExecutor(max_workers=2) as executor:
        litellm_future = executor.submit(fetch_litellm_prices, config)
        modelsdev_future = executor.submit(fetch_modelsdev_data, config)
        modelsdev_data = modelsdev_future.result()
        litellm_data = litellm_future.result()
    return litellm_data, modelsdev_data


def count_modelsdev_models(modelsdev_data: Dict[str, Any]) -> int:
    total = 0
    for provider in modelsdev_data.values():
        if isinstance(provider, dict) and isinstance(provider.get("models"), dict):
            total += len(provider["models"])
    return total

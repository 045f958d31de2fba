# pricetoml/cli.py
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from dotenv import load_dotenv
from rich.markup import escape
from rich.table import Table

from . import DEFAULT_OUTPUT_PATH, __version__, console
from .config import load_config
from .convert_prices import run_conversion
from .custom_models import count_numeric_prices, load_existing_custom_models
from .errors import PriceTableError
from .verify_table import verify_price_table


def handle_error(e: Exception, command_name: str) -> None:
    """Print a fatal error and exit with status 1."""
    if console.quiet:
        click.echo(f"Error during '{command_name}' command: {e}", err=True)
    else:
        console.print(f"[error]Error during '{command_name}' command:[/error] {escape(str(e))}")
    sys.exit(1)


@click.group(help="Convert the LiteLLM and models.dev price catalogs to a TOML price table.")
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging.")
@click.option("--quiet", is_flag=True, default=False, help="Suppress progress output (errors are still shown).")
@click.version_option(version=__version__, prog_name="pricetoml")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool) -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    console.quiet = quiet
    ctx.ensure_object(dict)
    ctx.obj["quiet"] = quiet


@cli.command("update")
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help=f"Output TOML path (default: {DEFAULT_OUTPUT_PATH}).",
)
@click.option("--litellm-url", default=None, help="Override the LiteLLM price table URL.")
@click.option("--modelsdev-url", default=None, help="Override the models.dev catalog URL.")
@click.option("--timeout", type=click.FloatRange(min=0, min_open=True), default=None, help="HTTP timeout per attempt, in seconds.")
@click.option("--skip-modelsdev", is_flag=True, default=False, help="Only use LiteLLM; skip models.dev enrichment.")
def update(
    output: Optional[Path],
    litellm_url: Optional[str],
    modelsdev_url: Optional[str],
    timeout: Optional[float],
    skip_modelsdev: bool,
) -> None:
    """Fetch both catalogs and regenerate the price table."""
    try:
        config = load_config(
            output_path=output,
            litellm_url=litellm_url,
            modelsdev_url=modelsdev_url,
            timeout=timeout,
            fetch_modelsdev=False if skip_modelsdev else None,
        )
        run_conversion(config)
    except (PriceTableError, ValueError) as e:
        handle_error(e, "update")


@cli.command("verify")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), required=False)
def verify(path: Optional[Path]) -> None:
    """Check the checksum recorded in a generated price table."""
    try:
        target = path or load_config().output_path
        result = verify_price_table(target)
    except (PriceTableError, ValueError, OSError) as e:
        handle_error(e, "verify")
        return

    if result.ok:
        console.print(
            f"[success]Checksum OK[/success] [path]{escape(str(result.path))}[/path] "
            f"(version {result.version}, {result.total_models} models)"
        )
        return
    console.print(f"[error]Checksum mismatch[/error] for [path]{escape(str(result.path))}[/path]")
    console.print(f"  Recorded: {result.expected}")
    console.print(f"  Actual:   {result.actual}")
    sys.exit(1)


@cli.command("custom")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path), required=False)
def custom(path: Optional[Path]) -> None:
    """List the custom models that the next update will preserve."""
    try:
        target = path or load_config().output_path
    except ValueError as e:
        handle_error(e, "custom")
        return

    custom_models = load_existing_custom_models(target)
    if not custom_models:
        console.print(f"[warning]No custom models found in[/warning] [path]{escape(str(target))}[/path]")
        return

    table = Table(title=f"Custom models in {escape(str(target))}", show_header=True, header_style="bold magenta")
    table.add_column("Model", style="cyan", no_wrap=True)
    table.add_column("Mode", style="green")
    table.add_column("Provider", style="yellow")
    table.add_column("Pricing keys", style="blue")
    table.add_column("Prices", justify="right")

    for name in sorted(custom_models):
        info = custom_models[name]
        pricing = info.get("pricing")
        pricing_keys = ", ".join(sorted(pricing)) if isinstance(pricing, dict) else "-"
        table.add_row(
            escape(name),
            escape(str(info.get("mode", "chat"))),
            escape(str(info.get("litellm_provider", "custom"))),
            escape(pricing_keys),
            str(count_numeric_prices(info)),
        )
    console.print(table)

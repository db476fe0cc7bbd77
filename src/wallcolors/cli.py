"""Command-line interface for wallcolors."""

import json
import logging
import sys
from pathlib import Path

import click
import rich.traceback
from rich.console import Console
from rich.table import Table

from . import __version__
from .core.hints import ColorHints, DarkHintAnalyzer
from .core.result import WallpaperColors
from .image.processor import ImageProcessor
from .utils.color import color_to_hex
from .utils.config import ConfigManager, QuantizationBudget
from .utils.logging import setup_logging

console = Console()
rich.traceback.install(console=console)

logger = logging.getLogger(__name__)

BUDGET_CHOICES = [budget.value for budget in QuantizationBudget]


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging")
@click.option("--quiet", "-q", is_flag=True, help="Suppress output")
@click.option(
    "--config", type=click.Path(exists=True), help="Path to configuration file"
)
@click.pass_context
def cli(ctx, verbose: bool, quiet: bool, config):
    """wallcolors: seed colors and presentation hints for wallpapers."""
    ctx.ensure_object(dict)

    log_level = logging.INFO
    if quiet:
        log_level = logging.ERROR
    elif verbose:
        log_level = logging.DEBUG
    setup_logging(level=log_level)

    try:
        config_manager = ConfigManager.from_env(config)
        _, errors = config_manager.validate_config()
        for error in errors:
            logger.warning(f"Configuration: {error}")
    except Exception as e:
        logger.error(f"Error loading configuration: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    ctx.obj["config_manager"] = config_manager
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet


def _print_result(result: WallpaperColors, output_format: str) -> None:
    if output_format == "json":
        click.echo(json.dumps(result.to_dict(), indent=2))
        return

    table = Table(title="Seed colors")
    table.add_column("Rank")
    table.add_column("Color")
    table.add_column("Population", justify="right")
    for rank, color in enumerate(result.main_colors, start=1):
        hex_color = color_to_hex(color)
        table.add_row(
            str(rank),
            f"[on {hex_color}]   [/] {hex_color}",
            str(result.all_colors.get(color, 0)),
        )
    console.print(table)
    _print_hints(result.color_hints)


def _print_hints(hints: ColorHints) -> None:
    table = Table(title=f"Hints ({int(hints)})")
    table.add_column("Hint")
    table.add_column("Set")
    for hint in ColorHints:
        table.add_row(hint.name, "yes" if hint in hints else "no")
    console.print(table)


@cli.command()
@click.argument("input_image", type=click.Path(exists=True))
@click.option("--dim-amount", type=float, help="Simulated dimming in [0, 1]")
@click.option(
    "--budget",
    type=click.Choice(BUDGET_CHOICES),
    help="Quantizer strategy (fast: k-means, high-quality: Celebi)",
)
@click.option(
    "--format", "output_format", type=click.Choice(["table", "json"]), help="Output format"
)
@click.option("--output", "-o", type=click.Path(), help="Write JSON result to a file")
@click.pass_context
def extract(ctx, input_image, dim_amount, budget, output_format, output):
    """Extract seed colors and hints from an image."""
    try:
        config_manager = ctx.obj["config_manager"]
        if dim_amount is not None:
            config_manager.set("extraction.dim_amount", dim_amount)
        if budget is not None:
            config_manager.set("quantization.budget", budget)
        config = config_manager.get_extraction_config()
        output_format = output_format or config_manager.get("output.format", "table")

        result = WallpaperColors.from_image(input_image, config=config)

        if output:
            output_path = Path(output)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with open(output_path, "w") as f:
                json.dump(result.to_dict(), f, indent=2)
            logger.info(f"Result saved to {output_path}")

        _print_result(result, output_format)

    except Exception as e:
        logger.error(f"Error extracting colors: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("histogram_file", type=click.Path(exists=True))
@click.option("--hints", type=int, default=0, help="Hint bitmask stored with the result")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"]),
    default="table",
    help="Output format",
)
@click.pass_context
def score(ctx, histogram_file, hints, output_format):
    """Select seed colors from a JSON color -> population histogram."""
    try:
        with open(histogram_file) as f:
            histogram = json.load(f)
        if not isinstance(histogram, dict):
            raise ValueError("Histogram file must contain a JSON object")

        result = WallpaperColors.from_histogram(histogram, hints)
        _print_result(result, output_format)

    except Exception as e:
        logger.error(f"Error scoring histogram: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("input_image", type=click.Path(exists=True))
@click.option("--dim-amount", type=float, help="Simulated dimming in [0, 1]")
@click.pass_context
def hints(ctx, input_image, dim_amount):
    """Compute dark text / dark theme hints for an image."""
    try:
        config = ctx.obj["config_manager"].get_extraction_config()
        if dim_amount is None:
            dim_amount = config.dim_amount

        pixels = ImageProcessor(config.max_extraction_area).load_pixels(input_image)
        stats = DarkHintAnalyzer(config.device).analyze(pixels, dim_amount)

        click.echo(f"Mean luminance: {stats.mean_luminance:.2f}")
        click.echo(f"Dark pixels: {stats.dark_pixels}/{stats.pixel_count}")
        _print_hints(stats.hints)

    except Exception as e:
        logger.error(f"Error computing hints: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(),
    default="./wallcolors_config.json",
    help="Output configuration file path (.json, .yaml or .yml)",
)
@click.option(
    "--profile",
    type=click.Choice(["fast", "balanced", "quality"]),
    help="Start from a predefined profile",
)
def init_config(output, profile):
    """Initialize a default configuration file."""
    try:
        config_manager = ConfigManager()
        if profile:
            config_manager.apply_profile(profile)
        config_manager.save_config(output)

        click.echo(f"Configuration created at: {output}")
        logger.info(f"Initialized config file at {output} (profile={profile})")

    except Exception as e:
        logger.error(f"Error initializing config: {e}", exc_info=True)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@cli.command()
def version():
    """Display wallcolors version."""
    click.echo(f"wallcolors version: {__version__}")


def main():
    """Main entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()

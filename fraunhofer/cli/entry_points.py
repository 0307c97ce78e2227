"""
Entry point for the ``fraunhofer`` command.

The entry point:
1. Parses arguments and configures logging
2. Handles informational flags (help topics, device listing)
3. Loads the configuration and applies command-line overrides
4. Runs the pipeline and reports results

Fatal errors are logged with their cause and mapped to the exit code of their
category (input format 3, device selection 4, configuration 5). Usage errors
keep argparse's status 2.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence

from loguru import logger
from rich.console import Console
from rich.table import Table

from fraunhofer.cli.parser import create_parser
from fraunhofer.config.base import FraunhoferConfig
from fraunhofer.config.loader import load_config, merge_config_with_args
from fraunhofer.config.validation import ConfigValidator
from fraunhofer.core.device import list_platforms
from fraunhofer.core.pipeline import DiffractionPipeline
from fraunhofer.errors import FraunhoferError
from fraunhofer.utils.logging_config import setup_logging


if TYPE_CHECKING:
    from fraunhofer.core.pipeline import RenderResult


def handle_help_topics(args: Any) -> bool:
    """Print a help topic if one was requested.

    Returns
    -------
    bool
        True if a help topic was shown and should exit
    """
    if getattr(args, "help_sampling", False):
        ConfigValidator.print_help_topic("sampling")
        return True
    if getattr(args, "help_color", False):
        ConfigValidator.print_help_topic("color")
        return True
    return False


def print_devices(console: Console) -> None:
    """Print the available compute platforms and devices."""
    table = Table(title="Compute Devices", show_header=True, header_style="bold magenta")
    table.add_column("Platform", style="cyan", no_wrap=True)
    table.add_column("Device", style="cyan", no_wrap=True)
    table.add_column("Name", style="white")
    for platform_index, platform in enumerate(list_platforms()):
        for device_index, name in enumerate(platform.devices):
            table.add_row(f"{platform_index} ({platform.name})", str(device_index), name)
    console.print(table)


def print_summary(console: Console, result: RenderResult) -> None:
    """Print a summary table of a finished render."""
    table = Table(title="Render Summary", show_header=True, header_style="bold magenta")
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")

    table.add_row("Output", str(result.output_path))
    table.add_row("Resolution", f"{result.image.width} x {result.image.height}")
    table.add_row("Samples", f"{result.samples} ({result.sampling})")
    table.add_row("Format", result.image.pixel_format)
    table.add_row("Device", str(result.device))
    table.add_row("Diffraction peak", f"{result.diffraction.peak:.6g}")
    for stage, seconds in result.timings.items():
        table.add_row(f"Time: {stage}", f"{seconds:.4f}s")
    table.add_row("Total", f"{result.elapsed_time:.4f}s")

    console.print(table)


def build_config(args: Any) -> FraunhoferConfig:
    """Load the config file (if any) and apply command-line overrides."""
    if args.config:
        config = load_config(args.config, validate=False)
        logger.info(f"Loaded config from {args.config}")
    else:
        config = FraunhoferConfig()
    config = merge_config_with_args(config, args)
    if config.name is None:
        config.name = Path(args.input).stem
    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the ``fraunhofer`` command.

    Parameters
    ----------
    argv : Sequence[str], optional
        Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns
    -------
    int
        0 on success, otherwise the exit code of the error category
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level="WARNING" if args.quiet else args.log_level,
        log_file=Path(args.log_file) if args.log_file else None,
        show_time=args.log_time,
        show_level=args.log_level_name,
    )
    console = Console()

    if handle_help_topics(args):
        return 0

    if args.list_devices:
        print_devices(console)
        return 0

    if args.input is None or args.output is None or args.samples is None:
        parser.error("INPUT, OUTPUT and SAMPLES are required")

    try:
        config = build_config(args)
        result = DiffractionPipeline(config).run(args.input, args.output, args.samples)
    except FraunhoferError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return e.exit_code

    if not args.quiet:
        print_summary(console, result)
    return 0

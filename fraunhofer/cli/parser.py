"""
Command-line argument parser for fraunhofer renders.

Positional arguments mirror the classic three-argument invocation
(``INPUT OUTPUT SAMPLES``); every option that maps to a configuration value
defaults to None so that only flags given on the command line override the
config file.
"""

from __future__ import annotations

import argparse

from fraunhofer.config.validation import ConfigValidator


def positive_int(value: str) -> int:
    """argparse type for a strictly positive integer."""
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from e
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {number}")
    return number


def non_negative_int(value: str) -> int:
    """argparse type for an integer >= 0."""
    try:
        number = int(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value!r}") from e
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {number}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """
    Create the argument parser for the ``fraunhofer`` command.

    Returns
    -------
    argparse.ArgumentParser
        Configured argument parser

    Examples
    --------
    >>> parser = create_parser()
    >>> args = parser.parse_args(["aperture.ppm", "psf.hdr", "16", "--lens-distance", "2"])
    """
    parser = argparse.ArgumentParser(
        prog="fraunhofer",
        description="Render the spectral diffraction pattern of a lens aperture to a Radiance HDR image",
    )

    # Positional arguments (optional so that --list-devices and help topics work alone)
    parser.add_argument("input", nargs="?", default=None, help="Aperture pixel-map (P3 or P6 PPM)")
    parser.add_argument("output", nargs="?", default=None, help="Output Radiance HDR path")
    parser.add_argument(
        "samples", nargs="?", type=positive_int, default=None, help="Number of wavelength samples"
    )

    # Configuration
    parser.add_argument(
        "--config", type=str, default=None, help="YAML (or legacy XML) configuration file"
    )

    # Diffraction parameters
    parser.add_argument(
        "--lens-distance",
        dest="lens_distance",
        type=float,
        default=None,
        help="Lens distance controlling the diffraction spread (> 0)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=None,
        help="Aperture threshold in [0, 1]; 1.0 keeps the continuous mask",
    )

    # Rendering parameters
    parser.add_argument(
        "--sampling",
        type=str,
        default=None,
        choices=ConfigValidator.VALID_SAMPLING,
        help="Wavelength sampling mode",
    )
    parser.add_argument(
        "--seed", type=non_negative_int, default=None, help="Base seed for jittered sampling"
    )
    parser.add_argument(
        "--batch-size",
        dest="batch_size",
        type=positive_int,
        default=None,
        help="Wavelength samples integrated per batch",
    )
    parser.add_argument(
        "--color-system",
        dest="color_system",
        type=str,
        default=None,
        choices=ConfigValidator.VALID_COLOR_SYSTEMS,
        help="Output colour system ('none' keeps CIE XYZ)",
    )
    parser.add_argument(
        "--tone-map",
        dest="tone_map",
        type=str,
        default=None,
        choices=ConfigValidator.VALID_TONE_MAPS,
        help="Tone curve applied before encoding",
    )

    # Device selection
    parser.add_argument(
        "--platform", type=non_negative_int, default=None, help="Compute platform index"
    )
    parser.add_argument(
        "--device", type=non_negative_int, default=None, help="Device index within the platform"
    )
    parser.add_argument(
        "--list-devices",
        dest="list_devices",
        action="store_true",
        help="List compute platforms and devices, then exit",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        dest="log_level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    parser.add_argument("--log-file", dest="log_file", type=str, default=None, help="Also log to this file")
    parser.add_argument(
        "--no-log-time",
        dest="log_time",
        action="store_false",
        help="Omit timestamps from log lines",
    )
    parser.add_argument(
        "--no-log-level",
        dest="log_level_name",
        action="store_false",
        help="Omit the level name from log lines",
    )
    parser.add_argument(
        "--quiet", action="store_true", help="Only log warnings and skip the summary table"
    )

    # Help topics
    parser.add_argument(
        "--help-sampling",
        dest="help_sampling",
        action="store_true",
        help="Show detailed help for sampling modes",
    )
    parser.add_argument(
        "--help-color",
        dest="help_color",
        action="store_true",
        help="Show detailed help for colour systems and tone maps",
    )

    return parser

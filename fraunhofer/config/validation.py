"""Configuration validation with helpful error messages and suggestions.

This module provides validation for fraunhofer configuration parameters with
range descriptions, spelling suggestions and rich help tables.
"""

from __future__ import annotations

import math
from difflib import get_close_matches
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table

from fraunhofer.errors import ConfigurationError


class ValidationError(ConfigurationError):
    """Validation error with suggestions and detailed guidance."""

    pass


class ConfigValidator:
    """Validates configuration with helpful error messages and suggestions."""

    VALID_SAMPLING = ["auto", "single", "deterministic", "jittered"]
    VALID_COLOR_SYSTEMS = ["none", "ebu", "smpte", "hdtv", "rec709", "ntsc", "cie"]
    VALID_TONE_MAPS = ["sqrt", "linear"]

    SAMPLING_DESCRIPTIONS = {
        "auto": "Single exposure for one sample, deterministic otherwise",
        "single": "One sample spanning the whole visible range",
        "deterministic": "Stratified wavelengths t/S, reproducible",
        "jittered": "Stratified wavelengths with seeded jitter",
    }

    COLOR_SYSTEM_DESCRIPTIONS = {
        "none": "Keep CIE XYZ tristimulus values (xyze output)",
        "ebu": "EBU primaries, D65 white",
        "smpte": "SMPTE primaries, D65 white",
        "hdtv": "HDTV primaries, D65 white",
        "rec709": "Rec. 709 primaries, D65 white",
        "ntsc": "NTSC primaries, illuminant C white",
        "cie": "CIE primaries, equal-energy white",
    }

    TONE_MAP_DESCRIPTIONS = {
        "sqrt": "Square root of the normalized radiance",
        "linear": "Normalized radiance written as is",
    }

    @staticmethod
    def suggest_correction(
        invalid: str, valid_options: List[str], n: int = 1, cutoff: float = 0.6
    ) -> Optional[str]:
        """Suggest closest match using difflib similarity.

        Parameters
        ----------
        invalid : str
            Invalid value provided by user
        valid_options : List[str]
            List of valid options
        n : int, optional
            Number of suggestions to return, by default 1
        cutoff : float, optional
            Similarity threshold (0-1), by default 0.6

        Returns
        -------
        Optional[str]
            Closest match if found, None otherwise
        """
        matches = get_close_matches(invalid, valid_options, n=n, cutoff=cutoff)
        return matches[0] if matches else None

    @classmethod
    def format_enum_error(
        cls,
        param_name: str,
        invalid_value: str,
        valid_options: List[str],
        descriptions: Optional[Dict[str, str]] = None,
        help_flag: Optional[str] = None,
    ) -> str:
        """Format error message for invalid enum values with suggestions.

        Parameters
        ----------
        param_name : str
            Name of the parameter
        invalid_value : str
            Invalid value provided
        valid_options : List[str]
            List of valid options
        descriptions : Optional[Dict[str, str]], optional
            Descriptions for each option
        help_flag : Optional[str], optional
            CLI help flag for more info

        Returns
        -------
        str
            Formatted error message
        """
        lines = [f"Invalid {param_name}: '{invalid_value}'\n"]

        lines.append("Valid options:")
        for option in valid_options:
            desc = descriptions.get(option, "") if descriptions else ""
            if desc:
                lines.append(f"  - '{option}' → {desc}")
            else:
                lines.append(f"  - '{option}'")

        suggestion = cls.suggest_correction(str(invalid_value), valid_options)
        if suggestion:
            lines.append(f"\nDid you mean '{suggestion}'?")

        if help_flag:
            lines.append(f"\nFor more info: fraunhofer {help_flag}")

        return "\n".join(lines)

    @classmethod
    def format_range_error(
        cls,
        param_name: str,
        invalid_value: Any,
        valid_range: str,
        typical_values: Optional[str] = None,
    ) -> str:
        """Format error message for out-of-range values.

        Parameters
        ----------
        param_name : str
            Name of the parameter
        invalid_value : Any
            Invalid value provided
        valid_range : str
            Description of valid range (e.g., "positive", "> 0", "[0, 1]")
        typical_values : Optional[str], optional
            Examples of typical values

        Returns
        -------
        str
            Formatted error message
        """
        lines = [f"Invalid {param_name}: {invalid_value}"]
        lines.append(f"  → Must be {valid_range}")

        if typical_values:
            lines.append(f"  → Typical values: {typical_values}")

        return "\n".join(lines)

    @classmethod
    def _validate_enum(
        cls,
        value: str,
        param_name: str,
        valid_options: List[str],
        descriptions: Dict[str, str],
        help_flag: str,
    ) -> None:
        if value not in valid_options:
            raise ValidationError(
                cls.format_enum_error(
                    param_name=param_name,
                    invalid_value=value,
                    valid_options=valid_options,
                    descriptions=descriptions,
                    help_flag=help_flag,
                )
            )

    @classmethod
    def validate_sampling(cls, value: str) -> None:
        """Validate the sampling mode name.

        Raises
        ------
        ValidationError
            If the sampling mode is unknown
        """
        cls._validate_enum(
            value, "sampling", cls.VALID_SAMPLING, cls.SAMPLING_DESCRIPTIONS, "--help-sampling"
        )

    @classmethod
    def validate_color_system(cls, value: str) -> None:
        """Validate the output colour system name.

        Raises
        ------
        ValidationError
            If the colour system is unknown
        """
        cls._validate_enum(
            value,
            "color_system",
            cls.VALID_COLOR_SYSTEMS,
            cls.COLOR_SYSTEM_DESCRIPTIONS,
            "--help-color",
        )

    @classmethod
    def validate_tone_map(cls, value: str) -> None:
        """Validate the tone map name.

        Raises
        ------
        ValidationError
            If the tone map is unknown
        """
        cls._validate_enum(
            value, "tone_map", cls.VALID_TONE_MAPS, cls.TONE_MAP_DESCRIPTIONS, "--help-color"
        )

    @classmethod
    def validate_lens_distance(cls, value: Optional[float]) -> None:
        """Validate the lens distance.

        A missing, zero, negative or non-finite lens distance cannot drive
        the diffraction normalization.

        Raises
        ------
        ValidationError
            If the lens distance is unusable
        """
        if value is None:
            raise ValidationError(
                "Missing lens_distance\n"
                "  → Set diffraction.lens_distance in the config file or pass --lens-distance"
            )
        cls.validate_positive(value, "lens_distance", typical_values="0.5 to 4.0")
        if not math.isfinite(value):
            raise ValidationError(
                cls.format_range_error("lens_distance", value, "a finite number")
            )

    @classmethod
    def validate_number(cls, value: Any, param_name: str, integer: bool = False) -> None:
        """Reject values that are not real numbers (or not integers).

        Booleans are rejected even though Python treats them as integers.

        Raises
        ------
        ValidationError
            If value has the wrong type
        """
        expected = (int,) if integer else (int, float)
        if isinstance(value, bool) or not isinstance(value, expected):
            kind = "an integer" if integer else "a number"
            raise ValidationError(
                f"Invalid {param_name}: {value!r} ({type(value).__name__})\n"
                f"  → Must be {kind}"
            )

    @classmethod
    def validate_positive(
        cls,
        value: float,
        param_name: str,
        typical_values: Optional[str] = None,
        integer: bool = False,
    ) -> None:
        """Validate that a value is positive.

        Parameters
        ----------
        value : float
            Value to validate
        param_name : str
            Parameter name for error message
        typical_values : Optional[str], optional
            Examples of typical values
        integer : bool, default=False
            Require an integer rather than any real number

        Raises
        ------
        ValidationError
            If value is not a number or not positive
        """
        cls.validate_number(value, param_name, integer=integer)
        if not value > 0:
            error_msg = cls.format_range_error(
                param_name=param_name,
                invalid_value=value,
                valid_range="positive (> 0)",
                typical_values=typical_values,
            )
            raise ValidationError(error_msg)

    @classmethod
    def validate_non_negative(
        cls,
        value: float,
        param_name: str,
        typical_values: Optional[str] = None,
        integer: bool = False,
    ) -> None:
        """Validate that a value is non-negative.

        Raises
        ------
        ValidationError
            If value is not a number or is negative
        """
        cls.validate_number(value, param_name, integer=integer)
        if value < 0:
            error_msg = cls.format_range_error(
                param_name=param_name,
                invalid_value=value,
                valid_range="non-negative (≥ 0)",
                typical_values=typical_values,
            )
            raise ValidationError(error_msg)

    @classmethod
    def validate_in_range(
        cls,
        value: float,
        param_name: str,
        min_val: Optional[float] = None,
        max_val: Optional[float] = None,
        typical_values: Optional[str] = None,
    ) -> None:
        """Validate that a value is within a specified range.

        Parameters
        ----------
        value : float
            Value to validate
        param_name : str
            Parameter name for error message
        min_val : Optional[float], optional
            Minimum allowed value
        max_val : Optional[float], optional
            Maximum allowed value
        typical_values : Optional[str], optional
            Examples of typical values

        Raises
        ------
        ValidationError
            If value is not a number or is out of range
        """
        if min_val is not None and max_val is not None:
            range_desc = f"[{min_val}, {max_val}]"
        elif min_val is not None:
            range_desc = f">= {min_val}"
        else:
            range_desc = f"<= {max_val}"

        cls.validate_number(value, param_name)
        too_low = min_val is not None and value < min_val
        too_high = max_val is not None and value > max_val
        if too_low or too_high or value != value:
            error_msg = cls.format_range_error(
                param_name=param_name,
                invalid_value=value,
                valid_range=range_desc,
                typical_values=typical_values,
            )
            raise ValidationError(error_msg)

    @classmethod
    def print_help_topic(cls, topic: str) -> None:
        """Print detailed help for a specific topic.

        Parameters
        ----------
        topic : str
            Help topic (sampling, color)
        """
        console = Console()

        if topic == "sampling":
            cls._print_table(
                console, "Sampling Modes", "Mode", cls.SAMPLING_DESCRIPTIONS, "--sampling <mode>"
            )
        elif topic == "color":
            cls._print_table(
                console,
                "Colour Systems",
                "System",
                cls.COLOR_SYSTEM_DESCRIPTIONS,
                "--color-system <name>",
            )
            cls._print_table(
                console, "Tone Maps", "Tone map", cls.TONE_MAP_DESCRIPTIONS, "--tone-map <name>"
            )
        else:
            console.print(f"[red]Unknown help topic: {topic}[/red]")
            console.print("\nAvailable topics: sampling, color")

    @staticmethod
    def _print_table(
        console: Console, title: str, column: str, descriptions: Dict[str, str], usage: str
    ) -> None:
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column(column, style="cyan", no_wrap=True)
        table.add_column("Description", style="white")
        for name, desc in descriptions.items():
            table.add_row(name, desc)
        console.print(table)
        console.print(f"\nUsage: {usage}")

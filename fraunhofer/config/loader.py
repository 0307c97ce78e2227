"""Configuration loading and saving utilities."""

from __future__ import annotations

import argparse
import copy
import xml.etree.ElementTree as ET
from dataclasses import fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from fraunhofer.errors import ConfigurationError

from .base import DeviceConfig, DiffractionConfig, FraunhoferConfig, RenderConfig


def load_config(
    config_path: str | Path, _visited: Optional[set] = None, validate: bool = True
) -> FraunhoferConfig:
    """Load a fraunhofer configuration file.

    YAML files support the 'extends' keyword for config inheritance:
    - extends: path/to/parent.yaml (relative to the child file)

    Child configs override parent values (deep merge for nested dicts).
    Files ending in ``.xml`` are read in the legacy ``<Settings>`` layout.

    Args:
        config_path: Path to the configuration file
        _visited: Internal parameter to track visited configs (prevents circular refs)
        validate: Run :meth:`FraunhoferConfig.validate` on the result

    Returns:
        FraunhoferConfig object

    Raises:
        ConfigurationError: If the file is missing, unparsable, has circular
            inheritance, or holds invalid values
    """
    config_file = Path(config_path)

    if config_file.suffix.lower() == ".xml":
        data = _load_legacy_xml(config_file)
    else:
        if _visited is None:
            _visited = set()
        data = _load_config_data(config_file.resolve(), _visited)

    config = config_from_dict(data)

    if validate:
        config.validate()

    return config


def config_from_dict(data: dict[str, Any]) -> FraunhoferConfig:
    """Build a FraunhoferConfig from a nested dictionary.

    Raises:
        ConfigurationError: If a section holds unknown keys
    """
    unknown = set(data) - {"name", "device", "diffraction", "render"}
    if unknown:
        raise ConfigurationError(f"Unknown config sections: {', '.join(sorted(unknown))}")

    try:
        return FraunhoferConfig(
            name=data.get("name"),
            device=DeviceConfig(**(data.get("device") or {})),
            diffraction=DiffractionConfig(**(data.get("diffraction") or {})),
            render=RenderConfig(**(data.get("render") or {})),
        )
    except TypeError as e:
        raise ConfigurationError(f"Invalid config section: {e}") from e


def _load_config_data(config_path: Path, visited: set) -> dict[Any, Any]:
    """
    Load config file as raw dictionary (supports recursive inheritance).

    Args:
        config_path: Path to config file
        visited: Set of already visited config paths

    Returns:
        Config dictionary with inheritance resolved
    """
    if str(config_path) in visited:
        raise ConfigurationError(f"Circular config inheritance detected: {config_path}")

    visited.add(str(config_path))

    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Cannot parse config file {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    if "extends" in data:
        parent_path = config_path.parent / data.pop("extends")
        parent_data = _load_config_data(parent_path.resolve(), visited)
        data = _deep_merge_dicts(parent_data, data)

    return data


def _load_legacy_xml(config_path: Path) -> dict[str, Any]:
    """Read the legacy XML settings layout.

    Expected layout::

        <Settings>
            <OpenCL Platform="0" Device="0"/>
            <FFT LensDistance="1.0" Threshold="1.0"/>
        </Settings>
    """
    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        root = ET.parse(config_path).getroot()
    except ET.ParseError as e:
        raise ConfigurationError(f"Cannot parse config file {config_path}: {e}") from e

    if root.tag != "Settings":
        raise ConfigurationError(f"Expected <Settings> root in {config_path}, got <{root.tag}>")

    data: dict[str, Any] = {"device": {}, "diffraction": {}}
    try:
        opencl = root.find("OpenCL")
        if opencl is not None:
            data["device"]["platform"] = int(opencl.get("Platform", 0))
            data["device"]["device"] = int(opencl.get("Device", 0))

        fft = root.find("FFT")
        if fft is not None:
            if fft.get("LensDistance") is not None:
                data["diffraction"]["lens_distance"] = float(fft.get("LensDistance"))
            if fft.get("Threshold") is not None:
                data["diffraction"]["threshold"] = float(fft.get("Threshold"))
    except ValueError as e:
        raise ConfigurationError(f"Invalid value in {config_path}: {e}") from e

    return data


def _deep_merge_dicts(base: dict, override: dict) -> dict:
    """
    Deep merge two dictionaries (override values take precedence).

    Recursively merges nested dictionaries. For non-dict values,
    override always wins.

    Args:
        base: Base dictionary
        override: Override dictionary (takes precedence)

    Returns:
        Merged dictionary

    Examples:
        >>> base = {"a": 1, "b": {"c": 2, "d": 3}}
        >>> override = {"b": {"c": 99}, "e": 4}
        >>> _deep_merge_dicts(base, override)
        {"a": 1, "b": {"c": 99, "d": 3}, "e": 4}
    """
    result = copy.deepcopy(base)

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge_dicts(result[key], value)
        else:
            result[key] = value

    return result


def save_config(config: FraunhoferConfig, output_path: str | Path, minimal: bool = False) -> None:
    """Save a configuration to a YAML file.

    Args:
        config: FraunhoferConfig object to save
        output_path: Path to output YAML file
        minimal: If True, save only non-default values
    """
    config_dict = _config_to_minimal_dict(config) if minimal else config.to_dict()

    output_file = Path(output_path)
    output_file.parent.mkdir(parents=True, exist_ok=True)

    with open(output_file, "w") as f:
        yaml.dump(config_dict, f, default_flow_style=False, sort_keys=False)


def _config_to_minimal_dict(config: FraunhoferConfig) -> dict[str, Any]:
    """
    Convert config to dictionary with only non-default values.

    Args:
        config: FraunhoferConfig object

    Returns:
        Minimal dictionary representation
    """
    result: dict[str, Any] = {}

    if config.name is not None:
        result["name"] = config.name

    def get_non_defaults(obj: Any, default_obj: Any) -> dict[str, Any]:
        non_defaults: dict[str, Any] = {}
        for f in fields(obj):
            value = getattr(obj, f.name)
            if value != getattr(default_obj, f.name):
                non_defaults[f.name] = value
        return non_defaults

    for section, defaults in (
        ("device", DeviceConfig()),
        ("diffraction", DiffractionConfig()),
        ("render", RenderConfig()),
    ):
        non_defaults = get_non_defaults(getattr(config, section), defaults)
        if non_defaults:
            result[section] = non_defaults

    return result


# CLI destination name -> (config section, field)
_CLI_OVERRIDES: dict[str, tuple[str, str]] = {
    "platform": ("device", "platform"),
    "device": ("device", "device"),
    "lens_distance": ("diffraction", "lens_distance"),
    "threshold": ("diffraction", "threshold"),
    "sampling": ("render", "sampling"),
    "seed": ("render", "seed"),
    "batch_size": ("render", "batch_size"),
    "color_system": ("render", "color_system"),
    "tone_map": ("render", "tone_map"),
}


def merge_config_with_args(
    config: FraunhoferConfig, cli_args: argparse.Namespace
) -> FraunhoferConfig:
    """Merge config with CLI arguments (CLI args take precedence).

    Only arguments that were given on the command line (not None) override
    the file values.

    Args:
        config: Base configuration from the config file
        cli_args: Command-line arguments from argparse

    Returns:
        New FraunhoferConfig; the input config is left untouched
    """
    sections = {
        "device": config.device,
        "diffraction": config.diffraction,
        "render": config.render,
    }

    for arg_name, (section, field_name) in _CLI_OVERRIDES.items():
        value = getattr(cli_args, arg_name, None)
        if value is not None:
            sections[section] = replace(sections[section], **{field_name: value})

    return FraunhoferConfig(name=config.name, **sections)

"""Configuration management for fraunhofer."""

from __future__ import annotations

from .base import DeviceConfig, DiffractionConfig, FraunhoferConfig, RenderConfig
from .constants import (
    REFERENCE_WAVELENGTH_NM,
    VISIBLE_MAX_NM,
    VISIBLE_MIN_NM,
    wavelength_from_fraction,
)
from .loader import config_from_dict, load_config, merge_config_with_args, save_config
from .validation import ConfigValidator, ValidationError


__all__ = [
    # Configuration dataclasses
    "FraunhoferConfig",
    "DeviceConfig",
    "DiffractionConfig",
    "RenderConfig",
    # Loader/saver
    "load_config",
    "config_from_dict",
    "save_config",
    "merge_config_with_args",
    # Validation
    "ConfigValidator",
    "ValidationError",
    # Constants
    "VISIBLE_MIN_NM",
    "VISIBLE_MAX_NM",
    "REFERENCE_WAVELENGTH_NM",
    "wavelength_from_fraction",
]

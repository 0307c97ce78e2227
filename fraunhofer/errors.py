"""Error taxonomy for the diffraction pipeline.

Every fatal condition the pipeline can hit before touching a compute device
maps to one of these classes. The CLI turns them into distinct exit codes.
"""

from __future__ import annotations


class FraunhoferError(Exception):
    """Base class for fatal pipeline errors."""

    exit_code: int = 1


class ConfigurationError(FraunhoferError):
    """Unreadable or invalid configuration (e.g. zero lens distance)."""

    exit_code = 5


class InputFormatError(FraunhoferError):
    """Aperture file cannot be used (bad header, non-power-of-two size, ...)."""

    exit_code = 3


class DeviceSelectionError(FraunhoferError):
    """Requested compute platform or device index does not exist."""

    exit_code = 4

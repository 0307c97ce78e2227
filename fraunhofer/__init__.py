"""fraunhofer: spectral rendering of lens-aperture diffraction patterns"""

from __future__ import annotations


__version__ = "0.1.0"

# Import submodules for easier access
from fraunhofer import config, core, io, utils
from fraunhofer.core.pipeline import DiffractionPipeline, RenderResult
from fraunhofer.utils.logging_config import setup_logging


__all__ = [
    "config",
    "core",
    "io",
    "utils",
    "DiffractionPipeline",
    "RenderResult",
    "setup_logging",
    "__version__",
]

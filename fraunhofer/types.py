"""Type definitions for fraunhofer.

This module provides type aliases and protocols used throughout the package
for better type safety and documentation.

Protocols:
    - SpectralStage: Anything that turns a diffraction field into an accumulator
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol, TypeAlias, Union, runtime_checkable


# Configuration types
PathLike: TypeAlias = Union[str, Path]


# ============================================================================
# Protocols for Core Components
# ============================================================================


@runtime_checkable
class SpectralStage(Protocol):
    """Protocol for the rendering stage of the pipeline.

    Example:
        >>> def render_all(stage: SpectralStage, field, samples):
        ...     return stage.render(field, samples).finalize()
    """

    def render(self, field: object, samples: int) -> object:
        """Integrate ``samples`` wavelength samples weighted by ``field``."""
        ...

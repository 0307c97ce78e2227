"""Spectral sampling, colour matching and accumulation."""

from __future__ import annotations

from fraunhofer.core.spectral.curve import SpectralCurve, default_curve
from fraunhofer.core.spectral.renderer import Accumulator, SpectralRenderer
from fraunhofer.core.spectral.sampling import SamplingMode, wavelength_fractions


__all__ = [
    "SpectralCurve",
    "default_curve",
    "Accumulator",
    "SpectralRenderer",
    "SamplingMode",
    "wavelength_fractions",
]

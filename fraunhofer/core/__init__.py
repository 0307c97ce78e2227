"""Core functionality for fraunhofer.

Stages, in pipeline order:

>>> from fraunhofer.core import load_aperture, FFTEngine, DiffractionNormalizer, SpectralRenderer
>>> mask = load_aperture("aperture.ppm")
>>> spectrum = FFTEngine().transform(mask)
>>> field = DiffractionNormalizer(lens_distance=1.0).normalize(spectrum)
>>> accumulator = SpectralRenderer().render(field, samples=8)
"""

from __future__ import annotations

from fraunhofer.core.bit_reversal import radix_of, reversal_table
from fraunhofer.core.color import COLOR_SYSTEMS, ColorSystem, xyz_to_rgb
from fraunhofer.core.device import list_platforms, select_device
from fraunhofer.core.fft import FFTEngine
from fraunhofer.core.optics import (
    ApertureMask,
    DiffractionField,
    DiffractionNormalizer,
    load_aperture,
    parse_aperture,
)
from fraunhofer.core.spectral import (
    Accumulator,
    SamplingMode,
    SpectralCurve,
    SpectralRenderer,
    wavelength_fractions,
)


__all__ = [
    # Bit reversal
    "radix_of",
    "reversal_table",
    # Colour
    "ColorSystem",
    "COLOR_SYSTEMS",
    "xyz_to_rgb",
    # Devices
    "list_platforms",
    "select_device",
    # Transform
    "FFTEngine",
    # Optics
    "ApertureMask",
    "DiffractionField",
    "DiffractionNormalizer",
    "load_aperture",
    "parse_aperture",
    # Spectral
    "Accumulator",
    "SamplingMode",
    "SpectralCurve",
    "SpectralRenderer",
    "wavelength_fractions",
]

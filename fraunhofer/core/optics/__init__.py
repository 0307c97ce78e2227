"""Aperture masks and diffraction intensity.

Classes
-------
ApertureMask
    Complex aperture grid with power-of-two dimensions.
DiffractionField
    Real diffraction intensity centred on the zero frequency.
DiffractionNormalizer
    Converts an FFT spectrum into a lens-distance-scaled DiffractionField.

Functions
---------
load_aperture
    Read a P3/P6 pixel-map from disk.
parse_aperture
    Parse pixel-map bytes.
"""

from __future__ import annotations

from fraunhofer.core.optics.aperture import ApertureMask, load_aperture, parse_aperture
from fraunhofer.core.optics.diffraction import DiffractionField, DiffractionNormalizer


__all__ = [
    "ApertureMask",
    "load_aperture",
    "parse_aperture",
    "DiffractionField",
    "DiffractionNormalizer",
]

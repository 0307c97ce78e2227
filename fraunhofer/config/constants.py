"""
Module: fraunhofer.config.constants
Purpose: Physical and format constants shared by the pipeline stages

Description:
    Wavelength bounds of the rendered visible range, the reference wavelength
    at which the diffraction field is taken unscaled, and the fixed values of
    the Radiance output format.
"""

from __future__ import annotations


# %% Visible range (nanometers)

VISIBLE_MIN_NM = 380.0
VISIBLE_MAX_NM = 780.0
VISIBLE_SPAN_NM = VISIBLE_MAX_NM - VISIBLE_MIN_NM

# The diffraction field is computed for this wavelength; other wavelengths
# rescale it by wavelength / REFERENCE_WAVELENGTH_NM.
REFERENCE_WAVELENGTH_NM = 0.5 * (VISIBLE_MIN_NM + VISIBLE_MAX_NM)

# %% Radiance format

RGBE_EXPONENT_BIAS = 128
RADIANCE_MAGIC = "#?RADIANCE"
SOFTWARE_TAG = "fraunhofer"
FORMAT_RGBE = "32-bit_rle_rgbe"
FORMAT_XYZE = "32-bit_rle_xyze"


def wavelength_from_fraction(fraction: float) -> float:
    """Map a normalized wavelength in [0, 1] to nanometers.

    Args:
        fraction: Position across the visible range (float or tensor)

    Returns:
        Wavelength in nanometers
    """
    return VISIBLE_MIN_NM + fraction * VISIBLE_SPAN_NM

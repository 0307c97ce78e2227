"""CIE XYZ to linear RGB conversion for named display colour systems.

Each colour system is defined by the chromaticities of its three primaries
and its white point. The conversion matrix is the inverse of the primaries'
XYZ matrix, with every row scaled so that the white point maps to equal RGB
at unit luminance.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import torch
from torch import Tensor

from fraunhofer.errors import ConfigurationError


Chromaticity = Tuple[float, float]

ILLUMINANT_C: Chromaticity = (0.3101, 0.3162)
ILLUMINANT_D65: Chromaticity = (0.3127, 0.3291)
ILLUMINANT_E: Chromaticity = (1.0 / 3.0, 1.0 / 3.0)


@dataclass(frozen=True)
class ColorSystem:
    """Primaries and white point of an RGB colour system."""

    name: str
    red: Chromaticity
    green: Chromaticity
    blue: Chromaticity
    white: Chromaticity

    def matrix(self) -> Tensor:
        """3x3 float64 matrix mapping XYZ column vectors to linear RGB."""
        xr, yr = self.red
        xg, yg = self.green
        xb, yb = self.blue
        xw, yw = self.white
        zr, zg, zb, zw = 1 - (xr + yr), 1 - (xg + yg), 1 - (xb + yb), 1 - (xw + yw)

        # Rows of the adjugate of the primaries' xyz matrix
        rows = [
            [yg * zb - yb * zg, xb * zg - xg * zb, xg * yb - xb * yg],
            [yb * zr - yr * zb, xr * zb - xb * zr, xb * yr - xr * yb],
            [yr * zg - yg * zr, xg * zr - xr * zg, xr * yg - xg * yr],
        ]

        # Scale each row so the white point has unit luminance in every channel
        for row in rows:
            scale = (row[0] * xw + row[1] * yw + row[2] * zw) / yw
            row[:] = [value / scale for value in row]

        return torch.tensor(rows, dtype=torch.float64)


COLOR_SYSTEMS: Dict[str, ColorSystem] = {
    "ebu": ColorSystem("EBU", (0.64, 0.33), (0.29, 0.60), (0.15, 0.06), ILLUMINANT_D65),
    "smpte": ColorSystem("SMPTE", (0.630, 0.340), (0.310, 0.595), (0.155, 0.070), ILLUMINANT_D65),
    "hdtv": ColorSystem("HDTV", (0.670, 0.330), (0.210, 0.710), (0.150, 0.060), ILLUMINANT_D65),
    "rec709": ColorSystem("Rec709", (0.64, 0.33), (0.30, 0.60), (0.15, 0.06), ILLUMINANT_D65),
    "ntsc": ColorSystem("NTSC", (0.67, 0.33), (0.21, 0.71), (0.14, 0.08), ILLUMINANT_C),
    "cie": ColorSystem("CIE", (0.7355, 0.2645), (0.2658, 0.7243), (0.1669, 0.0085), ILLUMINANT_E),
}


def get_color_system(name: str) -> ColorSystem:
    """Look up a colour system by its lowercase key."""
    try:
        return COLOR_SYSTEMS[name.lower()]
    except KeyError as e:
        valid = ", ".join(COLOR_SYSTEMS)
        raise ConfigurationError(f"Unknown colour system {name!r}; expected one of: {valid}") from e


def constrain_gamut(rgb: Tensor) -> Tensor:
    """Shift out-of-gamut pixels so their smallest channel becomes 0.

    A pixel whose minimum channel is negative has that minimum subtracted
    from all three channels; other pixels are unchanged.
    """
    shift = rgb.min(dim=-1, keepdim=True).values.clamp(max=0.0)
    return rgb - shift


def xyz_to_rgb(xyz: Tensor, system: ColorSystem | str) -> Tensor:
    """Convert ``[..., 3]`` XYZ pixels to gamut-constrained linear RGB."""
    if isinstance(system, str):
        system = get_color_system(system)
    matrix = system.matrix().to(device=xyz.device, dtype=xyz.dtype)
    return constrain_gamut(xyz @ matrix.T)

"""Radiance HDR (RGBE / XYZE) encoding.

Each pixel is stored as three mantissa bytes sharing one exponent byte with a
bias of 128. Files consist of an ASCII header, a blank line, a resolution
line ``-Y <height> +X <width>`` and the flat row-major pixel records.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
import torch
from loguru import logger
from torch import Tensor

from fraunhofer.config.constants import (
    FORMAT_RGBE,
    FORMAT_XYZE,
    RADIANCE_MAGIC,
    RGBE_EXPONENT_BIAS,
    SOFTWARE_TAG,
)
from fraunhofer.core.color import get_color_system, xyz_to_rgb
from fraunhofer.core.spectral.renderer import Accumulator
from fraunhofer.errors import ConfigurationError, InputFormatError


TONE_MAPS = ("sqrt", "linear")


@dataclass
class RadianceImage:
    """Encoded pixels ready to be written.

    Attributes
    ----------
    pixels : Tensor
        uint8 tensor ``[height, width, 4]``: three mantissas then the exponent.
    pixel_format : str
        FORMAT header value.
    """

    pixels: Tensor
    pixel_format: str = FORMAT_RGBE

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    def header(self) -> bytes:
        lines = [
            RADIANCE_MAGIC,
            f"SOFTWARE={SOFTWARE_TAG}",
            f"FORMAT={self.pixel_format}",
            "",
            f"-Y {self.height} +X {self.width}",
        ]
        return ("\n".join(lines) + "\n").encode("ascii")

    def to_bytes(self) -> bytes:
        return self.header() + self.pixels.cpu().numpy().astype(np.uint8).tobytes()

    def decode(self) -> Tensor:
        """Linear radiance of every pixel, float64 ``[height, width, 3]``."""
        return decode_pixels(self.pixels)


def encode_pixels(values: Tensor) -> Tensor:
    """Encode non-negative ``[..., 3]`` values as shared-exponent bytes.

    Pixels whose largest channel is not positive, or too small for the
    smallest exponent, become all zeros. Exponents above 255 saturate.

    Returns
    -------
    Tensor
        uint8 tensor ``[..., 4]``.
    """
    values = values.to(torch.float64)
    peak = values.max(dim=-1).values
    positive = peak > 0
    safe_peak = torch.where(positive, peak, torch.ones_like(peak))

    exponent = torch.ceil(torch.log2(safe_peak)) + RGBE_EXPONENT_BIAS
    representable = positive & (exponent > 0)
    exponent = exponent.clamp(1, 255)

    scale = torch.exp2(exponent - RGBE_EXPONENT_BIAS)[..., None]
    mantissa = torch.floor(256.0 * values / scale).clamp(0, 255)

    encoded = torch.cat((mantissa, exponent[..., None]), dim=-1)
    encoded = torch.where(representable[..., None], encoded, torch.zeros_like(encoded))
    return encoded.to(torch.uint8)


def decode_pixels(pixels: Tensor) -> Tensor:
    """Invert :func:`encode_pixels` to the centre of each quantization bin."""
    pixels = pixels.to(torch.float64)
    exponent = pixels[..., 3:]
    scale = torch.exp2(exponent - (RGBE_EXPONENT_BIAS + 8))
    decoded = (pixels[..., :3] + 0.5) * scale
    return torch.where(exponent > 0, decoded, torch.zeros_like(decoded))


def apply_tone_map(radiance: Tensor, tone_map: str) -> Tensor:
    """Apply the output tone curve to non-negative radiance."""
    if tone_map == "sqrt":
        return torch.sqrt(radiance.clamp(min=0.0))
    if tone_map == "linear":
        return radiance.clamp(min=0.0)
    raise ConfigurationError(f"Unknown tone map {tone_map!r}; expected one of: {', '.join(TONE_MAPS)}")


class RadianceEncoder:
    """Tone-map, colour-convert and encode an accumulator.

    Parameters
    ----------
    color_system : str, default="cie"
        Target RGB system, or ``"none"`` to keep XYZ and write an xyze file.
    tone_map : {"sqrt", "linear"}, default="sqrt"
        Curve applied to the normalized radiance before the colour transform.
    """

    def __init__(self, color_system: str = "cie", tone_map: str = "sqrt") -> None:
        if tone_map not in TONE_MAPS:
            raise ConfigurationError(
                f"Unknown tone map {tone_map!r}; expected one of: {', '.join(TONE_MAPS)}"
            )
        self.tone_map = tone_map
        self.color_system = None if color_system.lower() == "none" else get_color_system(color_system)

    @property
    def pixel_format(self) -> str:
        return FORMAT_XYZE if self.color_system is None else FORMAT_RGBE

    def encode(self, source: Union[Accumulator, Tensor]) -> RadianceImage:
        """Encode a finalized image or an accumulator.

        Parameters
        ----------
        source : Accumulator or Tensor
            Accumulator (finalized here) or ``[height, width, 3]`` XYZ values.
        """
        radiance = source.finalize() if isinstance(source, Accumulator) else source.to(torch.float64)
        values = apply_tone_map(radiance, self.tone_map)
        if self.color_system is not None:
            values = xyz_to_rgb(values, self.color_system)
        return RadianceImage(encode_pixels(values).cpu(), self.pixel_format)


def write_radiance(path: Union[str, Path], image: RadianceImage) -> Path:
    """Write an encoded image, creating parent directories."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(image.to_bytes())
    logger.info(f"Wrote {image.width}x{image.height} {image.pixel_format} image to {path}")
    return path


def read_radiance(path: Union[str, Path]) -> RadianceImage:
    """Read a flat (non run-length encoded) Radiance file.

    Raises
    ------
    InputFormatError
        If the header or pixel data is malformed.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InputFormatError(f"Cannot read Radiance file {path}: {e}") from e

    header_end = data.find(b"\n\n")
    if not data.startswith(b"#?") or header_end < 0:
        raise InputFormatError(f"{path} is not a Radiance file")

    pixel_format = FORMAT_RGBE
    for line in data[:header_end].decode("ascii", errors="replace").splitlines()[1:]:
        if line.startswith("FORMAT="):
            pixel_format = line.split("=", 1)[1].strip()

    resolution_end = data.find(b"\n", header_end + 2)
    if resolution_end < 0:
        raise InputFormatError(f"Missing resolution line in {path}")
    tokens = data[header_end + 2 : resolution_end].split()
    if len(tokens) != 4 or tokens[0] != b"-Y" or tokens[2] != b"+X":
        raise InputFormatError(f"Unsupported resolution line in {path}: {tokens!r}")
    try:
        height, width = int(tokens[1]), int(tokens[3])
    except ValueError as e:
        raise InputFormatError(f"Invalid resolution in {path}") from e

    offset = resolution_end + 1
    count = height * width * 4
    if len(data) - offset < count:
        raise InputFormatError(f"Truncated pixel data in {path}")

    raw = np.frombuffer(data, dtype=np.uint8, count=count, offset=offset).reshape(height, width, 4)
    return RadianceImage(torch.from_numpy(raw.copy()), pixel_format)

"""Aperture masks read from PPM pixel-maps.

The mask is derived from a luminance proxy ``L = sqrt((R + G + B) / 3)`` of
every pixel, with channels normalized by the declared maximum value. A
threshold of 1.0 keeps ``L`` as a continuous transmission value; any other
threshold produces a binary aperture.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import numpy as np
import torch
from loguru import logger
from torch import Tensor

from fraunhofer.core.bit_reversal import radix_of
from fraunhofer.errors import ConfigurationError, InputFormatError


_WHITESPACE = b" \t\n\r\v\f"
_MAGIC_ASCII = b"P3"
_MAGIC_BINARY = b"P6"


@dataclass(frozen=True)
class ApertureMask:
    """Complex aperture grid with power-of-two dimensions.

    Attributes
    ----------
    values : Tensor
        complex128 tensor of shape ``[height, width]``. The real part holds the
        transmission in [0, 1], the imaginary part is zero.
    """

    values: Tensor

    def __post_init__(self) -> None:
        if self.values.ndim != 2:
            raise InputFormatError(f"Aperture must be 2-D, got shape {tuple(self.values.shape)}")
        height, width = self.values.shape
        for name, size in (("width", width), ("height", height)):
            try:
                radix_of(int(size))
            except InputFormatError as e:
                raise InputFormatError(f"Aperture {name} must be a power of two, got {size}") from e
        if not self.values.is_complex():
            object.__setattr__(self, "values", self.values.to(torch.complex128))

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def radix_y(self) -> int:
        return radix_of(self.height)

    @property
    def radix_x(self) -> int:
        return radix_of(self.width)

    @property
    def transmission(self) -> Tensor:
        """Real-valued view of the mask."""
        return self.values.real

    def to(self, device: torch.device | str) -> ApertureMask:
        """Return a copy of the mask on ``device``."""
        return ApertureMask(self.values.to(device))


def _next_token(data: bytes, pos: int) -> tuple[bytes, int]:
    """Read one whitespace-delimited header token, skipping ``#`` comments."""
    length = len(data)
    while pos < length:
        if data[pos] in _WHITESPACE:
            pos += 1
        elif data[pos] == ord("#"):
            while pos < length and data[pos] not in b"\r\n":
                pos += 1
        else:
            break

    start = pos
    while pos < length and data[pos] not in _WHITESPACE and data[pos] != ord("#"):
        pos += 1

    if start == pos:
        raise InputFormatError("Truncated pixel-map header")
    return data[start:pos], pos


def _parse_header(data: bytes) -> tuple[bytes, int, int, int, int]:
    """Parse magic, width, height and maxval.

    Returns the four fields and the offset right after the maxval token.
    """
    magic, pos = _next_token(data, 0)
    if magic not in (_MAGIC_ASCII, _MAGIC_BINARY):
        raise InputFormatError(f"Unsupported pixel-map format tag {magic[:8]!r}, expected P3 or P6")

    fields = []
    for name in ("width", "height", "maximum value"):
        token, pos = _next_token(data, pos)
        try:
            fields.append(int(token))
        except ValueError as e:
            raise InputFormatError(f"Invalid {name} in pixel-map header: {token[:16]!r}") from e

    width, height, maxval = fields
    if width < 1 or height < 1:
        raise InputFormatError(f"Pixel-map dimensions must be positive, got {width}x{height}")
    if not 0 < maxval < 65536:
        raise InputFormatError(f"Pixel-map maximum value must be in [1, 65535], got {maxval}")

    return magic, width, height, maxval, pos


def _read_ascii_samples(data: bytes, offset: int, count: int) -> np.ndarray:
    tokens = data[offset:].split()
    if len(tokens) < count:
        raise InputFormatError(f"Truncated pixel data: expected {count} samples, found {len(tokens)}")
    try:
        return np.array([int(token) for token in tokens[:count]], dtype=np.int64)
    except ValueError as e:
        raise InputFormatError(f"Non-numeric pixel data: {e}") from e


def _read_binary_samples(data: bytes, offset: int, count: int, maxval: int) -> np.ndarray:
    # Exactly one whitespace byte separates maxval from the raster.
    if offset >= len(data) or data[offset] not in _WHITESPACE:
        raise InputFormatError("Missing separator between pixel-map header and raster")
    offset += 1

    dtype = np.dtype(np.uint8) if maxval < 256 else np.dtype(">u2")
    available = (len(data) - offset) // dtype.itemsize
    if available < count:
        raise InputFormatError(f"Truncated pixel data: expected {count} samples, found {available}")
    return np.frombuffer(data, dtype=dtype, count=count, offset=offset).astype(np.int64)


def luminance_mask(rgb: Tensor, threshold: float) -> Tensor:
    """Map normalized RGB to aperture transmission.

    Parameters
    ----------
    rgb : Tensor
        Real tensor ``[..., 3]`` with channels in [0, 1].
    threshold : float
        1.0 for a continuous mask, otherwise the binarization level.

    Returns
    -------
    Tensor
        Transmission ``[...]`` in [0, 1].
    """
    luminance = torch.sqrt(rgb.mean(dim=-1))
    if threshold == 1.0:
        return luminance
    return (luminance > threshold).to(luminance.dtype)


def parse_aperture(data: bytes, threshold: float = 1.0) -> ApertureMask:
    """Parse a P3 or P6 pixel-map into an aperture mask.

    P6 files with ``maxval >= 256`` carry two bytes per sample, read
    big-endian as the Netpbm format defines. Older tools that dumped 16-bit
    samples in host byte order (little-endian on x86) produce files that
    decode with swapped bytes here; convert them with ``pnmtopnm`` or
    byte-swap the raster first.

    Parameters
    ----------
    data : bytes
        Raw file content.
    threshold : float, default=1.0
        Aperture threshold in [0, 1].

    Returns
    -------
    ApertureMask
        Mask of the file's width and height.

    Raises
    ------
    InputFormatError
        On an unsupported tag, non-power-of-two dimensions or bad pixel data.
    ConfigurationError
        If ``threshold`` lies outside [0, 1].
    """
    if not 0.0 <= threshold <= 1.0:
        raise ConfigurationError(f"Aperture threshold must be in [0, 1], got {threshold}")

    magic, width, height, maxval, offset = _parse_header(data)
    for name, size in (("width", width), ("height", height)):
        if size & (size - 1):
            raise InputFormatError(f"Aperture {name} must be a power of two, got {size}")

    count = 3 * width * height
    if magic == _MAGIC_ASCII:
        samples = _read_ascii_samples(data, offset, count)
    else:
        samples = _read_binary_samples(data, offset, count, maxval)

    if samples.min() < 0 or samples.max() > maxval:
        raise InputFormatError(f"Pixel values must lie in [0, {maxval}]")

    rgb = torch.from_numpy(samples.astype(np.float64)).reshape(height, width, 3) / maxval
    transmission = luminance_mask(rgb, threshold)
    values = torch.complex(transmission, torch.zeros_like(transmission))

    logger.debug(
        f"Parsed {magic.decode()} aperture {width}x{height} (maxval={maxval}, threshold={threshold})"
    )
    return ApertureMask(values)


def load_aperture(path: str | Path, threshold: float = 1.0) -> ApertureMask:
    """Read an aperture mask from a PPM file.

    Raises
    ------
    InputFormatError
        If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        data = path.read_bytes()
    except OSError as e:
        raise InputFormatError(f"Cannot read aperture file {path}: {e}") from e

    mask = parse_aperture(data, threshold)
    logger.info(f"Loaded aperture {path.name}: {mask.width}x{mask.height}")
    return mask

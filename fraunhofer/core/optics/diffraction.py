"""Diffraction intensity from an aperture spectrum.

The far-field (Fraunhofer) pattern of an aperture is the squared magnitude of
its Fourier transform. :class:`DiffractionNormalizer` centres the spectrum,
stretches it by the lens distance and returns the real intensity field the
spectral renderer uses as its weighting function.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import torch
from loguru import logger
from torch import Tensor

from fraunhofer.errors import ConfigurationError


def sample_bilinear(grid: Tensor, ys: Tensor, xs: Tensor, wrap: bool = False) -> Tensor:
    """Bilinearly sample a 2-D grid on a separable set of coordinates.

    Parameters
    ----------
    grid : Tensor
        Real or complex tensor of shape ``[H, W]``.
    ys : Tensor
        Row coordinates of shape ``[..., h]`` (float64).
    xs : Tensor
        Column coordinates of shape ``[..., w]`` with the same leading shape.
    wrap : bool, default=False
        Periodic indexing when True, otherwise samples outside the grid are 0.

    Returns
    -------
    Tensor
        Samples of shape ``[..., h, w]``.
    """
    height, width = grid.shape
    y0 = torch.floor(ys)
    x0 = torch.floor(xs)
    fy = (ys - y0)[..., :, None]
    fx = (xs - x0)[..., None, :]
    y0 = y0.long()
    x0 = x0.long()

    def tap(yi: Tensor, xi: Tensor) -> Tensor:
        if wrap:
            return grid[(yi % height)[..., :, None], (xi % width)[..., None, :]]
        valid_y = (yi >= 0) & (yi < height)
        valid_x = (xi >= 0) & (xi < width)
        values = grid[yi.clamp(0, height - 1)[..., :, None], xi.clamp(0, width - 1)[..., None, :]]
        valid = valid_y[..., :, None] & valid_x[..., None, :]
        return torch.where(valid, values, torch.zeros_like(values))

    return (
        tap(y0, x0) * ((1 - fy) * (1 - fx))
        + tap(y0, x0 + 1) * ((1 - fy) * fx)
        + tap(y0 + 1, x0) * (fy * (1 - fx))
        + tap(y0 + 1, x0 + 1) * (fy * fx)
    )


def centered_coordinates(size: int, scale: Tensor) -> Tensor:
    """Source coordinates for resampling an axis about its centre.

    Output index ``p`` reads from ``c + (p - c) / scale`` with ``c = size // 2``.

    Parameters
    ----------
    size : int
        Axis length.
    scale : Tensor
        Scale factors of shape ``[B]``; values above 1 spread the pattern.

    Returns
    -------
    Tensor
        Coordinates of shape ``[B, size]``.
    """
    center = size // 2
    offsets = torch.arange(size, dtype=torch.float64, device=scale.device) - center
    return center + offsets[None, :] / scale[:, None]


@dataclass(frozen=True)
class DiffractionField:
    """Real diffraction intensity with the zero frequency at the grid centre.

    Attributes
    ----------
    intensity : Tensor
        float64 tensor ``[height, width]``; DC sits at ``(height // 2, width // 2)``.
    lens_distance : float
        Lens distance the field was produced with.
    """

    intensity: Tensor
    lens_distance: float

    @property
    def height(self) -> int:
        return int(self.intensity.shape[0])

    @property
    def width(self) -> int:
        return int(self.intensity.shape[1])

    @property
    def center(self) -> Tuple[int, int]:
        return self.height // 2, self.width // 2

    @property
    def peak(self) -> float:
        """Largest intensity value (0 for an all-dark aperture)."""
        return float(self.intensity.max())

    @property
    def dc(self) -> float:
        """Intensity at the zero-frequency position."""
        return float(self.intensity[self.center])

    def scaled(self, scale: Tensor) -> Tensor:
        """Resample the field about its centre for each scale factor.

        Parameters
        ----------
        scale : Tensor
            Factors of shape ``[B]``. Samples that fall outside the field are 0.

        Returns
        -------
        Tensor
            Stack of fields, shape ``[B, height, width]``.
        """
        scale = scale.to(device=self.intensity.device, dtype=torch.float64)
        ys = centered_coordinates(self.height, scale)
        xs = centered_coordinates(self.width, scale)
        return sample_bilinear(self.intensity, ys, xs, wrap=False)


class DiffractionNormalizer:
    """Turn a complex spectrum into a distance-scaled intensity field.

    Each output pixel at offset ``p`` from the centre reads the (shifted)
    spectrum at frequency ``p / lens_distance`` before taking ``|F|^2``, so a
    larger lens distance spreads the pattern further. A lens distance of 1.0
    reproduces the shifted squared magnitude exactly.

    Parameters
    ----------
    lens_distance : float
        Positive, finite lens distance.

    Raises
    ------
    ConfigurationError
        If ``lens_distance`` is missing, non-positive or not finite.
    """

    def __init__(self, lens_distance: float | None) -> None:
        if lens_distance is None:
            raise ConfigurationError("Lens distance is not set")
        lens_distance = float(lens_distance)
        if not math.isfinite(lens_distance) or lens_distance <= 0:
            raise ConfigurationError(f"Lens distance must be positive, got {lens_distance}")
        self.lens_distance = lens_distance

    def normalize(self, spectrum: Tensor) -> DiffractionField:
        """Compute the diffraction intensity of ``spectrum``.

        Parameters
        ----------
        spectrum : Tensor
            Complex ``[height, width]`` output of the forward FFT with DC at ``[0, 0]``.

        Returns
        -------
        DiffractionField
            Intensity with DC at the centre.
        """
        if spectrum.ndim != 2:
            raise ValueError(f"Expected a 2-D spectrum, got shape {tuple(spectrum.shape)}")

        shifted = torch.fft.fftshift(spectrum.to(torch.complex128))
        height, width = shifted.shape

        if self.lens_distance == 1.0:
            resampled = shifted
        else:
            scale = torch.tensor([self.lens_distance], dtype=torch.float64, device=shifted.device)
            ys = centered_coordinates(height, scale)
            xs = centered_coordinates(width, scale)
            resampled = sample_bilinear(shifted, ys, xs, wrap=True)[0]

        intensity = (resampled.real**2 + resampled.imag**2).to(torch.float64)

        logger.debug(
            f"Normalized {height}x{width} spectrum (lens_distance={self.lens_distance}, "
            f"peak={float(intensity.max()):.4g})"
        )
        return DiffractionField(intensity=intensity, lens_distance=self.lens_distance)

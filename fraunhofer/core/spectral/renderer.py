"""Spectral Monte Carlo integration of a diffraction field.

Every wavelength sample rescales the diffraction field about its centre by
``wavelength / 580 nm`` (longer wavelengths diffract further), weights it by
the colour-matching response at that wavelength, and adds the result to an
:class:`Accumulator`. Samples are integrated in batches whose partial sums are
merged by addition, so the order of batches does not change the result beyond
floating-point rounding.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import torch
from loguru import logger
from torch import Tensor

from fraunhofer.config.constants import REFERENCE_WAVELENGTH_NM, wavelength_from_fraction
from fraunhofer.core.optics.diffraction import DiffractionField
from fraunhofer.core.spectral.curve import SpectralCurve, default_curve
from fraunhofer.core.spectral.sampling import SamplingMode, wavelength_fractions
from fraunhofer.errors import ConfigurationError


@dataclass
class Accumulator:
    """Per-pixel colour and weight sums.

    Attributes
    ----------
    data : Tensor
        float64 tensor ``[height, width, 4]``; channels 0-2 hold colour, channel
        3 the accumulated sample weight.
    """

    data: Tensor

    @classmethod
    def zeros(
        cls, height: int, width: int, device: torch.device | str | None = None
    ) -> Accumulator:
        return cls(torch.zeros(height, width, 4, dtype=torch.float64, device=device))

    @property
    def color(self) -> Tensor:
        return self.data[..., :3]

    @property
    def weight(self) -> Tensor:
        return self.data[..., 3]

    @property
    def shape(self) -> tuple[int, int]:
        return int(self.data.shape[0]), int(self.data.shape[1])

    def add(self, other: Accumulator) -> Accumulator:
        """Merge another accumulator's sums into this one (in place)."""
        if other.shape != self.shape:
            raise ValueError(f"Cannot merge accumulator {other.shape} into {self.shape}")
        self.data += other.data.to(self.data.device)
        return self

    def finalize(self) -> Tensor:
        """Colour divided by weight; pixels with zero weight are 0.

        Returns
        -------
        Tensor
            float64 tensor ``[height, width, 3]``.
        """
        weight = self.weight[..., None]
        has_weight = weight > 0
        safe_weight = torch.where(has_weight, weight, torch.ones_like(weight))
        return torch.where(has_weight, self.color / safe_weight, torch.zeros_like(self.color))


class SpectralRenderer:
    """Integrate wavelength samples weighted by a diffraction field.

    Parameters
    ----------
    curve : SpectralCurve, optional
        Colour-matching table. Defaults to the CIE 1931 observer.
    mode : SamplingMode or str, default="auto"
        Wavelength placement. AUTO uses a single exposure for one sample and
        deterministic stratification otherwise.
    seed : int, default=0
        Base seed for the jittered mode.
    batch_size : int, default=16
        Samples integrated per vectorized batch.
    """

    def __init__(
        self,
        curve: Optional[SpectralCurve] = None,
        mode: SamplingMode | str = SamplingMode.AUTO,
        seed: int = 0,
        batch_size: int = 16,
    ) -> None:
        if batch_size < 1:
            raise ConfigurationError(f"batch_size must be positive, got {batch_size}")
        self.curve = curve if curve is not None else default_curve()
        self.mode = SamplingMode.parse(mode)
        self.seed = seed
        self.batch_size = batch_size

    def render(self, field: DiffractionField, samples: int) -> Accumulator:
        """Accumulate ``samples`` wavelength samples over ``field``.

        Raises
        ------
        ConfigurationError
            If ``samples`` < 1.
        """
        fractions = wavelength_fractions(samples, self.mode, self.seed)
        mode = self.mode.resolve(samples)
        device = field.intensity.device
        curve = self.curve.to(device)

        accumulator = Accumulator.zeros(field.height, field.width, device=device)

        if mode is SamplingMode.SINGLE_EXPOSURE:
            accumulator.add(self._single_exposure(field, curve))
        else:
            fractions = fractions.to(device)
            for start in range(0, len(fractions), self.batch_size):
                accumulator.add(self._integrate(field, curve, fractions[start : start + self.batch_size]))

        logger.debug(
            f"Rendered {samples} sample(s) in {mode.value} mode "
            f"(batch_size={self.batch_size}, peak={field.peak:.4g})"
        )
        return accumulator

    def _single_exposure(self, field: DiffractionField, curve: SpectralCurve) -> Accumulator:
        """One sample spanning the range: mean response over the unscaled field."""
        response = curve.mean_response()
        partial = Accumulator.zeros(field.height, field.width, device=field.intensity.device)
        partial.color[...] = field.intensity[..., None] * response
        partial.weight[...] = field.peak
        return partial

    def _integrate(self, field: DiffractionField, curve: SpectralCurve, fractions: Tensor) -> Accumulator:
        """Partial sums for one batch of wavelength fractions."""
        wavelengths = wavelength_from_fraction(fractions)
        scaled = field.scaled(wavelengths / REFERENCE_WAVELENGTH_NM)
        responses = curve.response(fractions)

        partial = Accumulator.zeros(field.height, field.width, device=field.intensity.device)
        partial.color[...] = torch.einsum("bc,bhw->hwc", responses, scaled)
        partial.weight[...] = len(fractions) * field.peak
        return partial

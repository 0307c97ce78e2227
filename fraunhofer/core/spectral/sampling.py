"""Wavelength sampling strategies for the spectral renderer."""

from __future__ import annotations

from enum import Enum

import torch
from torch import Tensor

from fraunhofer.errors import ConfigurationError


class SamplingMode(str, Enum):
    """How wavelength samples are placed across the visible range."""

    AUTO = "auto"
    """Single exposure for one sample, deterministic otherwise"""

    SINGLE_EXPOSURE = "single"
    """One sample covering the whole visible range"""

    DETERMINISTIC = "deterministic"
    """Sample t at fraction t / S"""

    JITTERED = "jittered"
    """Sample t uniformly inside [t / S, (t + 1) / S), seeded per sample"""

    @classmethod
    def parse(cls, value: str | SamplingMode) -> SamplingMode:
        try:
            return cls(value)
        except ValueError as e:
            valid = ", ".join(mode.value for mode in cls)
            raise ConfigurationError(f"Unknown sampling mode {value!r}; expected one of: {valid}") from e

    def resolve(self, samples: int) -> SamplingMode:
        """Replace AUTO by the concrete mode used for ``samples`` samples."""
        if self is SamplingMode.AUTO:
            return SamplingMode.SINGLE_EXPOSURE if samples == 1 else SamplingMode.DETERMINISTIC
        return self


def sample_seeds(samples: int, seed: int = 0) -> list[int]:
    """Per-sample seeds: the sample index offset by the base seed."""
    return [seed + t for t in range(samples)]


def wavelength_fractions(
    samples: int, mode: SamplingMode | str = SamplingMode.DETERMINISTIC, seed: int = 0
) -> Tensor:
    """Normalized wavelengths visited by a render.

    Parameters
    ----------
    samples : int
        Sample count S >= 1.
    mode : SamplingMode or str
        Placement strategy. AUTO is resolved against ``samples``.
    seed : int, default=0
        Base seed. Only the jittered mode draws from it.

    Returns
    -------
    Tensor
        float64 tensor of shape ``[S]`` with values in [0, 1). The single
        exposure yields ``[0.5]``, the centre of the range.

    Raises
    ------
    ConfigurationError
        If ``samples`` < 1.

    Examples
    --------
    >>> wavelength_fractions(4).tolist()
    [0.0, 0.25, 0.5, 0.75]
    """
    if isinstance(samples, bool) or not isinstance(samples, int) or samples < 1:
        raise ConfigurationError(f"Sample count must be a positive integer, got {samples!r}")

    mode = SamplingMode.parse(mode).resolve(samples)

    if mode is SamplingMode.SINGLE_EXPOSURE:
        return torch.tensor([0.5], dtype=torch.float64)

    strata = torch.arange(samples, dtype=torch.float64)
    if mode is SamplingMode.DETERMINISTIC:
        return strata / samples

    offsets = torch.empty(samples, dtype=torch.float64)
    for t, sample_seed in enumerate(sample_seeds(samples, seed)):
        generator = torch.Generator().manual_seed(sample_seed)
        offsets[t] = torch.rand(1, generator=generator, dtype=torch.float64)[0]
    return (strata + offsets) / samples

"""Unit tests for wavelength sampling strategies."""

from __future__ import annotations

import pytest
import torch

from fraunhofer.core.spectral.sampling import SamplingMode, sample_seeds, wavelength_fractions
from fraunhofer.errors import ConfigurationError


class TestDeterministic:
    """Stratified t / S placement."""

    def test_four_samples(self):
        fractions = wavelength_fractions(4, SamplingMode.DETERMINISTIC)
        assert fractions.tolist() == [0.0, 0.25, 0.5, 0.75]

    def test_no_duplicates_or_gaps(self):
        fractions = wavelength_fractions(64, "deterministic")
        assert len(set(fractions.tolist())) == 64
        assert torch.equal(fractions * 64, torch.arange(64, dtype=torch.float64))

    def test_single_deterministic_sample(self):
        assert wavelength_fractions(1, "deterministic").tolist() == [0.0]


class TestAuto:
    """AUTO resolution."""

    def test_one_sample_is_single_exposure(self):
        assert SamplingMode.AUTO.resolve(1) is SamplingMode.SINGLE_EXPOSURE
        assert wavelength_fractions(1, "auto").tolist() == [0.5]

    def test_many_samples_are_deterministic(self):
        assert SamplingMode.AUTO.resolve(3) is SamplingMode.DETERMINISTIC
        assert wavelength_fractions(4, "auto").tolist() == [0.0, 0.25, 0.5, 0.75]

    def test_explicit_mode_kept(self):
        assert SamplingMode.JITTERED.resolve(1) is SamplingMode.JITTERED


class TestJittered:
    """Seeded jitter inside each stratum."""

    def test_reproducible(self):
        first = wavelength_fractions(8, "jittered", seed=7)
        second = wavelength_fractions(8, "jittered", seed=7)
        assert torch.equal(first, second)

    def test_each_sample_in_its_stratum(self):
        fractions = wavelength_fractions(8, "jittered", seed=3)
        strata = torch.floor(fractions * 8)
        assert torch.equal(strata, torch.arange(8, dtype=torch.float64))

    def test_seed_changes_offsets(self):
        assert not torch.equal(
            wavelength_fractions(8, "jittered", seed=0),
            wavelength_fractions(8, "jittered", seed=100),
        )

    def test_sample_seeds(self):
        assert sample_seeds(3, seed=10) == [10, 11, 12]


class TestErrors:
    """Rejected arguments."""

    @pytest.mark.parametrize("samples", [0, -3])
    def test_non_positive_samples(self, samples):
        with pytest.raises(ConfigurationError):
            wavelength_fractions(samples)

    def test_unknown_mode(self):
        with pytest.raises(ConfigurationError, match="sampling mode"):
            wavelength_fractions(4, "random")

"""
End-to-end tests of DiffractionPipeline: aperture file in, Radiance file out.
"""

from __future__ import annotations

import numpy as np
import pytest
import torch

from fraunhofer.config.base import DeviceConfig, DiffractionConfig, FraunhoferConfig, RenderConfig
from fraunhofer.core.pipeline import DiffractionPipeline
from fraunhofer.errors import ConfigurationError, DeviceSelectionError, InputFormatError
from fraunhofer.io.radiance import read_radiance


class TestPipelineRun:
    """Successful renders."""

    def test_circular_aperture(self, write_ppm, circular_rgb, render_config, temp_output_dir):
        output = temp_output_dir / "psf.hdr"
        result = DiffractionPipeline(render_config).run(write_ppm(circular_rgb), output, 4)

        assert output.exists()
        image = read_radiance(output)
        assert (image.height, image.width) == (16, 16)
        assert image.pixel_format == "32-bit_rle_rgbe"
        assert torch.equal(image.pixels, result.image.pixels)

        # The zero-frequency pixel is lit
        cy, cx = result.diffraction.center
        assert image.pixels[cy, cx, 3].item() > 0
        assert result.sampling == "deterministic"

    def test_uniform_mask_dc(self, write_ppm, render_config, temp_output_dir):
        result = DiffractionPipeline(render_config).run(
            write_ppm(np.full((4, 4, 3), 255)), temp_output_dir / "uniform.hdr", 1
        )
        assert result.diffraction.dc == 256.0
        assert result.sampling == "single"

    def test_reruns_are_byte_identical(self, write_ppm, circular_rgb, render_config, temp_output_dir):
        aperture = write_ppm(circular_rgb)
        first = temp_output_dir / "first.hdr"
        second = temp_output_dir / "second.hdr"

        DiffractionPipeline(render_config).run(aperture, first, 8)
        DiffractionPipeline(render_config).run(aperture, second, 8)

        assert first.read_bytes() == second.read_bytes()

    def test_black_aperture_gives_black_image(self, write_ppm, render_config, temp_output_dir):
        output = temp_output_dir / "black.hdr"
        result = DiffractionPipeline(render_config).run(write_ppm(np.zeros((8, 8, 3))), output, 3)

        assert torch.count_nonzero(result.diffraction.intensity) == 0
        assert torch.count_nonzero(result.accumulator.data) == 0
        pixels = read_radiance(output).pixels
        assert torch.count_nonzero(pixels) == 0

    def test_xyz_output(self, write_ppm, circular_rgb, temp_output_dir):
        config = FraunhoferConfig(
            diffraction=DiffractionConfig(lens_distance=2.0, threshold=0.5),
            render=RenderConfig(color_system="none", tone_map="linear", sampling="jittered", seed=4),
        )
        output = temp_output_dir / "xyz.hdr"
        DiffractionPipeline(config).run(write_ppm(circular_rgb), output, 6)
        assert read_radiance(output).pixel_format == "32-bit_rle_xyze"

    def test_records_stage_timings(self, write_ppm, circular_rgb, render_config, temp_output_dir):
        result = DiffractionPipeline(render_config).run(
            write_ppm(circular_rgb), temp_output_dir / "t.hdr", 2
        )
        assert set(result.timings) == {"setup", "load", "fft", "normalize", "render", "encode", "write"}
        assert result.elapsed_time >= 0
        assert result.device == torch.device("cpu")


class TestPipelineErrors:
    """Fatal errors stop the run before any output is written."""

    def test_missing_lens_distance(self, write_ppm, circular_rgb, temp_output_dir):
        output = temp_output_dir / "never.hdr"
        with pytest.raises(ConfigurationError, match="lens_distance"):
            DiffractionPipeline(FraunhoferConfig()).run(write_ppm(circular_rgb), output, 4)
        assert not output.exists()

    def test_zero_samples(self, write_ppm, circular_rgb, render_config, temp_output_dir):
        with pytest.raises(ConfigurationError, match="Sample count"):
            DiffractionPipeline(render_config).run(write_ppm(circular_rgb), temp_output_dir / "x.hdr", 0)

    def test_non_power_of_two(self, write_ppm, render_config, temp_output_dir):
        output = temp_output_dir / "never.hdr"
        with pytest.raises(InputFormatError):
            DiffractionPipeline(render_config).run(write_ppm(np.zeros((6, 8, 3))), output, 1)
        assert not output.exists()

    def test_bad_device(self, write_ppm, circular_rgb, temp_output_dir):
        config = FraunhoferConfig(
            device=DeviceConfig(platform=42), diffraction=DiffractionConfig(lens_distance=1.0)
        )
        with pytest.raises(DeviceSelectionError):
            DiffractionPipeline(config).run(write_ppm(circular_rgb), temp_output_dir / "x.hdr", 1)

"""Shared test fixtures for fraunhofer tests."""

from __future__ import annotations

import numpy as np
import pytest
import torch

from fraunhofer.config.base import DiffractionConfig, FraunhoferConfig


def ppm_bytes(rgb: np.ndarray, magic: str = "P6", maxval: int = 255, comment: str | None = None) -> bytes:
    """Serialize an ``[height, width, 3]`` integer array as a PPM file."""
    height, width, _ = rgb.shape
    header = f"{magic}\n"
    if comment is not None:
        header += f"# {comment}\n"
    header += f"{width} {height}\n{maxval}\n"

    if magic == "P3":
        body = "\n".join(" ".join(str(int(v)) for v in row.reshape(-1)) for row in rgb)
        return (header + body + "\n").encode("ascii")

    dtype = np.uint8 if maxval < 256 else ">u2"
    return header.encode("ascii") + rgb.astype(dtype).tobytes()


@pytest.fixture
def write_ppm(tmp_path):
    """Factory writing a PPM file into tmp_path and returning its path."""

    def _write(rgb: np.ndarray, name: str = "aperture.ppm", **kwargs) -> object:
        path = tmp_path / name
        path.write_bytes(ppm_bytes(rgb, **kwargs))
        return path

    return _write


@pytest.fixture
def circular_rgb():
    """16x16 white disc on black, 8-bit."""
    size = 16
    yy, xx = np.mgrid[:size, :size]
    disc = (yy - size / 2) ** 2 + (xx - size / 2) ** 2 <= (size / 4) ** 2
    rgb = np.zeros((size, size, 3), dtype=np.int64)
    rgb[disc] = 255
    return rgb


@pytest.fixture
def uniform_mask():
    """4x4 complex mask of ones."""
    return torch.ones(4, 4, dtype=torch.complex128)


@pytest.fixture
def render_config():
    """Valid configuration with unit lens distance on the CPU."""
    return FraunhoferConfig(diffraction=DiffractionConfig(lens_distance=1.0))


@pytest.fixture
def temp_output_dir(tmp_path):
    """Create temporary output directory for test artifacts."""
    output_dir = tmp_path / "test_output"
    output_dir.mkdir(exist_ok=True)
    return output_dir


@pytest.fixture
def make_ppm():
    """The PPM serializer, for tests that parse bytes directly."""
    return ppm_bytes

"""Unit tests for Radiance RGBE encoding."""

from __future__ import annotations

import pytest
import torch

from fraunhofer.core.spectral.renderer import Accumulator
from fraunhofer.errors import ConfigurationError, InputFormatError
from fraunhofer.io.radiance import (
    RadianceEncoder,
    RadianceImage,
    apply_tone_map,
    decode_pixels,
    encode_pixels,
    read_radiance,
    write_radiance,
)


def encode_one(*channels: float) -> list[int]:
    return encode_pixels(torch.tensor([channels], dtype=torch.float64))[0].tolist()


class TestEncodePixels:
    """Shared-exponent encoding of single pixels."""

    def test_zero_pixel(self):
        assert encode_one(0.0, 0.0, 0.0) == [0, 0, 0, 0]

    def test_negative_pixel(self):
        assert encode_one(-1.0, -2.0, -3.0) == [0, 0, 0, 0]

    def test_fractional_value(self):
        # ceil(log2(0.75)) = 0 -> exponent 128, mantissa floor(256 * 0.75)
        assert encode_one(0.75, 0.0, 0.0) == [192, 0, 0, 128]

    def test_power_of_two_clamps_mantissa(self):
        assert encode_one(1.0, 0.5, 0.25) == [255, 128, 64, 128]

    def test_larger_value(self):
        # ceil(log2(3)) = 2 -> exponent 130, mantissa floor(256 * 3 / 4)
        assert encode_one(3.0, 1.0, 0.0) == [192, 64, 0, 130]

    def test_overflow_saturates(self):
        assert encode_one(1e100, 1e100, 1e100) == [255, 255, 255, 255]

    def test_underflow_is_zero(self):
        assert encode_one(1e-50, 0.0, 0.0) == [0, 0, 0, 0]

    def test_nan_is_zero(self):
        assert encode_one(float("nan"), float("nan"), float("nan")) == [0, 0, 0, 0]

    def test_dtype_and_shape(self):
        pixels = encode_pixels(torch.rand(4, 8, 3, dtype=torch.float64))
        assert pixels.dtype == torch.uint8
        assert pixels.shape == (4, 8, 4)


class TestDecodePixels:
    def test_zero_exponent_is_black(self):
        assert decode_pixels(torch.tensor([[10, 20, 30, 0]], dtype=torch.uint8)).tolist() == [[0.0, 0.0, 0.0]]

    def test_bin_centre(self):
        decoded = decode_pixels(torch.tensor([[192, 0, 0, 128]], dtype=torch.uint8))[0]
        assert decoded[0].item() == pytest.approx(192.5 / 256)
        assert decoded[1].item() == pytest.approx(0.5 / 256)

    def test_relative_error_bounded(self):
        values = torch.rand(16, 16, 3, dtype=torch.float64) * 100 + 0.01
        decoded = decode_pixels(encode_pixels(values))
        peak = values.max(dim=-1, keepdim=True).values
        assert ((decoded - values).abs() / peak).max() < 1 / 128


class TestToneMap:
    def test_sqrt(self):
        assert apply_tone_map(torch.tensor([4.0, 0.25]), "sqrt").tolist() == [2.0, 0.5]

    def test_linear(self):
        assert apply_tone_map(torch.tensor([4.0, -1.0]), "linear").tolist() == [4.0, 0.0]

    def test_unknown(self):
        with pytest.raises(ConfigurationError):
            apply_tone_map(torch.ones(1), "gamma")


class TestRadianceEncoder:
    def test_rgbe_format_tag(self):
        assert RadianceEncoder("cie").pixel_format == "32-bit_rle_rgbe"

    def test_xyze_without_transform(self):
        assert RadianceEncoder("none").pixel_format == "32-bit_rle_xyze"

    def test_zero_accumulator_is_black(self):
        image = RadianceEncoder().encode(Accumulator.zeros(4, 4))
        assert torch.count_nonzero(image.pixels) == 0
        assert image.pixels.shape == (4, 4, 4)

    def test_xyz_passthrough(self):
        xyz = torch.tensor([[[4.0, 1.0, 0.25]]], dtype=torch.float64)
        image = RadianceEncoder("none", tone_map="sqrt").encode(xyz)
        # sqrt -> (2, 1, 0.5); exponent 129
        assert image.pixels[0, 0].tolist() == [255, 128, 64, 129]

    def test_unknown_tone_map(self):
        with pytest.raises(ConfigurationError):
            RadianceEncoder(tone_map="gamma")

    def test_unknown_color_system(self):
        with pytest.raises(ConfigurationError):
            RadianceEncoder(color_system="p3")


class TestRadianceFile:
    def test_header_layout(self):
        image = RadianceImage(torch.zeros(2, 4, 4, dtype=torch.uint8))
        assert image.header() == (
            b"#?RADIANCE\nSOFTWARE=fraunhofer\nFORMAT=32-bit_rle_rgbe\n\n-Y 2 +X 4\n"
        )
        assert len(image.to_bytes()) == len(image.header()) + 2 * 4 * 4

    def test_pixels_row_major(self):
        pixels = torch.arange(2 * 2 * 4, dtype=torch.uint8).reshape(2, 2, 4)
        payload = RadianceImage(pixels).to_bytes()
        assert payload[-16:] == bytes(range(16))

    def test_write_and_read(self, tmp_path):
        pixels = torch.randint(0, 256, (4, 8, 4), dtype=torch.uint8)
        path = write_radiance(tmp_path / "out" / "image.hdr", RadianceImage(pixels, "32-bit_rle_xyze"))
        image = read_radiance(path)
        assert image.pixel_format == "32-bit_rle_xyze"
        assert (image.height, image.width) == (4, 8)
        assert torch.equal(image.pixels, pixels)

    def test_read_garbage(self, tmp_path):
        path = tmp_path / "bad.hdr"
        path.write_bytes(b"not an image")
        with pytest.raises(InputFormatError):
            read_radiance(path)

    def test_read_truncated(self, tmp_path):
        path = tmp_path / "short.hdr"
        image = RadianceImage(torch.ones(4, 4, 4, dtype=torch.uint8))
        path.write_bytes(image.to_bytes()[:-3])
        with pytest.raises(InputFormatError, match="Truncated"):
            read_radiance(path)

    def test_decode_image(self):
        image = RadianceImage(torch.tensor([[[192, 0, 0, 128]]], dtype=torch.uint8))
        assert image.decode().shape == (1, 1, 3)
        assert image.decode()[0, 0, 0].item() == pytest.approx(192.5 / 256)

"""Radiance HDR output."""

from __future__ import annotations

from fraunhofer.io.radiance import (
    RadianceEncoder,
    RadianceImage,
    decode_pixels,
    encode_pixels,
    read_radiance,
    write_radiance,
)


__all__ = [
    "RadianceEncoder",
    "RadianceImage",
    "decode_pixels",
    "encode_pixels",
    "read_radiance",
    "write_radiance",
]

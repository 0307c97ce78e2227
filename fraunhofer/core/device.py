"""Compute platform discovery and device selection.

Platforms are numbered the way the command line addresses them: platform 0 is
the host CPU (always present), platform 1 is CUDA when torch reports it
available. MPS is not offered because it lacks float64 and complex128 support.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import torch
from loguru import logger

from fraunhofer.errors import DeviceSelectionError


@dataclass(frozen=True)
class Platform:
    """A compute platform and its device names."""

    name: str
    kind: str
    devices: List[str] = field(default_factory=list)

    def device(self, index: int) -> torch.device:
        if self.kind == "cpu":
            return torch.device("cpu")
        return torch.device(self.kind, index)


def list_platforms() -> List[Platform]:
    """Available platforms in selection order."""
    platforms = [Platform("CPU", "cpu", ["cpu"])]

    if torch.cuda.is_available():
        names = [torch.cuda.get_device_name(i) for i in range(torch.cuda.device_count())]
        platforms.append(Platform("CUDA", "cuda", names))

    return platforms


def select_device(platform: int = 0, device: int = 0) -> torch.device:
    """Resolve a (platform, device) index pair to a torch device.

    Args:
        platform: Index into :func:`list_platforms`
        device: Device index within the platform

    Returns:
        The selected torch.device

    Raises:
        DeviceSelectionError: If either index is out of range
    """
    platforms = list_platforms()
    if not 0 <= platform < len(platforms):
        raise DeviceSelectionError(
            f"Platform index {platform} out of range; {len(platforms)} platform(s) available"
        )

    selected = platforms[platform]
    if not 0 <= device < len(selected.devices):
        raise DeviceSelectionError(
            f"Device index {device} out of range for platform {selected.name}; "
            f"{len(selected.devices)} device(s) available"
        )

    logger.info(f"Device: {selected.name} ({selected.devices[device]})")
    return selected.device(device)

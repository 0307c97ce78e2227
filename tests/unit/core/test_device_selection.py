"""Unit tests for compute device selection."""

from __future__ import annotations

import pytest
import torch

from fraunhofer.core import device as device_module
from fraunhofer.core.device import list_platforms, select_device
from fraunhofer.errors import DeviceSelectionError


class TestListPlatforms:
    def test_cpu_always_first(self):
        platforms = list_platforms()
        assert platforms[0].name == "CPU"
        assert platforms[0].devices == ["cpu"]

    def test_no_cuda_platform_without_cuda(self, monkeypatch):
        monkeypatch.setattr(device_module.torch.cuda, "is_available", lambda: False)
        assert [p.name for p in list_platforms()] == ["CPU"]


class TestSelectDevice:
    def test_cpu(self):
        assert select_device(0, 0) == torch.device("cpu")

    @pytest.mark.parametrize("platform", [5, 99, -1])
    def test_platform_out_of_range(self, platform):
        with pytest.raises(DeviceSelectionError, match="Platform index"):
            select_device(platform, 0)

    def test_device_out_of_range(self):
        with pytest.raises(DeviceSelectionError, match="Device index"):
            select_device(0, 1)

    def test_cuda_when_available(self):
        if not torch.cuda.is_available():
            pytest.skip("CUDA not available")
        assert select_device(1, 0) == torch.device("cuda", 0)

"""Configuration dataclasses for fraunhofer runs."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional

from fraunhofer.config.validation import ConfigValidator


@dataclass
class DeviceConfig:
    """Compute device selection.

    Platform indices follow :func:`fraunhofer.core.device.list_platforms`:
    0 is the CPU, 1 is CUDA when torch reports it available.
    """

    platform: int = 0
    """Compute platform index"""

    device: int = 0
    """Device index within the platform"""


@dataclass
class DiffractionConfig:
    """Aperture thresholding and diffraction spread parameters."""

    lens_distance: Optional[float] = None
    """Lens distance controlling the diffraction spread. Required, > 0"""

    threshold: float = 1.0
    """Aperture threshold in [0, 1]. 1.0 keeps the continuous luminance mask"""


@dataclass
class RenderConfig:
    """Spectral rendering and output encoding parameters."""

    sampling: str = "auto"
    """Sampling mode: auto, single, deterministic or jittered"""

    seed: int = 0
    """Base seed; sample t uses seed + t (only the jittered mode draws from it)"""

    batch_size: int = 16
    """Number of wavelength samples integrated per vectorized batch"""

    color_system: str = "cie"
    """Colour system for the XYZ to RGB transform, or 'none' to keep XYZ"""

    tone_map: str = "sqrt"
    """Tone map applied to the normalized radiance before encoding"""

    def __post_init__(self) -> None:
        """Option names are case-insensitive; store them lowercase."""
        for name in ("sampling", "color_system", "tone_map"):
            value = getattr(self, name)
            if isinstance(value, str):
                setattr(self, name, value.lower())


@dataclass
class FraunhoferConfig:
    """Master configuration for a diffraction render."""

    name: Optional[str] = None
    """Run name used in log messages"""

    device: DeviceConfig = field(default_factory=DeviceConfig)
    """Compute device selection"""

    diffraction: DiffractionConfig = field(default_factory=DiffractionConfig)
    """Aperture and diffraction parameters"""

    render: RenderConfig = field(default_factory=RenderConfig)
    """Rendering and encoding parameters"""

    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return asdict(self)

    def validate(self) -> None:
        """Validate configuration parameters.

        Raises:
            ValidationError: If configuration is invalid, with a message
                describing the accepted values
        """
        # =====================================================================
        # Device Configuration Validation
        # =====================================================================
        ConfigValidator.validate_non_negative(self.device.platform, "device.platform", integer=True)
        ConfigValidator.validate_non_negative(self.device.device, "device.device", integer=True)

        # =====================================================================
        # Diffraction Configuration Validation
        # =====================================================================
        ConfigValidator.validate_lens_distance(self.diffraction.lens_distance)
        ConfigValidator.validate_in_range(
            self.diffraction.threshold,
            "diffraction.threshold",
            min_val=0.0,
            max_val=1.0,
            typical_values="1.0 (continuous) or 0.5 (binary)",
        )

        # =====================================================================
        # Render Configuration Validation
        # =====================================================================
        ConfigValidator.validate_sampling(self.render.sampling)
        ConfigValidator.validate_color_system(self.render.color_system)
        ConfigValidator.validate_tone_map(self.render.tone_map)
        ConfigValidator.validate_positive(
            self.render.batch_size, "render.batch_size", typical_values="8-64", integer=True
        )
        ConfigValidator.validate_non_negative(self.render.seed, "render.seed", integer=True)

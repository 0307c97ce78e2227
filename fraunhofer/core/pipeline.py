"""
End-to-end diffraction rendering pipeline.

:class:`DiffractionPipeline` follows a fixed stage order. Every stage hands an
immutable product to the next one:

1. setup() - validate configuration and sample count, select the device
2. load_data() - read the aperture mask
3. create_components() - build the FFT, normalizer, renderer and encoder
4. render() - FFT, normalization, spectral integration and encoding
5. save_results() - write the Radiance file

Configuration, input and device errors are raised from steps 1-2, before any
grid is allocated on the compute device.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, Optional

import torch
from loguru import logger
from torch import Tensor

from fraunhofer.config.base import FraunhoferConfig
from fraunhofer.core.device import select_device
from fraunhofer.core.fft import FFTEngine
from fraunhofer.core.optics.aperture import ApertureMask, load_aperture
from fraunhofer.core.optics.diffraction import DiffractionField, DiffractionNormalizer
from fraunhofer.core.spectral.renderer import Accumulator, SpectralRenderer
from fraunhofer.core.spectral.sampling import SamplingMode
from fraunhofer.errors import ConfigurationError
from fraunhofer.io.radiance import RadianceEncoder, RadianceImage, write_radiance
from fraunhofer.types import PathLike, SpectralStage


@dataclass
class RenderResult:
    """Products of a pipeline run.

    Parameters
    ----------
    output_path : Path
        Written Radiance file
    samples : int
        Number of wavelength samples requested
    sampling : str
        Concrete sampling mode used (auto resolved)
    aperture : ApertureMask
        Input mask
    spectrum : Tensor
        Forward FFT of the mask
    diffraction : DiffractionField
        Normalized diffraction intensity
    accumulator : Accumulator
        Spectral sums before finalization
    image : RadianceImage
        Encoded output
    device : torch.device
        Compute device
    timings : dict[str, float]
        Wall time in seconds per stage
    """

    output_path: Path
    samples: int
    sampling: str
    aperture: ApertureMask
    spectrum: Tensor
    diffraction: DiffractionField
    accumulator: Accumulator
    image: RadianceImage
    device: torch.device
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def elapsed_time(self) -> float:
        return sum(self.timings.values())


class DiffractionPipeline:
    """Render the diffraction pattern of an aperture file.

    Parameters
    ----------
    config : FraunhoferConfig
        Run configuration.
    renderer : SpectralStage, optional
        Replacement spectral stage; by default a :class:`SpectralRenderer`
        built from ``config.render``.

    Examples
    --------
    >>> config = FraunhoferConfig(diffraction=DiffractionConfig(lens_distance=1.0))
    >>> result = DiffractionPipeline(config).run("aperture.ppm", "psf.hdr", samples=16)
    >>> result.image.pixel_format
    '32-bit_rle_rgbe'
    """

    def __init__(self, config: FraunhoferConfig, renderer: Optional[SpectralStage] = None) -> None:
        self.config = config
        self.device: Optional[torch.device] = None
        self.aperture: Optional[ApertureMask] = None
        self.fft: Optional[FFTEngine] = None
        self.normalizer: Optional[DiffractionNormalizer] = None
        self.renderer: Optional[SpectralStage] = renderer
        self.encoder: Optional[RadianceEncoder] = None
        self.timings: Dict[str, float] = {}

    def run(self, input_path: PathLike, output_path: PathLike, samples: int) -> RenderResult:
        """Execute all stages in order.

        Raises
        ------
        ConfigurationError
            Invalid configuration or sample count
        InputFormatError
            Unusable aperture file
        DeviceSelectionError
            Unknown platform or device index
        """
        self.timings = {}
        name = self.config.name or Path(input_path).stem
        logger.info(f"Starting render '{name}' with {samples} sample(s)")

        self.setup(samples)
        self.load_data(input_path)
        self.create_components()
        result = self.render(Path(output_path), samples)
        self.save_results(result)

        logger.info(f"Finished render '{name}' in {result.elapsed_time:.3f}s")
        return result

    @contextmanager
    def _stage(self, name: str) -> Iterator[None]:
        start = time.perf_counter()
        yield
        self.timings[name] = time.perf_counter() - start
        logger.debug(f"Stage {name} took {self.timings[name]:.4f}s")

    def setup(self, samples: int) -> None:
        """Validate configuration and pick the compute device."""
        with self._stage("setup"):
            self.config.validate()
            if isinstance(samples, bool) or not isinstance(samples, int) or samples < 1:
                raise ConfigurationError(f"Sample count must be a positive integer, got {samples!r}")
            self.device = select_device(self.config.device.platform, self.config.device.device)

    def load_data(self, input_path: PathLike) -> None:
        """Read the aperture and move it to the compute device."""
        with self._stage("load"):
            mask = load_aperture(input_path, self.config.diffraction.threshold)
            self.aperture = mask.to(self.device)

    def create_components(self) -> None:
        render = self.config.render
        self.fft = FFTEngine("forward")
        self.normalizer = DiffractionNormalizer(self.config.diffraction.lens_distance)
        if self.renderer is None:
            self.renderer = SpectralRenderer(
                mode=render.sampling, seed=render.seed, batch_size=render.batch_size
            )
        self.encoder = RadianceEncoder(color_system=render.color_system, tone_map=render.tone_map)

    def render(self, output_path: Path, samples: int) -> RenderResult:
        """Run the compute stages and encode the image."""
        with self._stage("fft"):
            spectrum = self.fft.transform(self.aperture)
        with self._stage("normalize"):
            diffraction = self.normalizer.normalize(spectrum)
        with self._stage("render"):
            accumulator = self.renderer.render(diffraction, samples)
        with self._stage("encode"):
            image = self.encoder.encode(accumulator)

        return RenderResult(
            output_path=output_path,
            samples=samples,
            sampling=SamplingMode.parse(self.config.render.sampling).resolve(samples).value,
            aperture=self.aperture,
            spectrum=spectrum,
            diffraction=diffraction,
            accumulator=accumulator,
            image=image,
            device=self.device,
            timings=self.timings,
        )

    def save_results(self, result: RenderResult) -> None:
        with self._stage("write"):
            write_radiance(result.output_path, result.image)

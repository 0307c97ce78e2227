"""
fraunhofer - spectral diffraction rendering of lens apertures.

Usage
-----
Render a 16-sample point-spread function:
    python main.py aperture.ppm psf.hdr 16 --lens-distance 2.0

With a configuration file:
    python main.py aperture.ppm psf.hdr 16 --config config.yaml

For full usage options:
    python main.py --help
    python main.py --help-sampling
    python main.py --help-color
"""

import sys

from fraunhofer.cli.entry_points import main


if __name__ == "__main__":
    sys.exit(main())

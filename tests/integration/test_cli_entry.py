"""
CLI integration tests for the fraunhofer command.

Exit codes: 0 success, 2 usage, 3 input format, 4 device selection, 5 configuration.
"""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import numpy as np
import pytest
import yaml

from fraunhofer.cli.entry_points import main
from fraunhofer.io.radiance import read_radiance
from fraunhofer.utils.logging_config import setup_logging


REPO_ROOT = Path(__file__).resolve().parents[2]


@pytest.fixture
def aperture(write_ppm, circular_rgb):
    return write_ppm(circular_rgb)


class TestMain:
    """In-process invocation of main()."""

    def test_success(self, aperture, temp_output_dir):
        output = temp_output_dir / "psf.hdr"
        code = main([str(aperture), str(output), "4", "--lens-distance", "1.0", "--quiet"])
        assert code == 0
        assert read_radiance(output).width == 16

    def test_summary_table(self, aperture, temp_output_dir, capsys):
        code = main([str(aperture), str(temp_output_dir / "psf.hdr"), "2", "--lens-distance", "1"])
        assert code == 0
        assert "Render Summary" in capsys.readouterr().out

    def test_config_file_with_override(self, aperture, temp_output_dir, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("diffraction:\n  lens_distance: 0\nrender:\n  color_system: none\n")
        output = temp_output_dir / "psf.hdr"

        code = main(
            [str(aperture), str(output), "2", "--config", str(config), "--lens-distance", "1.5", "--quiet"]
        )

        assert code == 0
        assert read_radiance(output).pixel_format == "32-bit_rle_xyze"

    def test_missing_lens_distance(self, aperture, temp_output_dir):
        assert main([str(aperture), str(temp_output_dir / "x.hdr"), "1", "--quiet"]) == 5

    def test_missing_config_file(self, aperture, temp_output_dir, tmp_path):
        code = main(
            [str(aperture), str(temp_output_dir / "x.hdr"), "1", "--config", str(tmp_path / "none.yaml")]
        )
        assert code == 5

    @pytest.mark.parametrize(
        "section,key,value",
        [
            ("diffraction", "lens_distance", "abc"),
            ("diffraction", "threshold", "0.5"),
            ("device", "platform", "x"),
            ("render", "batch_size", 2.5),
        ],
    )
    def test_mistyped_config_value(self, aperture, temp_output_dir, tmp_path, section, key, value):
        config = tmp_path / "config.yaml"
        data = {"diffraction": {"lens_distance": 1.0}}
        data.setdefault(section, {})[key] = value
        config.write_text(yaml.safe_dump(data))

        code = main(
            [str(aperture), str(temp_output_dir / "x.hdr"), "1", "--config", str(config), "--quiet"]
        )

        assert code == 5
        assert not (temp_output_dir / "x.hdr").exists()

    def test_config_option_names_ignore_case(self, aperture, temp_output_dir, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text(
            "diffraction:\n  lens_distance: 1.0\nrender:\n  color_system: CIE\n  sampling: Deterministic\n"
        )
        output = temp_output_dir / "psf.hdr"

        code = main([str(aperture), str(output), "2", "--config", str(config), "--quiet"])

        assert code == 0
        assert read_radiance(output).pixel_format == "32-bit_rle_rgbe"

    def test_log_format_flags(self, aperture, temp_output_dir, tmp_path):
        log_file = tmp_path / "run.log"
        code = main(
            [
                str(aperture),
                str(temp_output_dir / "psf.hdr"),
                "1",
                "--lens-distance",
                "1",
                "--log-level",
                "INFO",
                "--log-file",
                str(log_file),
                "--no-log-time",
                "--no-log-level",
            ]
        )

        assert code == 0
        setup_logging()
        text = log_file.read_text()
        assert "Starting render" in text
        assert "INFO" not in text

    def test_bad_aperture(self, write_ppm, temp_output_dir):
        bad = write_ppm(np.zeros((3, 4, 3)), name="bad.ppm")
        code = main([str(bad), str(temp_output_dir / "x.hdr"), "1", "--lens-distance", "1", "--quiet"])
        assert code == 3

    def test_missing_aperture(self, tmp_path, temp_output_dir):
        code = main(
            [str(tmp_path / "nope.ppm"), str(temp_output_dir / "x.hdr"), "1", "--lens-distance", "1"]
        )
        assert code == 3

    def test_bad_platform(self, aperture, temp_output_dir):
        code = main(
            [str(aperture), str(temp_output_dir / "x.hdr"), "1", "--lens-distance", "1", "--platform", "42"]
        )
        assert code == 4

    def test_missing_positionals(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["only-input.ppm"])
        assert exc_info.value.code == 2

    def test_list_devices(self, capsys):
        assert main(["--list-devices"]) == 0
        assert "CPU" in capsys.readouterr().out

    def test_help_topic(self, capsys):
        assert main(["--help-sampling"]) == 0
        assert "jittered" in capsys.readouterr().out


class TestMainScript:
    """Running main.py as a script."""

    def run_cli(self, *args, timeout=120):
        """Helper: Run main.py with args."""
        return subprocess.run(
            [sys.executable, "main.py", *args],
            capture_output=True,
            text=True,
            timeout=timeout,
            cwd=REPO_ROOT,
        )

    def test_exit_code_propagates(self, aperture, temp_output_dir):
        result = self.run_cli(str(aperture), str(temp_output_dir / "x.hdr"), "1")
        assert result.returncode == 5
        assert "lens_distance" in result.stderr

    def test_render(self, aperture, temp_output_dir):
        output = temp_output_dir / "script.hdr"
        result = self.run_cli(str(aperture), str(output), "2", "--lens-distance", "1", "--quiet")
        assert result.returncode == 0, result.stderr
        assert output.exists()

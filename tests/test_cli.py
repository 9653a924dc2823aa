"""
Tests for the rotimage command-line interface.
"""

import json
import os
import subprocess
import sys

import cv2
import pytest

from rotimage.cli import create_argument_parser, main
from rotimage.deskew.rotation import get_rotated_dimensions
from tests.fixtures.skew_fixtures import (
    create_skewed_lines,
    create_blank,
    write_image,
    write_corrupt_image,
)

PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))


def lines(angle):
    return create_skewed_lines(size=(200, 300), angle=angle, length=250)


class TestArgumentParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        """Test optional flags default values."""
        parsed = create_argument_parser().parse_args(["-i", "in.png", "-o", "out.png"])
        assert parsed.angle == 0.0
        assert parsed.recursive is False
        assert parsed.verbose is False
        assert parsed.detect is False
        assert parsed.reference is None
        assert parsed.config is None

    def test_short_reference_flag(self):
        """Test -ref is distinct from -r."""
        parsed = create_argument_parser().parse_args(
            ["-i", "in", "-o", "out", "-r", "-ref", "ref.png", "-a", "-2.5"]
        )
        assert parsed.recursive is True
        assert parsed.reference == "ref.png"
        assert parsed.angle == -2.5

    def test_input_and_output_required(self):
        """Test missing required arguments exit with a usage error."""
        with pytest.raises(SystemExit) as exc:
            create_argument_parser().parse_args(["-i", "in.png"])
        assert exc.value.code == 2

    @pytest.mark.parametrize("value", ["nan", "inf", "-inf"])
    def test_non_finite_angle_rejected(self, value):
        """Test nan and infinite angles are usage errors."""
        with pytest.raises(SystemExit) as exc:
            create_argument_parser().parse_args(["-i", "in.png", "-o", "out.png", "-a", value])
        assert exc.value.code == 2


class TestSingleFile:
    """Tests for single-file mode."""

    def test_explicit_angle(self, tmp_path):
        """Test explicit angle rotates and writes the output."""
        source = write_image(tmp_path / "in.png", lines(5.0))
        output = tmp_path / "out.png"

        assert main(["-i", str(source), "-o", str(output), "-a", "10"]) == 0

        written = cv2.imread(str(output))
        assert (written.shape[1], written.shape[0]) == get_rotated_dimensions(300, 200, 10.0)

    def test_auto_detect(self, tmp_path):
        """Test no angle detects the skew of the input."""
        source = write_image(tmp_path / "in.png", lines(5.0))
        output = tmp_path / "out.png"

        assert main(["-i", str(source), "-o", str(output)]) == 0
        assert output.exists()

    def test_auto_detect_without_signal(self, tmp_path):
        """Test an image without lines fails and writes nothing."""
        source = write_image(tmp_path / "in.png", create_blank())
        output = tmp_path / "out.png"

        assert main(["-i", str(source), "-o", str(output)]) == 1
        assert not output.exists()

    def test_angle_360(self, tmp_path):
        """Test 360 is processed rather than skipped."""
        source = write_image(tmp_path / "in.png", create_blank())
        output = tmp_path / "out.png"

        assert main(["-i", str(source), "-o", str(output), "-a", "360"]) == 0
        assert cv2.imread(str(output)).shape == (200, 300, 3)

    def test_missing_input(self, tmp_path):
        """Test an unreadable input fails."""
        assert main(["-i", str(tmp_path / "none.png"), "-o", str(tmp_path / "o.png"), "-a", "3"]) == 1

    def test_reference(self, tmp_path):
        """Test the reference angle is used for the single file."""
        reference = write_image(tmp_path / "ref.png", lines(-10.0))
        source = write_image(tmp_path / "in.png", create_blank())
        output = tmp_path / "out.png"

        assert main(["-i", str(source), "-o", str(output), "-ref", str(reference)]) == 0
        written = cv2.imread(str(output))
        assert written.shape[0] > 200

    def test_unreadable_reference(self, tmp_path, capsys):
        """Test reference decode failure exits 1 without fallback."""
        source = write_image(tmp_path / "in.png", lines(5.0))
        output = tmp_path / "out.png"

        code = main(["-i", str(source), "-o", str(output), "-a", "5", "-ref", str(tmp_path / "no.png")])

        assert code == 1
        assert not output.exists()
        assert "reference" in capsys.readouterr().err


class TestDirectory:
    """Tests for directory mode."""

    def test_creates_output_directory(self, tmp_path):
        """Test a missing output tree is created."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(5.0))
        output_dir = tmp_path / "deep" / "out"

        assert main(["-i", str(input_dir), "-o", str(output_dir), "-a", "3"]) == 0
        assert (output_dir / "a.png").exists()

    def test_output_directory_setup_failure(self, tmp_path):
        """Test an output path blocked by a file exits 1."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(5.0))
        blocker = tmp_path / "blocker"
        blocker.write_text("x")

        assert main(["-i", str(input_dir), "-o", str(blocker), "-a", "3"]) == 1

    def test_top_level_failure(self, tmp_path):
        """Test an unreadable top-level file exits 1."""
        input_dir = tmp_path / "in"
        write_corrupt_image(input_dir / "bad.png")

        assert main(["-i", str(input_dir), "-o", str(tmp_path / "out"), "-a", "3"]) == 1

    def test_recursive_subdirectory_failure_still_succeeds(self, tmp_path):
        """Test failures inside a recursive descent do not change the exit code."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(5.0))
        write_corrupt_image(input_dir / "sub" / "bad.png")
        output_dir = tmp_path / "out"

        assert main(["-i", str(input_dir), "-o", str(output_dir), "-a", "3", "-r"]) == 0
        assert (output_dir / "a.png").exists()

    def test_report(self, tmp_path):
        """Test --report writes the run result as JSON."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(5.0))
        write_corrupt_image(input_dir / "sub" / "bad.png")
        report = tmp_path / "reports" / "run.json"

        code = main([
            "-i", str(input_dir), "-o", str(tmp_path / "out"),
            "-a", "3", "-r", "--report", str(report),
        ])

        assert code == 0
        data = json.loads(report.read_text())
        assert data["status"] == "partial"
        assert data["processed"] == 1
        assert data["failed"] == 1
        assert data["angle_source"] == {"mode": "explicit", "angle": 3.0, "reference_path": None}

    def test_unwritable_report_keeps_exit_code(self, tmp_path, capsys):
        """Test a report write failure only warns."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(5.0))
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        output_dir = tmp_path / "out"

        code = main([
            "-i", str(input_dir), "-o", str(output_dir),
            "-a", "3", "--report", str(blocker / "run.json"),
        ])

        assert code == 0
        assert (output_dir / "a.png").exists()
        assert "Could not write report" in capsys.readouterr().err

    def test_detect_overrides_angle(self, tmp_path):
        """Test --detect estimates each file even with --angle."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(-10.0))
        report = tmp_path / "run.json"

        code = main([
            "-i", str(input_dir), "-o", str(tmp_path / "out"),
            "-a", "45", "-d", "--report", str(report),
        ])

        assert code == 0
        angle = json.loads(report.read_text())["results"][0]["angle"]
        assert angle == pytest.approx(-10.0, abs=1.0)

    def test_config_file(self, tmp_path):
        """Test a YAML config is applied."""
        input_dir = tmp_path / "in"
        write_image(input_dir / "a.png", lines(5.0))
        config = tmp_path / "config.yaml"
        config.write_text("deskew:\n  image_extensions: ['.jpg']\n")
        output_dir = tmp_path / "out"

        assert main(["-i", str(input_dir), "-o", str(output_dir), "-a", "3", "-c", str(config)]) == 0
        assert not (output_dir / "a.png").exists()

    def test_invalid_config_file(self, tmp_path, capsys):
        """Test an invalid config exits 1."""
        config = tmp_path / "config.yaml"
        config.write_text("estimator:\n  blur_kernel_size: 4\n")

        code = main(["-i", str(tmp_path), "-o", str(tmp_path / "out"), "-c", str(config)])

        assert code == 1
        assert "Invalid config" in capsys.readouterr().err


class TestModuleEntryPoint:
    """Tests for python -m rotimage."""

    def test_help_shows_usage(self):
        """Test that --help lists the flags."""
        result = subprocess.run(
            [sys.executable, "-m", "rotimage", "--help"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 0
        assert "--reference" in result.stdout
        assert "--recursive" in result.stdout

    def test_rotates_file(self, tmp_path):
        """Test a full run through the module entry point."""
        source = write_image(tmp_path / "in.png", lines(5.0))
        output = tmp_path / "out.png"

        result = subprocess.run(
            [sys.executable, "-m", "rotimage", "-i", str(source), "-o", str(output), "-a", "5", "-v"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 0
        assert output.exists()
        assert "saved to" in result.stderr

    def test_failure_exit_code(self, tmp_path):
        """Test failure exits 1 and reports on stderr."""
        result = subprocess.run(
            [sys.executable, "-m", "rotimage", "-i", str(tmp_path / "x.png"), "-o", str(tmp_path / "y.png"), "-a", "5"],
            capture_output=True,
            text=True,
            cwd=PROJECT_ROOT,
        )

        assert result.returncode == 1
        assert "Could not open or find the image" in result.stderr

"""
Command-line interface for rotimage.

Usage:
    python -m rotimage -i scan.png -o fixed.png [-a 2.5]
    python -m rotimage -i scans/ -o fixed/ [-r] [-ref reference.png]
    python -m rotimage --help
"""

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import List, Optional

import yaml

from . import __version__
from .config.deskew_config import DeskewConfig
from .deskew.batch import BatchProcessor
from .deskew.estimator import SkewEstimator
from .deskew.models import AngleSource, BatchResult
from .deskew.policy import resolve_angle_source
from .deskew.processor import DeskewProcessor
from .errors import DecodeError, OutputSetupError
from .image_io import ensure_directory

logger = logging.getLogger(__name__)


def finite_float(value: str) -> float:
    """Parse a float argument, rejecting nan and infinities."""
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid float value: {value!r}")
    if not math.isfinite(number):
        raise argparse.ArgumentTypeError(f"angle must be a finite number, got {value!r}")
    return number


def create_argument_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="rotimage",
        description="Rotate an image by an angle, or detect how far it is off level and correct it",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s -i scan.png -o fixed.png -a 2.5       Rotate by 2.5 degrees
  %(prog)s -i scan.png -o fixed.png              Detect the skew and correct it
  %(prog)s -i scans/ -o fixed/ -r                Detect per file, recursively
  %(prog)s -i scans/ -o fixed/ -ref first.png    Apply the skew of first.png to all
        """,
    )

    parser.add_argument(
        "-i", "--input",
        required=True,
        help="Input image file path or input directory path",
    )

    parser.add_argument(
        "-o", "--output",
        required=True,
        help="Output image file path or output directory path",
    )

    parser.add_argument(
        "-a", "--angle",
        type=finite_float,
        default=0.0,
        help="Rotation angle in degrees (default: 0.0, detect automatically)",
    )

    parser.add_argument(
        "-r", "--recursive",
        action="store_true",
        help="Recursively process all image files in subdirectories",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    parser.add_argument(
        "-d", "--detect",
        action="store_true",
        help="Detect the rotation angle of every image, even if --angle is given",
    )

    parser.add_argument(
        "-ref", "--reference",
        help="Reference image; its detected rotation angle is used for all other images",
    )

    parser.add_argument(
        "-c", "--config",
        help="YAML file with estimator and rotation settings",
    )

    parser.add_argument(
        "--report",
        help="Write the directory run result as JSON to this path",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser


def configure_logging(verbose: bool) -> None:
    """Route log records to stderr; INFO when verbose, otherwise WARNING."""
    log_level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
    )


def load_config(config_path: Optional[str]) -> DeskewConfig:
    """Load the run configuration, falling back to defaults."""
    if not config_path:
        return DeskewConfig.default()
    return DeskewConfig.from_yaml(config_path)


def save_report(result: BatchResult, source: AngleSource, report_path: str) -> str:
    """Write a batch result as JSON."""
    path = Path(report_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    report = result.to_dict()
    report["angle_source"] = source.to_dict()

    with open(path, "w") as f:
        json.dump(report, f, indent=2)

    return str(path)


def run_directory(
    parsed: argparse.Namespace,
    config: DeskewConfig,
    estimator: SkewEstimator,
    source: AngleSource,
) -> int:
    """Handle a directory input."""
    try:
        ensure_directory(parsed.output)
    except OutputSetupError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    batch = BatchProcessor(config=config, estimator=estimator)
    result = batch.process(
        parsed.input,
        parsed.output,
        source,
        recursive=parsed.recursive,
        verbose=parsed.verbose,
    )

    print("\nResults:")
    print(f"  Status: {result.status.value}")
    print(f"  Processed: {result.processed}")
    print(f"  Failed: {result.failed}")

    if parsed.report:
        try:
            report_path = save_report(result, source, parsed.report)
        except OSError as e:
            print(f"Warning: Could not write report: {e}", file=sys.stderr)
        else:
            print(f"\nReport saved to: {report_path}")

    return 0 if result.success else 1


def run_single(
    parsed: argparse.Namespace,
    config: DeskewConfig,
    estimator: SkewEstimator,
    source: AngleSource,
) -> int:
    """Handle a single file input."""
    processor = DeskewProcessor(config=config, estimator=estimator)
    result = processor.process_file(parsed.input, parsed.output, source)
    return 0 if result.success else 1


def main(args: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Args:
        args: Command line arguments (uses sys.argv if not provided)

    Returns:
        Exit code (0 for success)
    """
    parser = create_argument_parser()
    parsed = parser.parse_args(args)

    configure_logging(parsed.verbose)

    try:
        config = load_config(parsed.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        print(f"Error: Invalid config file {parsed.config}: {e}", file=sys.stderr)
        return 1

    estimator = SkewEstimator(config.estimator)

    try:
        source = resolve_angle_source(
            explicit_angle=parsed.angle,
            reference_path=parsed.reference,
            estimator=estimator,
            detect=parsed.detect,
        )
    except DecodeError as e:
        print(f"Error: Could not use reference image: {e}", file=sys.stderr)
        return 1

    logger.info("Angle source: %s", source.mode.value)

    if Path(parsed.input).is_dir():
        return run_directory(parsed, config, estimator, source)

    return run_single(parsed, config, estimator, source)


if __name__ == "__main__":
    sys.exit(main())

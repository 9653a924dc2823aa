"""
Angle resolution: decides which angle each processed file is rotated by.

Precedence, evaluated once per run:

1. A reference image: its estimated skew is used for every file.
2. An explicit non-zero angle: used literally for every file.
3. Otherwise (angle 0.0, or detection forced): every file is estimated on
   its own, with no reuse between files.
"""

import logging
from typing import Callable, Optional

import numpy as np

from ..errors import EstimationNoSignalError
from ..image_io import decode_image
from .estimator import SkewEstimator
from .models import AngleSource, SkewEstimate

logger = logging.getLogger(__name__)

Decoder = Callable[[str], np.ndarray]


def estimate_from_path(
    path: str,
    estimator: SkewEstimator,
    decoder: Decoder = decode_image,
) -> SkewEstimate:
    """
    Decode an image and estimate its skew.

    Raises:
        DecodeError: If the image cannot be decoded
    """
    image = decoder(str(path))
    return estimator.detect(image)


def resolve_angle_source(
    explicit_angle: float = 0.0,
    reference_path: Optional[str] = None,
    estimator: Optional[SkewEstimator] = None,
    decoder: Decoder = decode_image,
    detect: bool = False,
) -> AngleSource:
    """
    Decide the angle source for a run.

    Args:
        explicit_angle: Angle given on the command line (0.0 = none)
        reference_path: Optional reference image path
        estimator: Estimator used for the reference image
        decoder: Image decoder
        detect: Force per-file detection when no reference is given

    Returns:
        AngleSource for the whole run

    Raises:
        DecodeError: If the reference image cannot be decoded
    """
    if reference_path:
        estimator = estimator or SkewEstimator()
        estimate = estimate_from_path(reference_path, estimator, decoder)
        logger.info(
            "Rotation angle determined from reference image: %s degrees",
            estimate.angle,
        )
        return AngleSource.from_reference(reference_path, estimate.angle)

    if detect or explicit_angle == 0.0:
        return AngleSource.auto_per_file()

    return AngleSource.explicit(explicit_angle)


class AngleResolver:
    """
    Resolves the angle for individual files under a fixed AngleSource.

    Example:
        >>> resolver = AngleResolver(AngleSource.auto_per_file())
        >>> angle = resolver.angle_for("scan.png", image)
    """

    def __init__(
        self,
        source: AngleSource,
        estimator: Optional[SkewEstimator] = None,
        decoder: Decoder = decode_image,
    ):
        self.source = source
        self.estimator = estimator or SkewEstimator()
        self.decoder = decoder

    def estimate_for(self, path: str, image: Optional[np.ndarray] = None) -> SkewEstimate:
        """
        Estimate the skew of one file.

        Args:
            path: File the estimate is for
            image: Already decoded pixels; decoded from ``path`` if omitted
        """
        if image is None:
            image = self.decoder(str(path))
        estimate = self.estimator.detect(image)
        logger.info("Rotation angle determined for %s: %s degrees", path, estimate.angle)
        return estimate

    def angle_for(self, path: str, image: Optional[np.ndarray] = None) -> float:
        """
        Angle to rotate ``path`` by.

        Explicit and reference sources return the run angle without touching
        the file; auto mode runs a fresh estimate every call.
        """
        if not self.source.is_auto:
            return self.source.angle
        return self.estimate_for(path, image).angle

    def require_signal(self, path: str, image: Optional[np.ndarray] = None) -> float:
        """
        Auto-detect the angle of a single file, failing without signal.

        Raises:
            EstimationNoSignalError: If no line segments were found
        """
        estimate = self.estimate_for(path, image)
        if not estimate.has_signal:
            raise EstimationNoSignalError(f"Could not determine a rotation angle for: {path}")
        return estimate.angle

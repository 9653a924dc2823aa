"""
Skew estimation from dominant straight lines.
"""

import logging
import math
from typing import List, Optional

import cv2
import numpy as np

from ..config.deskew_config import EstimatorConfig
from .models import LineSegment, SkewEstimate

logger = logging.getLogger(__name__)


class SkewEstimator:
    """
    Estimates the skew angle of an image from detected line segments.

    The angle is the plain arithmetic mean of every segment's orientation.
    Short spurious segments count as much as long ones and no outlier
    rejection is applied, so the estimate is only reliable on images whose
    lines are close to horizontal.

    Example:
        >>> estimator = SkewEstimator()
        >>> angle = estimator.estimate(image)
        >>> rotated = rotate_image(image, angle)
    """

    def __init__(self, config: Optional[EstimatorConfig] = None):
        """
        Initialize skew estimator.

        Args:
            config: Edge and line detection parameters
        """
        self.config = config or EstimatorConfig()

    def estimate(self, image: np.ndarray) -> float:
        """
        Estimate the skew angle of an image.

        Args:
            image: Input image (BGR, BGRA or grayscale)

        Returns:
            Angle in degrees, 0.0 if no lines were detected
        """
        return self.detect(image).angle

    def detect(self, image: np.ndarray) -> SkewEstimate:
        """
        Estimate the skew angle and keep the evidence it was based on.

        Args:
            image: Input image (BGR, BGRA or grayscale)

        Returns:
            SkewEstimate; ``has_signal`` is False when no lines were found
        """
        edges = self._edge_map(image)
        segments = self._detect_segments(edges)

        if not segments:
            logger.debug("No line segments detected, no skew signal")
            return SkewEstimate.no_signal()

        mean_radians = sum(s.angle_radians for s in segments) / len(segments)
        angle = math.degrees(mean_radians)

        logger.debug("Estimated skew %.3f degrees from %d segments", angle, len(segments))
        return SkewEstimate(angle=angle, segments=segments)

    def _edge_map(self, image: np.ndarray) -> np.ndarray:
        """Grayscale, blur and run Canny."""
        cfg = self.config

        if image.ndim == 2:
            gray = image
        elif image.shape[2] == 4:
            gray = cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)
        elif image.shape[2] == 1:
            gray = image[:, :, 0]
        else:
            gray = cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)

        ksize = (cfg.blur_kernel_size, cfg.blur_kernel_size)
        blurred = cv2.GaussianBlur(gray, ksize, 0)

        return cv2.Canny(
            blurred,
            cfg.canny_low,
            cfg.canny_high,
            apertureSize=cfg.canny_aperture,
        )

    def _detect_segments(self, edges: np.ndarray) -> List[LineSegment]:
        """Run the probabilistic Hough transform over an edge map."""
        cfg = self.config

        lines = cv2.HoughLinesP(
            edges,
            rho=cfg.hough_rho,
            theta=np.deg2rad(cfg.hough_theta_degrees),
            threshold=cfg.hough_threshold,
            minLineLength=cfg.min_line_length,
            maxLineGap=cfg.max_line_gap,
        )

        if lines is None:
            return []

        return [
            LineSegment(int(x1), int(y1), int(x2), int(y2))
            for x1, y1, x2, y2 in lines[:, 0]
        ]


def estimate_skew(image: np.ndarray, config: Optional[EstimatorConfig] = None) -> float:
    """Convenience wrapper around SkewEstimator.estimate."""
    return SkewEstimator(config).estimate(image)

"""
Skew estimation, lossless rotation and batch de-skewing.
"""

from .models import (
    AngleMode,
    AngleSource,
    BatchResult,
    BatchStatus,
    FileResult,
    LineSegment,
    SkewEstimate,
    TraversalContext,
)
from .estimator import SkewEstimator, estimate_skew
from .rotation import rotate_image, get_rotated_dimensions, build_rotation_matrix
from .policy import AngleResolver, resolve_angle_source
from .processor import DeskewProcessor
from .batch import BatchProcessor

__all__ = [
    "AngleMode",
    "AngleSource",
    "BatchResult",
    "BatchStatus",
    "FileResult",
    "LineSegment",
    "SkewEstimate",
    "TraversalContext",
    "SkewEstimator",
    "estimate_skew",
    "rotate_image",
    "get_rotated_dimensions",
    "build_rotation_matrix",
    "AngleResolver",
    "resolve_angle_source",
    "DeskewProcessor",
    "BatchProcessor",
]

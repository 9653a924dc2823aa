"""
rotimage

Corrects skew in scanned or photographed document images, one file at a
time or over whole directory trees.
"""

__version__ = "1.0.0"

from .deskew import (
    AngleSource,
    BatchProcessor,
    BatchResult,
    BatchStatus,
    DeskewProcessor,
    FileResult,
    SkewEstimator,
    resolve_angle_source,
    rotate_image,
)
from .config import DeskewConfig

__all__ = [
    "AngleSource",
    "BatchProcessor",
    "BatchResult",
    "BatchStatus",
    "DeskewProcessor",
    "FileResult",
    "SkewEstimator",
    "resolve_angle_source",
    "rotate_image",
    "DeskewConfig",
]

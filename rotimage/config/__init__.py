"""Configuration dataclasses for the de-skew tool."""

from .deskew_config import (
    DeskewConfig,
    EstimatorConfig,
    RotationConfig,
    IMAGE_EXTENSIONS,
)

__all__ = [
    "DeskewConfig",
    "EstimatorConfig",
    "RotationConfig",
    "IMAGE_EXTENSIONS",
]

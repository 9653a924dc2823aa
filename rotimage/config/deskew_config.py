"""
Configuration for skew estimation, rotation and batch traversal.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Tuple

import cv2


IMAGE_EXTENSIONS: Tuple[str, ...] = (".jpg", ".jpeg", ".png", ".bmp", ".tif", ".tiff")

INTERPOLATION_FLAGS: Dict[str, int] = {
    "nearest": cv2.INTER_NEAREST,
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}


@dataclass
class EstimatorConfig:
    """
    Parameters for edge and line detection used by the skew estimator.

    Attributes:
        blur_kernel_size: Gaussian kernel size (odd, square)
        canny_low: Lower hysteresis threshold
        canny_high: Upper hysteresis threshold
        canny_aperture: Sobel aperture size for Canny (3, 5 or 7)
        hough_rho: Distance resolution in pixels
        hough_theta_degrees: Angle resolution in degrees
        hough_threshold: Minimum votes for a segment
        min_line_length: Minimum segment length in pixels
        max_line_gap: Maximum gap bridged within one segment
    """
    blur_kernel_size: int = 5
    canny_low: int = 50
    canny_high: int = 150
    canny_aperture: int = 3
    hough_rho: float = 1.0
    hough_theta_degrees: float = 1.0
    hough_threshold: int = 100
    min_line_length: int = 50
    max_line_gap: int = 10

    def __post_init__(self):
        """Validate estimator settings."""
        if self.blur_kernel_size < 1 or self.blur_kernel_size % 2 == 0:
            raise ValueError(
                f"blur_kernel_size must be a positive odd number, got {self.blur_kernel_size}"
            )
        if self.canny_low < 0 or self.canny_high < self.canny_low:
            raise ValueError(
                f"canny thresholds must satisfy 0 <= low <= high, got {self.canny_low}/{self.canny_high}"
            )
        if self.canny_aperture not in (3, 5, 7):
            raise ValueError(f"canny_aperture must be 3, 5 or 7, got {self.canny_aperture}")
        if self.hough_rho <= 0:
            raise ValueError(f"hough_rho must be > 0, got {self.hough_rho}")
        if not 0.0 < self.hough_theta_degrees <= 180.0:
            raise ValueError(
                f"hough_theta_degrees must be in (0, 180], got {self.hough_theta_degrees}"
            )
        if self.hough_threshold < 1:
            raise ValueError(f"hough_threshold must be >= 1, got {self.hough_threshold}")
        if self.min_line_length < 0:
            raise ValueError(f"min_line_length must be >= 0, got {self.min_line_length}")
        if self.max_line_gap < 0:
            raise ValueError(f"max_line_gap must be >= 0, got {self.max_line_gap}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "blur_kernel_size": self.blur_kernel_size,
            "canny_low": self.canny_low,
            "canny_high": self.canny_high,
            "canny_aperture": self.canny_aperture,
            "hough_rho": self.hough_rho,
            "hough_theta_degrees": self.hough_theta_degrees,
            "hough_threshold": self.hough_threshold,
            "min_line_length": self.min_line_length,
            "max_line_gap": self.max_line_gap,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EstimatorConfig":
        """Create from dictionary."""
        return cls(
            blur_kernel_size=data.get("blur_kernel_size", 5),
            canny_low=data.get("canny_low", 50),
            canny_high=data.get("canny_high", 150),
            canny_aperture=data.get("canny_aperture", 3),
            hough_rho=data.get("hough_rho", 1.0),
            hough_theta_degrees=data.get("hough_theta_degrees", 1.0),
            hough_threshold=data.get("hough_threshold", 100),
            min_line_length=data.get("min_line_length", 50),
            max_line_gap=data.get("max_line_gap", 10),
        )


@dataclass
class RotationConfig:
    """Resampling settings for the affine warp."""
    interpolation: str = "linear"
    border_value: int = 0

    def __post_init__(self):
        """Validate rotation settings."""
        if self.interpolation not in INTERPOLATION_FLAGS:
            raise ValueError(
                f"interpolation must be one of {sorted(INTERPOLATION_FLAGS)}, got {self.interpolation!r}"
            )
        if not 0 <= self.border_value <= 255:
            raise ValueError(f"border_value must be 0-255, got {self.border_value}")

    @property
    def interpolation_flag(self) -> int:
        """OpenCV flag for the configured interpolation."""
        return INTERPOLATION_FLAGS[self.interpolation]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "interpolation": self.interpolation,
            "border_value": self.border_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RotationConfig":
        """Create from dictionary."""
        return cls(
            interpolation=data.get("interpolation", "linear"),
            border_value=data.get("border_value", 0),
        )


@dataclass
class DeskewConfig:
    """
    Top-level configuration for a de-skew run.

    Attributes:
        estimator: Edge/line detection parameters
        rotation: Resampling parameters
        image_extensions: Case-sensitive suffixes treated as images
        max_listing_errors: Consecutive directory listing errors tolerated
            before a directory scan is abandoned
    """
    estimator: EstimatorConfig = field(default_factory=EstimatorConfig)
    rotation: RotationConfig = field(default_factory=RotationConfig)
    image_extensions: Tuple[str, ...] = IMAGE_EXTENSIONS
    max_listing_errors: int = 16

    def __post_init__(self):
        """Validate configuration values."""
        # Nested sections may arrive as plain dicts
        if isinstance(self.estimator, dict):
            self.estimator = EstimatorConfig.from_dict(self.estimator)
        if isinstance(self.rotation, dict):
            self.rotation = RotationConfig.from_dict(self.rotation)

        if isinstance(self.image_extensions, str):
            self.image_extensions = (self.image_extensions,)
        self.image_extensions = tuple(self.image_extensions)
        if not self.image_extensions:
            raise ValueError("image_extensions must not be empty")
        for ext in self.image_extensions:
            if not ext.startswith("."):
                raise ValueError(f"image extension must start with '.', got {ext!r}")

        if self.max_listing_errors < 1:
            raise ValueError(
                f"max_listing_errors must be >= 1, got {self.max_listing_errors}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "estimator": self.estimator.to_dict(),
            "rotation": self.rotation.to_dict(),
            "image_extensions": list(self.image_extensions),
            "max_listing_errors": self.max_listing_errors,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DeskewConfig":
        """Create from dictionary (e.g., from YAML config)."""
        return cls(
            estimator=EstimatorConfig.from_dict(data.get("estimator") or {}),
            rotation=RotationConfig.from_dict(data.get("rotation") or {}),
            image_extensions=tuple(data.get("image_extensions", IMAGE_EXTENSIONS)),
            max_listing_errors=data.get("max_listing_errors", 16),
        )

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "DeskewConfig":
        """Load configuration from YAML file."""
        import yaml

        with open(yaml_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"config file must contain a mapping: {yaml_path}")

        return cls.from_dict(data.get("deskew", data))

    @classmethod
    def default(cls) -> "DeskewConfig":
        """Create default configuration."""
        return cls()

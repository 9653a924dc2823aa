"""
Lossless image rotation.

The destination canvas is grown to the bounding box of the rotated source
rectangle, so no source pixel is ever cropped.
"""

import math
from typing import Optional, Tuple

import cv2
import numpy as np

from ..config.deskew_config import RotationConfig
from ..errors import GeometryError

# Absorbs floating point noise such as sin(360 deg) ~ 1e-16 before rounding up
_SIZE_TOLERANCE = 1e-6


def get_rotated_dimensions(
    width: int,
    height: int,
    angle: float,
) -> Tuple[int, int]:
    """
    Calculate the canvas size that holds a rectangle rotated by ``angle``.

    Args:
        width: Original width
        height: Original height
        angle: Rotation angle in degrees (any value)

    Returns:
        (new_width, new_height), rounded up
    """
    radians = math.radians(angle)
    cos_a = abs(math.cos(radians))
    sin_a = abs(math.sin(radians))

    new_width = width * cos_a + height * sin_a
    new_height = width * sin_a + height * cos_a

    return (
        max(1, math.ceil(new_width - _SIZE_TOLERANCE)),
        max(1, math.ceil(new_height - _SIZE_TOLERANCE)),
    )


def build_rotation_matrix(
    width: int,
    height: int,
    angle: float,
) -> Tuple[np.ndarray, Tuple[int, int]]:
    """
    Build the affine matrix rotating about the image centre into the grown canvas.

    Args:
        width: Source width
        height: Source height
        angle: Rotation angle in degrees, positive is counter-clockwise

    Returns:
        (2x3 affine matrix, (canvas_width, canvas_height))
    """
    # Pixel centres run from 0 to size - 1
    center = ((width - 1) / 2.0, (height - 1) / 2.0)
    rotation_matrix = cv2.getRotationMatrix2D(center, angle, 1.0)

    new_width, new_height = get_rotated_dimensions(width, height, angle)

    # Shift so the rotated content is centred in the new canvas
    rotation_matrix[0, 2] += (new_width - 1) / 2.0 - center[0]
    rotation_matrix[1, 2] += (new_height - 1) / 2.0 - center[1]

    return rotation_matrix, (new_width, new_height)


def rotate_image(
    image: np.ndarray,
    angle: float,
    config: Optional[RotationConfig] = None,
) -> np.ndarray:
    """
    Rotate image by an arbitrary angle without cropping.

    Args:
        image: Input image (BGR or grayscale)
        angle: Rotation angle in degrees, positive is counter-clockwise
        config: Interpolation and border settings

    Returns:
        Rotated image on a canvas at least as large as the rotated source

    Raises:
        GeometryError: If the angle is not finite or the warp produced an
            empty image

    Example:
        >>> rotated = rotate_image(image, 3.5)
    """
    config = config or RotationConfig()

    if image is None or image.size == 0:
        raise GeometryError("Error rotating the image: source is empty")

    if not math.isfinite(angle):
        raise GeometryError(f"Error rotating the image: angle must be finite, got {angle}")

    height, width = image.shape[:2]
    rotation_matrix, canvas_size = build_rotation_matrix(width, height, angle)

    try:
        rotated = cv2.warpAffine(
            image,
            rotation_matrix,
            canvas_size,
            flags=config.interpolation_flag,
            borderMode=cv2.BORDER_CONSTANT,
            borderValue=(config.border_value,) * 4,
        )
    except cv2.error as e:
        raise GeometryError(f"Error rotating the image: {e}") from e

    if rotated is None or rotated.size == 0:
        raise GeometryError("Error rotating the image: warp produced an empty result")

    return rotated

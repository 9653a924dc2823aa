"""
Per-file de-skew processing: decode, resolve angle, rotate, encode.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

import numpy as np

from ..config.deskew_config import DeskewConfig
from ..errors import DeskewError, ZeroAngleError
from ..image_io import decode_image, encode_image
from .estimator import SkewEstimator
from .models import AngleSource, FileResult
from .policy import AngleResolver, Decoder
from .rotation import rotate_image

logger = logging.getLogger(__name__)

Encoder = Callable[[np.ndarray, str], None]
PathLike = Union[str, Path]


class DeskewProcessor:
    """
    Rotates single image files and writes the result.

    Failures never escape as exceptions: every method returns a FileResult
    whose ``error_kind`` names the failing step.

    Example:
        >>> processor = DeskewProcessor()
        >>> result = processor.process_single_image("in.png", "out.png", 2.5)
        >>> result.success
        True
    """

    def __init__(
        self,
        config: Optional[DeskewConfig] = None,
        estimator: Optional[SkewEstimator] = None,
        decoder: Decoder = decode_image,
        encoder: Encoder = encode_image,
    ):
        """
        Initialize processor.

        Args:
            config: Run configuration
            estimator: Skew estimator (built from config if omitted)
            decoder: Image decode collaborator
            encoder: Image encode collaborator
        """
        self.config = config or DeskewConfig()
        self.estimator = estimator or SkewEstimator(self.config.estimator)
        self.decoder = decoder
        self.encoder = encoder

    def resolver_for(self, source: AngleSource) -> AngleResolver:
        """Create a resolver sharing this processor's estimator and decoder."""
        return AngleResolver(source, self.estimator, self.decoder)

    def process_single_image(
        self,
        input_path: PathLike,
        output_path: PathLike,
        angle: float,
    ) -> FileResult:
        """
        Rotate one image by a known angle and save it.

        An angle of exactly 0.0 means nothing was requested; the file is
        skipped and reported as a failure without writing any output.
        """
        try:
            if angle == 0.0:
                raise ZeroAngleError(f"Rotation angle is 0.0, skipping: {input_path}")
            image = self.decoder(str(input_path))
            self._rotate_and_save(image, output_path, angle)
        except DeskewError as e:
            return self._failure(input_path, output_path, angle, e)

        return self._success(input_path, output_path, angle)

    def process_entry(
        self,
        input_path: PathLike,
        output_path: PathLike,
        resolver: AngleResolver,
    ) -> FileResult:
        """
        Process one file of a directory run.

        In auto mode the file is decoded once and that buffer feeds both the
        estimate and the rotation.
        """
        if not resolver.source.is_auto:
            return self.process_single_image(input_path, output_path, resolver.source.angle)

        angle = None
        try:
            image = self.decoder(str(input_path))
            angle = resolver.angle_for(str(input_path), image)
            if angle == 0.0:
                raise ZeroAngleError(f"Rotation angle is 0.0, skipping: {input_path}")
            self._rotate_and_save(image, output_path, angle)
        except DeskewError as e:
            return self._failure(input_path, output_path, angle, e)

        return self._success(input_path, output_path, angle)

    def process_file(
        self,
        input_path: PathLike,
        output_path: PathLike,
        source: AngleSource,
    ) -> FileResult:
        """
        Single-file mode.

        With an auto source the angle is estimated from the input itself,
        and an image without any detectable lines is a failure.
        """
        if not source.is_auto:
            return self.process_single_image(input_path, output_path, source.angle)

        resolver = self.resolver_for(source)
        angle = None
        try:
            image = self.decoder(str(input_path))
            angle = resolver.require_signal(str(input_path), image)
            if angle == 0.0:
                raise ZeroAngleError(f"Rotation angle is 0.0, skipping: {input_path}")
            self._rotate_and_save(image, output_path, angle)
        except DeskewError as e:
            return self._failure(input_path, output_path, angle, e)

        return self._success(input_path, output_path, angle)

    def _rotate_and_save(self, image: np.ndarray, output_path: PathLike, angle: float) -> None:
        rotated = rotate_image(image, angle, self.config.rotation)
        self.encoder(rotated, str(output_path))

    def _success(self, input_path, output_path, angle) -> FileResult:
        logger.info("Image rotated successfully and saved to %s", output_path)
        return FileResult(
            input_path=str(input_path),
            output_path=str(output_path),
            success=True,
            angle=angle,
        )

    def _failure(self, input_path, output_path, angle, error: DeskewError) -> FileResult:
        logger.error("%s", error)
        return FileResult(
            input_path=str(input_path),
            output_path=str(output_path),
            success=False,
            angle=angle,
            error=str(error),
            error_kind=error.kind,
        )

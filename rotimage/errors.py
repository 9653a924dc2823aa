"""
Error kinds raised while de-skewing images.

Each exception carries a short ``kind`` string that ends up in
``FileResult.error_kind`` so batch reports can be filtered by failure type.
"""


class DeskewError(Exception):
    """Base class for all de-skew failures."""

    kind = "deskew"


class DecodeError(DeskewError):
    """Image is missing, unreadable or corrupt."""

    kind = "decode"


class EstimationNoSignalError(DeskewError):
    """Auto-detection found no line segments to estimate from."""

    kind = "no_signal"


class ZeroAngleError(DeskewError):
    """Resolved angle is exactly 0.0, so the file is skipped."""

    kind = "zero_angle"


class GeometryError(DeskewError):
    """Rotation produced an empty image."""

    kind = "geometry"


class EncodeError(DeskewError):
    """Rotated image could not be written."""

    kind = "encode"


class TraversalError(DeskewError):
    """Directory listing failed mid-scan."""

    kind = "traversal"


class OutputSetupError(DeskewError):
    """Output directory tree could not be created."""

    kind = "output_setup"

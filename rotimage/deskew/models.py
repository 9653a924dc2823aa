"""
Data structures for skew estimation and batch de-skewing.
"""

import math
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple


@dataclass(frozen=True)
class LineSegment:
    """A detected straight edge fragment with two endpoints."""
    x1: int
    y1: int
    x2: int
    y2: int

    @property
    def angle_radians(self) -> float:
        """Orientation as atan2(dy, dx)."""
        return math.atan2(self.y2 - self.y1, self.x2 - self.x1)

    @property
    def angle_degrees(self) -> float:
        """Orientation in degrees."""
        return math.degrees(self.angle_radians)

    @property
    def length(self) -> float:
        """Euclidean length in pixels."""
        return math.hypot(self.x2 - self.x1, self.y2 - self.y1)

    def to_tuple(self) -> Tuple[int, int, int, int]:
        """Endpoints as (x1, y1, x2, y2)."""
        return (self.x1, self.y1, self.x2, self.y2)


@dataclass
class SkewEstimate:
    """
    Result of skew estimation.

    Attributes:
        angle: Mean segment orientation in degrees (0.0 without signal)
        segments: Line segments the angle was computed from
    """
    angle: float
    segments: List[LineSegment] = field(default_factory=list)

    @property
    def segment_count(self) -> int:
        """Number of segments that contributed to the estimate."""
        return len(self.segments)

    @property
    def has_signal(self) -> bool:
        """Whether any line segment was detected."""
        return self.segment_count > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "angle": self.angle,
            "segment_count": self.segment_count,
            "has_signal": self.has_signal,
        }

    @classmethod
    def no_signal(cls) -> "SkewEstimate":
        """Create an estimate for an image without detectable lines."""
        return cls(angle=0.0)


class AngleMode(Enum):
    """Where the rotation angle of a run comes from."""
    EXPLICIT = "explicit"
    REFERENCE = "reference"
    AUTO_PER_FILE = "auto_per_file"


@dataclass(frozen=True)
class AngleSource:
    """
    Angle source decided once at program entry.

    Attributes:
        mode: Which source is active
        angle: Run-wide angle for EXPLICIT and REFERENCE modes
        reference_path: Image the REFERENCE angle was estimated from
    """
    mode: AngleMode
    angle: float = 0.0
    reference_path: Optional[str] = None

    @property
    def is_auto(self) -> bool:
        """Whether every file gets its own estimate."""
        return self.mode == AngleMode.AUTO_PER_FILE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mode": self.mode.value,
            "angle": None if self.is_auto else self.angle,
            "reference_path": self.reference_path,
        }

    @classmethod
    def explicit(cls, angle: float) -> "AngleSource":
        """Use a literal angle for every file."""
        return cls(mode=AngleMode.EXPLICIT, angle=float(angle))

    @classmethod
    def from_reference(cls, reference_path: str, angle: float) -> "AngleSource":
        """Use the angle estimated from a reference image for every file."""
        return cls(
            mode=AngleMode.REFERENCE,
            angle=float(angle),
            reference_path=str(reference_path),
        )

    @classmethod
    def auto_per_file(cls) -> "AngleSource":
        """Estimate a fresh angle for each file."""
        return cls(mode=AngleMode.AUTO_PER_FILE)


@dataclass(frozen=True)
class TraversalContext:
    """State for one directory traversal call."""
    input_dir: Path
    output_dir: Path
    angle_source: AngleSource
    recursive: bool = False
    verbose: bool = False

    def for_subdirectory(self, subdirectory: Path) -> "TraversalContext":
        """Derive the context for a recursive descent."""
        return replace(self, input_dir=Path(subdirectory))


@dataclass
class FileResult:
    """Outcome of processing one image file."""
    input_path: str
    output_path: Optional[str]
    success: bool
    angle: Optional[float] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "input_path": self.input_path,
            "output_path": self.output_path,
            "success": self.success,
            "angle": self.angle,
            "error": self.error,
            "error_kind": self.error_kind,
        }


class BatchStatus(Enum):
    """Summary status of a directory traversal."""
    SUCCESS = "success"
    # Every top-level entry succeeded but a recursive descent failed
    PARTIAL = "partial"
    FAILED = "failed"


@dataclass
class BatchResult:
    """
    Result of processing one directory.

    Attributes:
        input_dir: Directory that was listed
        status: Summary status for this level
        results: Per-file results at this level, in processing order
        nested: Results of recursive descents into subdirectories
        listing_errors: Messages for directory entries that could not be read
    """
    input_dir: str
    status: BatchStatus = BatchStatus.SUCCESS
    results: List[FileResult] = field(default_factory=list)
    nested: List["BatchResult"] = field(default_factory=list)
    listing_errors: List[str] = field(default_factory=list)

    @property
    def success(self) -> bool:
        """Whether the top-level listing completed without an abort."""
        return self.status != BatchStatus.FAILED

    @property
    def processed(self) -> int:
        """Files rotated and written, including nested directories."""
        own = sum(1 for r in self.results if r.success)
        return own + sum(n.processed for n in self.nested)

    @property
    def failed(self) -> int:
        """Files that failed, including nested directories."""
        own = sum(1 for r in self.results if not r.success)
        return own + sum(n.failed for n in self.nested)

    def all_results(self) -> List[FileResult]:
        """Flatten results of this level and every nested level."""
        flat = list(self.results)
        for child in self.nested:
            flat.extend(child.all_results())
        return flat

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "input_dir": self.input_dir,
            "status": self.status.value,
            "processed": self.processed,
            "failed": self.failed,
            "results": [r.to_dict() for r in self.results],
            "nested": [n.to_dict() for n in self.nested],
            "listing_errors": self.listing_errors,
        }

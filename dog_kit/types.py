from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from .geometry import rect_area


@dataclass(frozen=True)
class Rect:
    """
    Axis-aligned box in float pixel coordinates.

    `right >= left` and `bottom >= top` are not enforced; `area` treats an
    inverted box as empty.
    """

    left: float
    top: float
    right: float
    bottom: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        return rect_area(self.left, self.top, self.right, self.bottom)

    def scaled(self, sx: float, sy: float) -> "Rect":
        return Rect(self.left * sx, self.top * sy, self.right * sx, self.bottom * sy)

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.left, self.top, self.right, self.bottom


@dataclass(frozen=True)
class Detection:
    """
    One labeled box in source-image pixel space.
    """

    bbox: Rect
    confidence: float
    class_id: int
    class_name: str

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.bbox.as_xyxy()


@dataclass(frozen=True)
class DetectionResult:
    detections: Tuple[Detection, ...] = field(default_factory=tuple)
    inference_time_ms: float = -1.0
    preprocess_time_ms: float = 0.0
    postprocess_time_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.inference_time_ms < 0

    @classmethod
    def empty(cls, *, preprocess_time_ms: float = 0.0) -> "DetectionResult":
        return cls(detections=(), inference_time_ms=-1.0, preprocess_time_ms=preprocess_time_ms, postprocess_time_ms=0.0)


class ShapeState(str, Enum):
    UNKNOWN = "unknown"
    DISCOVERED = "discovered"
    CORRECTED = "corrected"


@dataclass(frozen=True)
class ModelShape:
    """
    Model input height/width as known to the inference adapter.

    UNKNOWN: the model declares dynamic dims, callers fall back to a default size.
    DISCOVERED: concrete dims read from the model at load time.
    CORRECTED: dims parsed from a runtime shape-mismatch error.
    """

    expected_height: Optional[int] = None
    expected_width: Optional[int] = None
    state: ShapeState = ShapeState.UNKNOWN

    @classmethod
    def from_declared(cls, shape: Optional[Sequence[object]]) -> "ModelShape":
        # Expected NCHW; dynamic axes show up as None, strings or -1.
        if shape is None or len(shape) < 4:
            return cls()
        h, w = shape[2], shape[3]
        if _is_positive_int(h) and _is_positive_int(w):
            return cls(int(h), int(w), ShapeState.DISCOVERED)
        return cls()

    @property
    def is_known(self) -> bool:
        return self.expected_height is not None and self.expected_width is not None

    def resolve(self, default_size: Tuple[int, int]) -> Tuple[int, int]:
        """Return (width, height) to feed the model."""
        if self.is_known:
            return int(self.expected_width), int(self.expected_height)  # type: ignore[arg-type]
        return default_size

    def corrected(self, height: int, width: int) -> "ModelShape":
        return ModelShape(height, width, ShapeState.CORRECTED)


def _is_positive_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0

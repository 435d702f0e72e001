"""
Dog breed detection on top of a YOLO-style ONNX model.

Takes an RGB frame as a NumPy array and returns de-duplicated, labeled boxes in
the frame's own pixel space. Core dependencies are NumPy and OpenCV (resize);
ONNX Runtime is only imported when a model is loaded.
"""

from .types import Detection, DetectionResult, ModelShape, Rect, ShapeState
from .errors import DogKitError, InferenceError, ModelLoadError, OutputDecodeError
from .geometry import iou
from .preprocess import to_chw_buffer
from .adapter import InferenceAdapter, parse_shape_mismatch
from .postprocess import DecoderConfig, OutputDecoder, resolve_layout
from .nms import NMSConfig, nms, suppress
from .config import DetectorConfig, load_detector_config
from .detector import DogDetector, load_detector, find_project_root, resolve_path
from .metadata import DOG_BREEDS, load_class_names
from .timing import RollingTimings

__all__ = [
    "Detection",
    "DetectionResult",
    "ModelShape",
    "Rect",
    "ShapeState",
    "DogKitError",
    "InferenceError",
    "ModelLoadError",
    "OutputDecodeError",
    "iou",
    "to_chw_buffer",
    "InferenceAdapter",
    "parse_shape_mismatch",
    "DecoderConfig",
    "OutputDecoder",
    "resolve_layout",
    "NMSConfig",
    "nms",
    "suppress",
    "DetectorConfig",
    "load_detector_config",
    "DogDetector",
    "load_detector",
    "find_project_root",
    "resolve_path",
    "DOG_BREEDS",
    "load_class_names",
    "RollingTimings",
]

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .adapter import DEFAULT_INPUT_SIZE
from .nms import NMSConfig
from .postprocess import DecoderConfig


@dataclass(frozen=True)
class DetectorConfig:
    """
    Tuning knobs for the dog detector.

    default_input_size is (width, height) and is only used when the model does
    not declare concrete input dims. The tightening factors shrink boxes around
    their center (1.0 keeps them as predicted).
    """

    confidence_threshold: float = 0.35
    iou_threshold: float = 0.45
    max_area_ratio: float = 0.85
    default_input_size: Tuple[int, int] = DEFAULT_INPUT_SIZE
    bbox_tightening_width: float = 1.0
    bbox_tightening_height: float = 1.0
    max_detections: Optional[int] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError("confidence_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ValueError("iou_threshold must be in [0, 1]")
        if not 0.0 < self.max_area_ratio <= 1.0:
            raise ValueError("max_area_ratio must be in (0, 1]")
        if len(self.default_input_size) != 2 or any(int(v) <= 0 for v in self.default_input_size):
            raise ValueError("default_input_size must be two positive integers (width, height)")
        if self.bbox_tightening_width <= 0 or self.bbox_tightening_height <= 0:
            raise ValueError("bbox tightening factors must be > 0")
        if self.max_detections is not None and self.max_detections <= 0:
            raise ValueError("max_detections must be > 0 if provided")

    def decoder_config(self) -> DecoderConfig:
        return DecoderConfig(
            conf_threshold=self.confidence_threshold,
            max_area_ratio=self.max_area_ratio,
            tightening_width=self.bbox_tightening_width,
            tightening_height=self.bbox_tightening_height,
        )

    def nms_config(self) -> NMSConfig:
        return NMSConfig(iou_threshold=self.iou_threshold, max_detections=self.max_detections)


def _optional_number(payload: Dict[str, Any], key: str, default: float) -> float:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key} must be a number")
    return float(value)


def _optional_size(payload: Dict[str, Any], key: str, default: Tuple[int, int]) -> Tuple[int, int]:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool):
        raise ValueError(f"{key} must be an integer or [width, height]")
    if isinstance(value, int):
        return value, value
    if (
        isinstance(value, list)
        and len(value) == 2
        and all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    ):
        return value[0], value[1]
    raise ValueError(f"{key} must be an integer or [width, height]")


def load_detector_config(path: Path) -> DetectorConfig:
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Detector config must be a JSON object")

    allowed = {
        "confidence_threshold",
        "iou_threshold",
        "max_area_ratio",
        "default_input_size",
        "bbox_tightening_width",
        "bbox_tightening_height",
        "max_detections",
    }
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ValueError(f"Unknown detector config keys: {unknown}")

    defaults = DetectorConfig()
    max_detections = payload.get("max_detections")
    if max_detections is not None and (isinstance(max_detections, bool) or not isinstance(max_detections, int)):
        raise ValueError("max_detections must be an integer if provided")

    return DetectorConfig(
        confidence_threshold=_optional_number(payload, "confidence_threshold", defaults.confidence_threshold),
        iou_threshold=_optional_number(payload, "iou_threshold", defaults.iou_threshold),
        max_area_ratio=_optional_number(payload, "max_area_ratio", defaults.max_area_ratio),
        default_input_size=_optional_size(payload, "default_input_size", defaults.default_input_size),
        bbox_tightening_width=_optional_number(payload, "bbox_tightening_width", defaults.bbox_tightening_width),
        bbox_tightening_height=_optional_number(payload, "bbox_tightening_height", defaults.bbox_tightening_height),
        max_detections=max_detections,
    )

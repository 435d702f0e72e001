from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .geometry import iou_one_to_many
from .types import Detection


@dataclass
class NMSConfig:
    iou_threshold: float = 0.45
    max_detections: Optional[int] = None


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, highest score first.

    Ties in score keep their input order. A box is dropped when its IoU with an
    already kept box is strictly greater than `cfg.iou_threshold`.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int32)

    order = np.argsort(-scores, kind="stable")
    suppressed = np.zeros(order.size, dtype=bool)
    keep = []

    for pos in range(order.size):
        if suppressed[pos]:
            continue
        i = order[pos]
        keep.append(i)
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break

        rest = order[pos + 1:]
        overlaps = iou_one_to_many(boxes[i], boxes[rest])
        suppressed[pos + 1:] |= overlaps > cfg.iou_threshold

    return np.array(keep, dtype=np.int32)


def suppress(detections: Sequence[Detection], cfg: NMSConfig = NMSConfig()) -> List[Detection]:
    """
    Collapse overlapping detections to the most confident one per cluster.

    Class-agnostic; output is ordered by descending confidence.
    """

    if not detections:
        return []

    boxes = np.array([d.as_xyxy() for d in detections], dtype=np.float64)
    scores = np.array([d.confidence for d in detections], dtype=np.float64)
    keep_idx = nms(boxes, scores, cfg)
    return [detections[int(i)] for i in keep_idx]

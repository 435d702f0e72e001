"""
Rectangle math shared by the decoder and NMS.

Boxes are (left, top, right, bottom). A box with negative width or height has
zero area, and a pair with no overlap has IoU 0.

The scalar functions are the reference definitions; `iou_one_to_many` is the
NumPy form NMS runs on and must agree with `iou`.
"""

from __future__ import annotations

import numpy as np


def rect_area(left: float, top: float, right: float, bottom: float) -> float:
    return max(0.0, right - left) * max(0.0, bottom - top)


def intersection_area(a, b) -> float:
    w = min(a[2], b[2]) - max(a[0], b[0])
    h = min(a[3], b[3]) - max(a[1], b[1])
    return max(0.0, w) * max(0.0, h)


def union_area(a, b) -> float:
    return rect_area(*a) + rect_area(*b) - intersection_area(a, b)


def iou(a, b) -> float:
    """IoU of two xyxy boxes (tuples or anything indexable)."""
    inter = intersection_area(a, b)
    union = rect_area(*a) + rect_area(*b) - inter
    if union <= 0:
        return 0.0
    return inter / union


def box_areas(boxes: np.ndarray) -> np.ndarray:
    return np.maximum(0.0, boxes[:, 2] - boxes[:, 0]) * np.maximum(0.0, boxes[:, 3] - boxes[:, 1])


def iou_one_to_many(box: np.ndarray, boxes: np.ndarray) -> np.ndarray:
    """
    Vectorised `iou` of one box (4,) against boxes (N, 4). Returns (N,).
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.float64)

    xx1 = np.maximum(box[0], boxes[:, 0])
    yy1 = np.maximum(box[1], boxes[:, 1])
    xx2 = np.minimum(box[2], boxes[:, 2])
    yy2 = np.minimum(box[3], boxes[:, 3])

    inter = np.maximum(0.0, xx2 - xx1) * np.maximum(0.0, yy2 - yy1)
    box_area = rect_area(*(float(v) for v in box[:4]))
    union = box_area + box_areas(boxes) - inter

    out = np.zeros(boxes.shape[0], dtype=np.float64)
    positive = union > 0
    out[positive] = inter[positive] / union[positive]
    return out

import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .errors import OutputDecodeError
from .types import Detection, Rect

logger = logging.getLogger(__name__)


@dataclass
class DecoderConfig:
    """
    Filters applied while decoding raw YOLO output.
    """
    conf_threshold: float = 0.35
    # Boxes covering more than this share of the source image are dropped.
    max_area_ratio: float = 0.85
    # Width/height multipliers applied around the box center before the area check.
    tightening_width: float = 1.0
    tightening_height: float = 1.0


@dataclass(frozen=True)
class OutputLayout:
    transposed: bool
    num_predictions: int
    num_classes: int


def resolve_layout(shape: Sequence[int]) -> OutputLayout:
    """
    Decide which axis of a [1, A, B] output holds the predictions.

    - (4 + C, N), e.g. [1, 19, 2100]: transposed, field k of prediction i at [0][k][i]
    - (N, 4 + C), e.g. [1, 2100, 19]: standard, field k of prediction i at [0][i][k]

    The check is A < B. Square outputs are read as standard.
    """

    if len(shape) != 3:
        raise OutputDecodeError(f"Expected a [1, A, B] output, got shape {tuple(shape)}.")
    if shape[0] != 1:
        raise OutputDecodeError(f"Batch > 1 is not supported (got shape {tuple(shape)}). Pass one image at a time.")

    a, b = int(shape[1]), int(shape[2])
    if a < b:
        layout = OutputLayout(transposed=True, num_predictions=b, num_classes=a - 4)
    else:
        layout = OutputLayout(transposed=False, num_predictions=a, num_classes=b - 4)

    if layout.num_classes < 1:
        raise OutputDecodeError(f"Output shape {tuple(shape)} has no room for class scores.")
    return layout


def class_name_for(class_id: int, class_names: Sequence[str]) -> str:
    if 0 <= class_id < len(class_names):
        return class_names[class_id]
    return f"Dog_{class_id}"


class OutputDecoder:
    """
    Turn a raw [1, A, B] output tensor into candidate detections in source-image pixels.

    Each prediction row is [cx, cy, w, h, class_scores...] in model-input pixels.
    The result is unordered and still contains duplicates; run NMS on it.
    """

    def __init__(self, cfg: DecoderConfig, class_names: Sequence[str] = ()):
        self.cfg = cfg
        self.class_names = list(class_names)

    def decode(
        self,
        preds: np.ndarray,
        source_size: Tuple[int, int],
        scale: Tuple[float, float] = (1.0, 1.0),
    ) -> List[Detection]:
        """
        Args:
            preds: raw model output for a single image, shape [1, A, B]
            source_size: (width, height) of the original image
            scale: (sx, sy) = source dim / model input dim per axis
        """

        p = np.asarray(preds)
        if p.ndim == 2:
            p = p[None, ...]
        layout = resolve_layout(p.shape)
        logger.debug(
            "Detected %s output layout %s: %d predictions, %d classes",
            "transposed" if layout.transposed else "standard",
            tuple(p.shape),
            layout.num_predictions,
            layout.num_classes,
        )

        rows = p[0].T if layout.transposed else p[0]
        rows = rows.astype(np.float64, copy=False)
        if rows.shape[0] == 0:
            return []

        class_scores = rows[:, 4:4 + layout.num_classes]
        class_ids = np.argmax(class_scores, axis=1)
        scores = class_scores[np.arange(rows.shape[0]), class_ids]

        sx, sy = scale
        cx = rows[:, 0] * sx
        cy = rows[:, 1] * sy
        w = rows[:, 2] * sx * self.cfg.tightening_width
        h = rows[:, 3] * sy * self.cfg.tightening_height

        x1 = cx - w / 2
        y1 = cy - h / 2
        x2 = cx + w / 2
        y2 = cy + h / 2

        src_w, src_h = source_size
        image_area = float(src_w) * float(src_h)
        box_area = np.maximum(0.0, x2 - x1) * np.maximum(0.0, y2 - y1)
        area_ratio = box_area / image_area if image_area > 0 else np.full_like(box_area, np.inf)

        confident = scores > self.cfg.conf_threshold
        not_too_large = area_ratio <= self.cfg.max_area_ratio
        keep = np.flatnonzero(confident & not_too_large)

        rejected_large = int(np.count_nonzero(confident & ~not_too_large))
        if rejected_large:
            logger.debug("Rejected %d confident boxes covering > %.0f%% of the image", rejected_large, self.cfg.max_area_ratio * 100)

        detections = [
            Detection(
                bbox=Rect(float(x1[i]), float(y1[i]), float(x2[i]), float(y2[i])),
                confidence=float(scores[i]),
                class_id=int(class_ids[i]),
                class_name=class_name_for(int(class_ids[i]), self.class_names),
            )
            for i in keep
        ]
        logger.debug("Candidates before NMS: %d", len(detections))
        return detections

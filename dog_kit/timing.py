from __future__ import annotations

import time
from collections import deque
from typing import Deque

from .types import DetectionResult


def elapsed_ms(start: float) -> float:
    """Milliseconds since a `time.perf_counter()` reading."""
    return (time.perf_counter() - start) * 1000.0


class RollingTimings:
    """
    Caller-owned timing history for FPS smoothing over the last `window` frames.

    Not shared between threads; the frame loop that calls `detect` owns it.
    """

    def __init__(self, window: int = 30):
        if window <= 0:
            raise ValueError("window must be > 0")
        self.window = window
        self.frame_ms: Deque[float] = deque(maxlen=window)
        self.inference_ms: Deque[float] = deque(maxlen=window)

    def record(self, result: DetectionResult, frame_ms: float) -> None:
        self.frame_ms.append(float(frame_ms))
        # -1 marks a failed inference; keep it out of the average.
        if result.inference_time_ms >= 0:
            self.inference_ms.append(float(result.inference_time_ms))

    @property
    def avg_frame_ms(self) -> float:
        return sum(self.frame_ms) / len(self.frame_ms) if self.frame_ms else 0.0

    @property
    def avg_inference_ms(self) -> float:
        return sum(self.inference_ms) / len(self.inference_ms) if self.inference_ms else 0.0

    @property
    def fps(self) -> float:
        avg = self.avg_frame_ms
        return 1000.0 / avg if avg > 0 else 0.0

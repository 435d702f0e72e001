"""
Inference adapter: owns the model input shape and the native call.

The native call is any `infer_fn(blob) -> np.ndarray` taking a float32
(1, 3, H, W) blob. When the model was exported with dynamic dims the first
guess (320x320 by default) can be wrong; ONNX Runtime then fails with a
message naming the dims it expected for input indices 2 and 3. `run` parses
that message, switches the shape once, re-preprocesses and retries a single
time.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Tuple

import numpy as np

from .errors import InferenceError
from .preprocess import to_chw_buffer
from .timing import elapsed_ms
from .types import ModelShape, ShapeState

logger = logging.getLogger(__name__)

InferFn = Callable[[np.ndarray], np.ndarray]

DEFAULT_INPUT_SIZE: Tuple[int, int] = (320, 320)

_SHAPE_MISMATCH_RE = re.compile(
    r"index:\s*2\s*Got:\s*(\d+)\s*Expected:\s*(\d+).*index:\s*3\s*Got:\s*(\d+)\s*Expected:\s*(\d+)",
    re.DOTALL,
)


def parse_shape_mismatch(message: str) -> Optional[Tuple[int, int]]:
    """
    Extract the expected (height, width) from a shape-mismatch error message.

    Returns None when the message does not name both index 2 and index 3, or
    names a non-positive size.
    """

    match = _SHAPE_MISMATCH_RE.search(message or "")
    if match is None:
        return None
    height, width = int(match.group(2)), int(match.group(4))
    if height <= 0 or width <= 0:
        return None
    return height, width


@dataclass(frozen=True)
class InferenceRun:
    output: np.ndarray
    input_size: Tuple[int, int]  # (width, height) the output was produced at
    preprocess_ms: float
    inference_ms: float


class InferenceAdapter:
    """
    Wrap a native inference callable with input-shape bookkeeping.

    Not thread-safe: one caller at a time (DogDetector serialises calls).
    """

    def __init__(
        self,
        infer_fn: InferFn,
        declared_shape: Optional[Sequence[object]] = None,
        *,
        default_size: Tuple[int, int] = DEFAULT_INPUT_SIZE,
    ):
        self._infer_fn = infer_fn
        self.default_size = default_size
        self._shape = ModelShape.from_declared(declared_shape)

        if self._shape.state is ShapeState.DISCOVERED:
            logger.debug("Model input size %dx%d", self._shape.expected_width, self._shape.expected_height)
        else:
            logger.warning(
                "Model has dynamic or unreadable input dims %s; using default %dx%d",
                declared_shape,
                default_size[0],
                default_size[1],
            )

    @property
    def shape(self) -> ModelShape:
        return self._shape

    def target_size(self) -> Tuple[int, int]:
        """(width, height) the next call will feed the model."""
        return self._shape.resolve(self.default_size)

    def _invoke(self, buffer: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
        width, height = size
        blob = buffer.reshape(1, 3, height, width)
        return self._infer_fn(blob)

    def run(self, image: np.ndarray) -> InferenceRun:
        """
        Preprocess `image` and run the model, retrying once on a parsable shape mismatch.

        Raises InferenceError when the call cannot produce an output.
        """

        start = time.perf_counter()
        size = self.target_size()
        buffer = to_chw_buffer(image, size)
        preprocess_ms = elapsed_ms(start)

        infer_start = time.perf_counter()
        try:
            output = self._invoke(buffer, size)
        except Exception as e:  # native boundary: the message decides whether to retry
            logger.warning("Inference failed at %dx%d: %s", size[0], size[1], e)
            return self._retry_with_expected_shape(image, e, preprocess_ms)
        return InferenceRun(output, size, preprocess_ms, elapsed_ms(infer_start))

    def _retry_with_expected_shape(self, image: np.ndarray, error: Exception, preprocess_ms: float) -> InferenceRun:
        expected = parse_shape_mismatch(str(error))
        if expected is None:
            raise InferenceError(str(error), preprocess_ms=preprocess_ms) from error

        height, width = expected
        logger.warning("Model expects %dx%d (from error message); retrying once", width, height)
        self._shape = self._shape.corrected(height, width)
        size = (width, height)

        start = time.perf_counter()
        buffer = to_chw_buffer(image, size)
        preprocess_ms += elapsed_ms(start)

        infer_start = time.perf_counter()
        try:
            output = self._invoke(buffer, size)
        except Exception as e:
            logger.warning("Retry at %dx%d failed: %s", width, height, e)
            raise InferenceError(str(e), preprocess_ms=preprocess_ms) from e

        logger.debug("Retry succeeded at %dx%d", width, height)
        return InferenceRun(output, size, preprocess_ms, elapsed_ms(infer_start))

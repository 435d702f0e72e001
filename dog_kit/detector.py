from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Any, Optional, Sequence, Union

import numpy as np

from .adapter import InferenceAdapter, InferFn
from .config import DetectorConfig
from .errors import InferenceError, OutputDecodeError
from .metadata import DOG_BREEDS
from .nms import suppress
from .postprocess import OutputDecoder
from .preprocess import image_size
from .timing import elapsed_ms
from .types import DetectionResult, ModelShape

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", "setup.py", ".git", "requirements.txt"),
) -> Path:
    """
    Best-effort project root discovery.

    Useful when `dog_kit` is vendored as `A/dog_kit` and models live in `A/models`.
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    # If a file is provided, start from its directory.
    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Resolve `path` to an absolute Path.

    - Absolute paths are returned as-is.
    - Relative paths are resolved against:
      - `root` if provided
      - project root (auto) otherwise
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


class DogDetector:
    """
    Frame in, detections out: preprocess -> inference -> decode -> NMS.

    `detect` expects an RGB `np.ndarray` (H, W, 3) and returns boxes in that
    image's pixel space. Inference failures never raise; they come back as an
    empty result with `inference_time_ms == -1`. Calls on one instance are
    serialised because the native session is not safe for concurrent use.
    """

    def __init__(
        self,
        infer_fn: InferFn,
        *,
        input_shape: Optional[Sequence[Any]] = None,
        class_names: Sequence[str] = DOG_BREEDS,
        config: DetectorConfig = DetectorConfig(),
        backend: Optional[object] = None,
        backend_name: Optional[str] = None,
    ):
        self.config = config
        self.backend = backend
        self.backend_name = backend_name
        self.adapter = InferenceAdapter(infer_fn, input_shape, default_size=tuple(config.default_input_size))
        self.decoder = OutputDecoder(config.decoder_config(), class_names)
        self._nms_cfg = config.nms_config()
        self._lock = threading.Lock()

    @property
    def model_shape(self) -> ModelShape:
        return self.adapter.shape

    def detect(self, image_rgb: np.ndarray) -> DetectionResult:
        with self._lock:
            return self._detect(image_rgb)

    def _detect(self, image_rgb: np.ndarray) -> DetectionResult:
        total_start = time.perf_counter()

        try:
            run = self.adapter.run(image_rgb)
        except InferenceError as e:
            logger.error("Inference failed, returning empty result: %s", e)
            return DetectionResult.empty(preprocess_time_ms=e.preprocess_ms)

        post_start = time.perf_counter()
        src_w, src_h = image_size(image_rgb)
        model_w, model_h = run.input_size
        scale = (src_w / model_w, src_h / model_h)
        try:
            candidates = self.decoder.decode(run.output, source_size=(src_w, src_h), scale=scale)
        except OutputDecodeError as e:
            logger.error("Could not decode model output: %s", e)
            candidates = []
        detections = suppress(candidates, self._nms_cfg)
        postprocess_ms = elapsed_ms(post_start)

        logger.debug(
            "Detections: %d (from %d candidates) | preprocess %.1fms inference %.1fms postprocess %.1fms total %.1fms",
            len(detections),
            len(candidates),
            run.preprocess_ms,
            run.inference_ms,
            postprocess_ms,
            elapsed_ms(total_start),
        )
        return DetectionResult(
            detections=tuple(detections),
            inference_time_ms=run.inference_ms,
            preprocess_time_ms=run.preprocess_ms,
            postprocess_time_ms=postprocess_ms,
        )

    def __call__(self, image_rgb: np.ndarray) -> DetectionResult:
        return self.detect(image_rgb)

    def close(self) -> None:
        close = getattr(self.backend, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> "DogDetector":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def load_detector(
    model: Union[PathLike, bytes],
    *,
    root: Optional[PathLike] = "auto",
    config: DetectorConfig = DetectorConfig(),
    class_names: Sequence[str] = DOG_BREEDS,
    onnx_providers: Optional[Sequence[str]] = None,
    onnx_input_name: Optional[str] = None,
    onnx_output_name: Optional[str] = None,
) -> DogDetector:
    """
    Create a detector for an ONNX model on disk or in memory.

    Typical usage when `dog_kit` is vendored into another repo:
        detector = load_detector("models/yolo11n_best.onnx")  # resolves from project root by default

    Raises FileNotFoundError or ModelLoadError if the model cannot be opened.
    """

    from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

    source = model if isinstance(model, (bytes, bytearray)) else resolve_path(model, root=root)
    ort_backend = OnnxRuntimeBackend(
        source,
        OnnxRuntimeBackendConfig(
            providers=onnx_providers,
            input_name=onnx_input_name,
            output_name=onnx_output_name,
        ),
    )
    return DogDetector(
        ort_backend.infer,
        input_shape=ort_backend.input_shape,
        class_names=class_names,
        config=config,
        backend=ort_backend,
        backend_name="onnxruntime",
    )

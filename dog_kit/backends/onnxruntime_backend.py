from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Optional, Sequence, Union

import numpy as np

from ..errors import ModelLoadError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CUDAExecutionProvider", "CPUExecutionProvider"])
    - input_name/output_name: override auto-selected I/O names if needed
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_name: Optional[str] = None


class OnnxRuntimeBackend:
    """
    Minimal ONNX Runtime backend.

    Accepts a model path or the serialized model bytes. Expects an NCHW float32
    blob shaped (1, 3, H, W) and returns the primary output as a NumPy array.
    ORT errors from `infer` are not caught here; their messages carry the
    expected dims when the input shape is wrong.
    """

    def __init__(self, model: Union[PathLike, bytes], cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except Exception as e:  # pragma: no cover
            raise ImportError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime` "
                "(or `onnxruntime-gpu`)."
            ) from e

        self._ort = ort
        if isinstance(model, (bytes, bytearray)):
            self.model_path: Optional[Path] = None
            source: Union[str, bytes] = bytes(model)
        else:
            self.model_path = Path(model)
            if not self.model_path.exists():
                raise FileNotFoundError(str(self.model_path))
            source = str(self.model_path)

        sess_opts = ort.SessionOptions()
        providers = list(cfg.providers) if cfg.providers is not None else None
        try:
            self.session = ort.InferenceSession(source, sess_options=sess_opts, providers=providers)
        except Exception as e:
            raise ModelLoadError(f"Could not load ONNX model {self.model_path or '<bytes>'}: {e}") from e

        self.input_name = cfg.input_name or self.session.get_inputs()[0].name
        # If output_name not provided, pick first output.
        self.output_name = cfg.output_name or self.session.get_outputs()[0].name
        logger.debug("Input %r declared shape: %s", self.input_name, self.input_shape)

    @property
    def input_shape(self) -> Optional[List[Any]]:
        """Declared shape of the model input; dynamic axes are strings or None."""
        for node in self.session.get_inputs():
            if node.name == self.input_name:
                return list(node.shape) if node.shape is not None else None
        return None

    @property
    def providers_in_use(self) -> Sequence[str]:
        # ORT returns providers in priority order for this session.
        return tuple(self.session.get_providers())

    @property
    def available_providers(self) -> Sequence[str]:
        return tuple(self._ort.get_available_providers())

    def infer(self, blob: np.ndarray) -> np.ndarray:
        outputs = self.session.run([self.output_name], {self.input_name: blob})
        return outputs[0]

    def close(self) -> None:
        # InferenceSession has no explicit close; dropping the reference frees it.
        self.session = None  # type: ignore[assignment]

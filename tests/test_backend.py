import tempfile
import unittest
from pathlib import Path

import numpy as np

from dog_kit.backends.onnxruntime_backend import OnnxRuntimeBackend
from dog_kit.detector import load_detector
from dog_kit.errors import ModelLoadError


class FakeSession:
    def __init__(self) -> None:
        self.runs = []

    def run(self, output_names, inputs):
        self.runs.append((output_names, inputs))
        return [np.zeros((1, 19, 30), dtype=np.float32)]


class TestModelLoading(unittest.TestCase):
    def test_unparsable_bytes_fail_construction(self) -> None:
        with self.assertRaises(ModelLoadError):
            load_detector(b"not an onnx model")

    def test_unparsable_file_fails_construction(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "broken.onnx"
            path.write_bytes(b"\x00\x01garbage")
            with self.assertRaises(ModelLoadError):
                load_detector(path)

    def test_missing_model_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_detector("/nonexistent/model.onnx")


class TestInfer(unittest.TestCase):
    def test_feeds_blob_to_selected_input(self) -> None:
        backend = OnnxRuntimeBackend.__new__(OnnxRuntimeBackend)
        backend.session = FakeSession()
        backend.input_name = "images"
        backend.output_name = "output0"
        blob = np.zeros((1, 3, 32, 32), dtype=np.float32)

        out = backend.infer(blob)

        self.assertEqual(out.shape, (1, 19, 30))
        names, inputs = backend.session.runs[0]
        self.assertEqual(names, ["output0"])
        self.assertEqual(list(inputs), ["images"])
        self.assertIs(inputs["images"], blob)


if __name__ == "__main__":
    unittest.main()

import json
import tempfile
import unittest
from pathlib import Path

from dog_kit.config import DetectorConfig, load_detector_config


class TestDetectorConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        cfg = DetectorConfig()
        self.assertEqual(cfg.confidence_threshold, 0.35)
        self.assertEqual(cfg.iou_threshold, 0.45)
        self.assertEqual(cfg.max_area_ratio, 0.85)
        self.assertEqual(cfg.default_input_size, (320, 320))
        self.assertEqual((cfg.bbox_tightening_width, cfg.bbox_tightening_height), (1.0, 1.0))
        self.assertIsNone(cfg.max_detections)

    def test_derived_stage_configs(self) -> None:
        cfg = DetectorConfig(confidence_threshold=0.5, iou_threshold=0.3, bbox_tightening_width=0.8, max_detections=5)
        dec = cfg.decoder_config()
        self.assertEqual(dec.conf_threshold, 0.5)
        self.assertEqual(dec.tightening_width, 0.8)
        self.assertEqual(dec.max_area_ratio, 0.85)
        nms_cfg = cfg.nms_config()
        self.assertEqual((nms_cfg.iou_threshold, nms_cfg.max_detections), (0.3, 5))

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            DetectorConfig(confidence_threshold=1.5)
        with self.assertRaises(ValueError):
            DetectorConfig(max_area_ratio=0.0)
        with self.assertRaises(ValueError):
            DetectorConfig(default_input_size=(0, 320))
        with self.assertRaises(ValueError):
            DetectorConfig(bbox_tightening_height=0.0)
        with self.assertRaises(ValueError):
            DetectorConfig(max_detections=0)


class TestLoadDetectorConfig(unittest.TestCase):
    def _write(self, tmp: str, payload: object) -> Path:
        path = Path(tmp) / "detector.json"
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    def test_partial_payload_keeps_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_detector_config(self._write(tmp, {"confidence_threshold": 0.5, "default_input_size": 416}))
        self.assertEqual(cfg.confidence_threshold, 0.5)
        self.assertEqual(cfg.default_input_size, (416, 416))
        self.assertEqual(cfg.iou_threshold, 0.45)

    def test_width_height_pair(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            cfg = load_detector_config(self._write(tmp, {"default_input_size": [640, 480], "max_detections": 10}))
        self.assertEqual(cfg.default_input_size, (640, 480))
        self.assertEqual(cfg.max_detections, 10)

    def test_rejects_bad_payloads(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            for payload in (
                {"conf": 0.5},
                {"iou_threshold": "0.5"},
                {"iou_threshold": True},
                {"default_input_size": [320]},
                {"max_detections": 2.5},
                [1, 2, 3],
            ):
                with self.subTest(payload=payload):
                    with self.assertRaises(ValueError):
                        load_detector_config(self._write(tmp, payload))

    def test_invalid_json(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "detector.json"
            path.write_text("{not json", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_detector_config(path)

    def test_missing_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_detector_config(Path("/nonexistent/detector.json"))


if __name__ == "__main__":
    unittest.main()

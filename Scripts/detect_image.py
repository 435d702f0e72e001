from __future__ import annotations

import argparse
import json
import time
from pathlib import Path

import cv2

from dog_kit import DetectorConfig, RollingTimings, load_class_names, load_detector, load_detector_config
from dog_kit.logging_utils import setup_logging
from dog_kit.metadata import DOG_BREEDS


def read_image_rgb(path: str):
    img = cv2.imread(path)
    if img is None:
        raise FileNotFoundError(f"Could not read image at path: {path}")
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)


def main() -> int:
    parser = argparse.ArgumentParser(description="Run the dog breed detector on a single image.")
    parser.add_argument("--image", required=True, help="Path to an input image.")
    parser.add_argument("--model", default="Models/yolo11n_best.onnx", help="ONNX model path (relative to project root).")
    parser.add_argument("--metadata", default=None, help="Optional metadata.yaml with class names.")
    parser.add_argument("--config", default=None, help="Optional detector config JSON.")
    parser.add_argument("--onnx-providers", default=None, help="Comma-separated ORT providers.")
    parser.add_argument("--repeats", type=int, default=1, help="Run detection N times and report rolling FPS.")
    parser.add_argument("--json", action="store_true", help="Print detections as JSON.")
    parser.add_argument("--log-level", default="INFO", help="DEBUG / INFO / WARNING / ERROR.")
    parser.add_argument("--log-file", default=None, help="Optional log file path.")
    args = parser.parse_args()

    setup_logging(args.log_level, args.log_file)

    config = load_detector_config(Path(args.config)) if args.config else DetectorConfig()
    class_names = load_class_names(args.metadata) if args.metadata else DOG_BREEDS
    providers = [p.strip() for p in args.onnx_providers.split(",")] if args.onnx_providers else None

    image = read_image_rgb(args.image)
    timings = RollingTimings()

    with load_detector(args.model, config=config, class_names=class_names, onnx_providers=providers) as detector:
        result = None
        for _ in range(max(1, args.repeats)):
            t0 = time.perf_counter()
            result = detector.detect(image)
            timings.record(result, (time.perf_counter() - t0) * 1000.0)
        shape = detector.model_shape

    if args.json:
        payload = {
            "image_size": [int(image.shape[1]), int(image.shape[0])],
            "model_input": [shape.expected_width, shape.expected_height, shape.state.value],
            "inference_time_ms": result.inference_time_ms,
            "preprocess_time_ms": result.preprocess_time_ms,
            "postprocess_time_ms": result.postprocess_time_ms,
            "detections": [
                {
                    "class_id": d.class_id,
                    "class_name": d.class_name,
                    "confidence": d.confidence,
                    "bbox": list(d.as_xyxy()),
                }
                for d in result.detections
            ],
        }
        print(json.dumps(payload, indent=2))
    else:
        for det in result.detections:
            print(det.class_name, f"{det.confidence:.2f}", tuple(round(v, 1) for v in det.as_xyxy()))
        if result.failed:
            print("Inference failed; no detections.")

    print(
        f"avg frame {timings.avg_frame_ms:.1f}ms | avg inference {timings.avg_inference_ms:.1f}ms | "
        f"FPS {timings.fps:.1f} over {len(timings.frame_ms)} frames"
    )
    return 0 if not result.failed else 1


if __name__ == "__main__":
    raise SystemExit(main())

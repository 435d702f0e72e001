import unittest

import time

from dog_kit.timing import RollingTimings, elapsed_ms
from dog_kit.types import DetectionResult


class TestRollingTimings(unittest.TestCase):
    def test_empty_history(self) -> None:
        t = RollingTimings()
        self.assertEqual(t.fps, 0.0)
        self.assertEqual(t.avg_inference_ms, 0.0)

    def test_window_keeps_last_samples(self) -> None:
        t = RollingTimings(window=30)
        for i in range(40):
            t.record(DetectionResult(inference_time_ms=float(i)), frame_ms=50.0 if i < 10 else 25.0)
        self.assertEqual(len(t.frame_ms), 30)
        self.assertEqual(t.avg_frame_ms, 25.0)
        self.assertEqual(t.fps, 40.0)
        self.assertEqual(t.avg_inference_ms, sum(range(10, 40)) / 30)

    def test_failed_inference_not_averaged(self) -> None:
        t = RollingTimings()
        t.record(DetectionResult(inference_time_ms=20.0), frame_ms=30.0)
        t.record(DetectionResult.empty(), frame_ms=10.0)
        self.assertEqual(t.avg_inference_ms, 20.0)
        self.assertEqual(t.avg_frame_ms, 20.0)

    def test_elapsed_ms(self) -> None:
        start = time.perf_counter()
        time.sleep(0.002)
        self.assertGreaterEqual(elapsed_ms(start), 1.0)

    def test_invalid_window(self) -> None:
        with self.assertRaises(ValueError):
            RollingTimings(window=0)


if __name__ == "__main__":
    unittest.main()

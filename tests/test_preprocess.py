import unittest

import numpy as np

from dog_kit.preprocess import image_size, to_chw_buffer


class TestChwBuffer(unittest.TestCase):
    def test_channel_major_order_without_resize(self) -> None:
        img = np.array(
            [
                [[255, 0, 0], [0, 255, 0]],
                [[0, 0, 255], [51, 102, 153]],
            ],
            dtype=np.uint8,
        )
        buf = to_chw_buffer(img, (2, 2))
        self.assertEqual(buf.shape, (12,))
        self.assertEqual(buf.dtype, np.float32)
        red, green, blue = buf[0:4], buf[4:8], buf[8:12]
        self.assertTrue(np.allclose(red, [1.0, 0.0, 0.0, 0.2]))
        self.assertTrue(np.allclose(green, [0.0, 1.0, 0.0, 0.4]))
        self.assertTrue(np.allclose(blue, [0.0, 0.0, 1.0, 0.6]))

    def test_stretches_to_exact_size(self) -> None:
        # 6 wide x 4 high -> 3 wide x 2 high, aspect ratio not kept
        img = np.zeros((4, 6, 3), dtype=np.uint8)
        img[:, :] = (255, 0, 51)
        buf = to_chw_buffer(img, (3, 2))
        self.assertEqual(buf.shape, (3 * 3 * 2,))
        self.assertTrue(np.allclose(buf[0:6], 1.0))
        self.assertTrue(np.allclose(buf[6:12], 0.0))
        self.assertTrue(np.allclose(buf[12:18], 0.2))

    def test_upscale_any_size(self) -> None:
        img = np.full((1, 1, 3), 255, dtype=np.uint8)
        buf = to_chw_buffer(img, (320, 320))
        self.assertEqual(buf.shape, (3 * 320 * 320,))
        self.assertTrue(np.allclose(buf, 1.0))

    def test_rgba_alpha_dropped(self) -> None:
        img = np.zeros((2, 2, 4), dtype=np.uint8)
        img[..., 3] = 255
        buf = to_chw_buffer(img, (2, 2))
        self.assertEqual(buf.shape, (12,))
        self.assertTrue(np.allclose(buf, 0.0))

    def test_rejects_bad_input(self) -> None:
        with self.assertRaises(TypeError):
            to_chw_buffer(None, (2, 2))  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            to_chw_buffer(np.zeros((4, 4), dtype=np.uint8), (2, 2))
        with self.assertRaises(ValueError):
            to_chw_buffer(np.zeros((0, 4, 3), dtype=np.uint8), (2, 2))

    def test_image_size_is_width_height(self) -> None:
        self.assertEqual(image_size(np.zeros((480, 640, 3), dtype=np.uint8)), (640, 480))


if __name__ == "__main__":
    unittest.main()

from typing import Tuple

import numpy as np


def resize_to(image: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """
    Stretch `image` to exactly `size` = (width, height).

    No letterbox: the aspect ratio is not preserved and no padding is added,
    so boxes map back with independent x/y scale factors.
    """
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for resize_to(). Install with `pip install opencv-python`.") from e

    new_w, new_h = size
    h, w = image.shape[:2]
    if (w, h) == (new_w, new_h):
        return image
    return cv2.resize(image, (new_w, new_h), interpolation=cv2.INTER_LINEAR)


def _check_rgb(image: np.ndarray) -> np.ndarray:
    if image is None or not hasattr(image, "shape"):
        raise TypeError("image must be a NumPy array (RGB).")
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected image shape (H, W, 3) or (H, W, 4), got {getattr(image, 'shape', None)}")
    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Image has an empty axis: {image.shape}")
    # RGBA -> RGB
    return image[:, :, :3]


def to_chw_buffer(image_rgb: np.ndarray, size: Tuple[int, int]) -> np.ndarray:
    """
    Resize an RGB image to `size` = (width, height) and flatten it channel-major.

    Returns a float32 array of length 3 * width * height holding every red value,
    then every green value, then every blue value, each scaled from [0, 255]
    to [0, 1].
    """

    rgb = _check_rgb(image_rgb)
    resized = resize_to(np.ascontiguousarray(rgb), size)
    chw = np.transpose(resized.astype(np.float32) / 255.0, (2, 0, 1))
    return np.ascontiguousarray(chw).reshape(-1)


def image_size(image: np.ndarray) -> Tuple[int, int]:
    """(width, height) of an HWC image."""
    return int(image.shape[1]), int(image.shape[0])

"""
Grayscale conversion for shape detection.

Reduces an interleaved RGBA pixel buffer to a 2D luminance grid.
"""

import numpy as np

from shapedetect.tracer import get_tracer, trace

LUMA_WEIGHTS = (0.299, 0.587, 0.114)


@trace(label="grayscale")
def to_grayscale(pixel_buffer, width, height):
    """
    Convert an RGBA buffer to a grayscale grid.

    Args:
        pixel_buffer: bytes-like or uint8 array holding width * height * 4
            interleaved R, G, B, A values
        width: image width in pixels
        height: image height in pixels

    Returns:
        uint8 array of shape (height, width)
    """
    if isinstance(pixel_buffer, np.ndarray):
        flat = pixel_buffer.reshape(-1)
    else:
        flat = np.frombuffer(pixel_buffer, dtype=np.uint8)

    rgba = flat.reshape(height, width, 4).astype(np.float64)

    luma = (
        LUMA_WEIGHTS[0] * rgba[:, :, 0]
        + LUMA_WEIGHTS[1] * rgba[:, :, 1]
        + LUMA_WEIGHTS[2] * rgba[:, :, 2]
    )

    # Halves round up, not to even
    gray = np.floor(luma + 0.5).clip(0, 255).astype(np.uint8)

    get_tracer().event("Grayscale grid", gray=gray, mean=float(gray.mean()) if gray.size else 0.0)

    return gray


def rgb_to_rgba(image):
    """
    Pad an (H, W, 3) RGB array with an opaque alpha channel.

    Grayscale (H, W) input is expanded to RGB first. (H, W, 4) input is
    returned as a contiguous copy.
    """
    image = np.asarray(image, dtype=np.uint8)

    if image.ndim == 2:
        image = np.stack([image, image, image], axis=2)

    if image.shape[2] == 4:
        return np.ascontiguousarray(image)

    alpha = np.full(image.shape[:2] + (1,), 255, dtype=np.uint8)
    return np.ascontiguousarray(np.concatenate([image, alpha], axis=2))

"""
Image loading for shape detection.

Decodes image files into the interleaved RGBA buffer the pipeline consumes.
"""

import os

import cv2
import numpy as np

from shapedetect.tracer import get_tracer, trace

SUPPORTED_EXTENSIONS = (".png", ".jpg", ".jpeg", ".tiff", ".tif", ".bmp")


@trace(label="load_image")
def load_image(path):
    """
    Load an image from disk.

    Returns a tuple of (image, metadata) where:
    - image: RGBA numpy array (H, W, 4), uint8
    - metadata: dict with width, height, source_path

    Raises FileNotFoundError if path does not exist.
    Raises ValueError if image cannot be decoded.
    """
    tracer = get_tracer()

    if not os.path.exists(path):
        raise FileNotFoundError(f"Image not found: {path}")

    img = cv2.imread(path, cv2.IMREAD_UNCHANGED)

    if img is None:
        raise ValueError(f"Failed to load image: {path}")

    rgba = to_rgba(img)
    height, width = rgba.shape[:2]

    tracer.event(f"Loaded image: {width}x{height}")

    metadata = {
        "width": width,
        "height": height,
        "source_path": os.path.abspath(path),
    }

    return rgba, metadata


def to_rgba(img):
    """
    Convert an OpenCV-decoded image (gray, BGR or BGRA) to RGBA.
    """
    if img.dtype != np.uint8:
        # 16-bit PNG/TIFF
        img = (img / 257).astype(np.uint8)

    if img.ndim == 2:
        return cv2.cvtColor(img, cv2.COLOR_GRAY2RGBA)
    if img.shape[2] == 4:
        return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
    return cv2.cvtColor(img, cv2.COLOR_BGR2RGBA)


def validate_image_inputs(paths):
    """
    Validate that all input paths exist and are readable images.

    Returns a list of error messages (empty if all valid).
    """
    errors = []

    for path in paths:
        if not os.path.exists(path):
            errors.append(f"File not found: {path}")
            continue

        ext = os.path.splitext(path)[1].lower()
        if ext not in SUPPORTED_EXTENSIONS:
            errors.append(f"Unsupported image format: {path}")
            continue

        try:
            img = cv2.imread(path, cv2.IMREAD_UNCHANGED)
            if img is None:
                errors.append(f"Cannot read image: {path}")
        except cv2.error as e:
            errors.append(f"Error reading {path}: {str(e)}")

    return errors

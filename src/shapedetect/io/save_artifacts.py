"""
Artifact saving utilities for shape detection.

Writes result JSON, debug images and the detection overlay.
"""

import json
import os

import cv2
import numpy as np

from shapedetect.tracer import get_tracer

# RGB colors
BOX_COLOR = (0, 255, 0)
LABEL_COLOR = (255, 255, 0)
CENTER_COLOR = (255, 0, 0)
CONTOUR_COLOR = (0, 128, 255)


def ensure_dir(path):
    """Create directory if it does not exist."""
    if path:
        os.makedirs(path, exist_ok=True)


def get_debug_dir(out_dir, image_id, stage_name):
    """
    Get the debug directory path for a stage.

    Creates the directory if it does not exist.
    """
    debug_dir = os.path.join(out_dir, "debug", image_id, stage_name)
    ensure_dir(debug_dir)
    return debug_dir


def save_image(img, path, max_edge=None):
    """
    Save an image to disk.

    Optionally downscales to max_edge while preserving aspect ratio.
    RGB and RGBA input is converted to OpenCV channel order.
    """
    tracer = get_tracer()

    if max_edge and max(img.shape[:2]) > max_edge:
        scale = max_edge / max(img.shape[:2])
        new_size = (int(img.shape[1] * scale), int(img.shape[0] * scale))
        img = cv2.resize(img, new_size, interpolation=cv2.INTER_AREA)

    if img.ndim == 3 and img.shape[2] == 4:
        img_bgr = cv2.cvtColor(img, cv2.COLOR_RGBA2BGRA)
    elif img.ndim == 3 and img.shape[2] == 3:
        img_bgr = cv2.cvtColor(img, cv2.COLOR_RGB2BGR)
    else:
        img_bgr = img

    ensure_dir(os.path.dirname(path))
    cv2.imwrite(path, img_bgr)
    tracer.event(f"Saved image: {path}")


def save_json(data, path, indent=2):
    """
    Save a dictionary or Pydantic model to JSON.
    """
    tracer = get_tracer()

    ensure_dir(os.path.dirname(path))

    if hasattr(data, "model_dump"):
        data = data.model_dump(mode="json")

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, default=str)

    tracer.event(f"Saved JSON: {path}")


def _to_bgr(base_img):
    if base_img.ndim == 2:
        return cv2.cvtColor(base_img, cv2.COLOR_GRAY2BGR)
    if base_img.shape[2] == 4:
        return cv2.cvtColor(base_img, cv2.COLOR_RGBA2BGR)
    return cv2.cvtColor(base_img, cv2.COLOR_RGB2BGR)


def _bgr(color):
    return tuple(reversed(color))


def draw_detections(base_img, shapes):
    """
    Draw detected shapes over an image.

    Each shape gets its bounding box, a "<type> (<confidence>%)" label above
    the box and a dot at its center.

    Returns an RGB image.
    """
    overlay = _to_bgr(base_img)

    for shape in shapes:
        box = shape.bounding_box
        x, y = int(round(box.x)), int(round(box.y))
        x2, y2 = int(round(box.x + box.width)), int(round(box.y + box.height))

        cv2.rectangle(overlay, (x, y), (x2, y2), _bgr(BOX_COLOR), 2)

        text = f"{shape.type.value} ({shape.confidence * 100:.0f}%)"
        cv2.putText(overlay, text, (x, max(y - 5, 10)), cv2.FONT_HERSHEY_SIMPLEX,
                    0.5, _bgr(LABEL_COLOR), 1)

        center = (int(round(shape.center.x)), int(round(shape.center.y)))
        cv2.circle(overlay, center, 3, _bgr(CENTER_COLOR), -1)

    return cv2.cvtColor(overlay, cv2.COLOR_BGR2RGB)


def draw_contours(base_img, contours, color=CONTOUR_COLOR):
    """
    Draw traced contours as closed polylines.

    Returns an RGB image.
    """
    overlay = _to_bgr(base_img)

    for contour in contours:
        if len(contour) < 2:
            continue
        pts = np.array(contour, dtype=np.int32).reshape(-1, 1, 2)
        cv2.polylines(overlay, [pts], isClosed=True, color=_bgr(color), thickness=1)

    return cv2.cvtColor(overlay, cv2.COLOR_BGR2RGB)


class DebugArtifactWriter:
    """
    Helper class to manage debug artifact writing for a single image.

    Handles creation of debug directories and provides convenience methods
    for saving various artifact types.
    """

    def __init__(self, out_dir, image_id, enabled=True, max_edge=1600):
        self.out_dir = out_dir
        self.image_id = image_id
        self.enabled = enabled
        self.max_edge = max_edge

    def get_stage_dir(self, stage_name):
        """Get the debug directory for a stage."""
        return get_debug_dir(self.out_dir, self.image_id, stage_name)

    def save_image(self, img, stage_name, filename):
        """Save an image artifact."""
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_image(img, path, max_edge=self.max_edge)

    def save_contour_overlay(self, base_img, contours, stage_name, filename):
        """Save traced contours drawn over base_img."""
        if not self.enabled:
            return
        self.save_image(draw_contours(base_img, contours), stage_name, filename)

    def save_json(self, data, stage_name, filename):
        """Save a JSON artifact."""
        if not self.enabled:
            return
        path = os.path.join(self.get_stage_dir(stage_name), filename)
        save_json(data, path)

"""Pytest fixtures for shape detection tests."""

import math
import os
import tempfile

import cv2
import numpy as np
import pytest


WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


def blank_image(width, height):
    """White RGB canvas."""
    return np.full((height, width, 3), 255, dtype=np.uint8)


def star_points(center, outer_radius, inner_radius, points=5):
    """Vertices of a star pointing up, alternating outer and inner radius."""
    cx, cy = center
    vertices = []
    for i in range(points * 2):
        radius = outer_radius if i % 2 == 0 else inner_radius
        angle = math.radians(-90 + i * 180.0 / points)
        vertices.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return vertices


def densify(vertices):
    """
    Sample the closed polygon through vertices at unit spacing.

    The result starts at the first vertex and stops one step short of it,
    like a traced contour.
    """
    points = []
    for i, a in enumerate(vertices):
        b = vertices[(i + 1) % len(vertices)]
        steps = max(1, int(math.ceil(math.hypot(b[0] - a[0], b[1] - a[1]))))
        for k in range(steps):
            t = k / steps
            points.append((a[0] + (b[0] - a[0]) * t, a[1] + (b[1] - a[1]) * t))
    return points


@pytest.fixture(autouse=True)
def reset_tracer():
    """Leave the global tracer disabled after every test."""
    yield
    from shapedetect.tracer import configure_tracer
    configure_tracer(enabled=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield tmpdir


@pytest.fixture
def to_rgba():
    """Convert an RGB image to (buffer, width, height)."""
    from shapedetect.preprocess.grayscale import rgb_to_rgba

    def convert(img):
        rgba = rgb_to_rgba(img)
        return rgba.tobytes(), rgba.shape[1], rgba.shape[0]

    return convert


@pytest.fixture
def dense_polygon():
    """Factory for unit-spaced closed polygon contours."""
    return densify


@pytest.fixture
def filled_circle_image():
    """A filled black circle of radius 100 centered in a white image."""
    img = blank_image(260, 260)
    cv2.circle(img, (130, 130), 100, BLACK, -1)
    return img


@pytest.fixture
def filled_rectangle_image():
    """A filled axis-aligned 140x80 rectangle."""
    img = blank_image(240, 180)
    cv2.rectangle(img, (50, 50), (189, 129), BLACK, -1)
    return img


@pytest.fixture
def star_image():
    """A filled five-pointed star with inner radius half the outer radius."""
    img = blank_image(240, 240)
    pts = np.array(
        [[int(round(x)), int(round(y))] for x, y in star_points((120, 125), 90, 45)],
        dtype=np.int32,
    )
    cv2.fillPoly(img, [pts.reshape(-1, 1, 2)], BLACK)
    return img


@pytest.fixture
def triangle_image():
    """A filled triangle with a horizontal base."""
    img = blank_image(260, 240)
    pts = np.array([[130, 30], [230, 200], [30, 200]], dtype=np.int32)
    cv2.fillPoly(img, [pts.reshape(-1, 1, 2)], BLACK)
    return img


@pytest.fixture
def stroked_circle_image():
    """A circle drawn with an 8 pixel stroke, giving inner and outer outlines."""
    img = blank_image(240, 240)
    cv2.circle(img, (120, 120), 70, BLACK, 8)
    return img


@pytest.fixture
def lines_image():
    """Thin horizontal and vertical strokes with no closed region."""
    img = blank_image(300, 210)
    cv2.line(img, (20, 30), (280, 30), BLACK, 2)
    cv2.line(img, (40, 80), (260, 80), BLACK, 2)
    cv2.line(img, (150, 120), (150, 190), BLACK, 2)
    return img


@pytest.fixture
def default_config():
    """Create default pipeline configuration."""
    from shapedetect.config import PipelineConfig
    return PipelineConfig()


@pytest.fixture
def rectangle_file(temp_dir, filled_rectangle_image):
    """Write the rectangle image to disk for file-based tests."""
    path = os.path.join(temp_dir, "rect.png")
    cv2.imwrite(path, cv2.cvtColor(filled_rectangle_image, cv2.COLOR_RGB2BGR))
    return path

"""
Contour metrics: area, perimeter, bounding box and center.
"""

import numpy as np

from shapedetect.models import BoundingBox, Coordinate, Metrics


def calculate_metrics(contour):
    """
    Compute metrics for an implicitly closed contour.

    Area uses the shoelace formula and perimeter the sum of segment lengths,
    both wrapping from the last point back to the first. The center is the
    mean of the points, which approximates the area centroid.

    Returns zeroed Metrics for an empty contour.
    """
    if len(contour) == 0:
        return Metrics()

    points = np.asarray(contour, dtype=np.float64).reshape(-1, 2)
    xs = points[:, 0]
    ys = points[:, 1]
    next_xs = np.roll(xs, -1)
    next_ys = np.roll(ys, -1)

    area = abs(float(np.sum(xs * next_ys - next_xs * ys)) / 2.0)
    perimeter = float(np.sum(np.hypot(next_xs - xs, next_ys - ys)))

    min_x, min_y = float(xs.min()), float(ys.min())
    max_x, max_y = float(xs.max()), float(ys.max())

    return Metrics(
        area=area,
        perimeter=perimeter,
        bounding_box=BoundingBox(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y),
        center=Coordinate(x=float(xs.mean()), y=float(ys.mean())),
    )


def polygon_area(points):
    """Absolute shoelace area of a closed polygon."""
    return calculate_metrics(points).area

"""
Shape features used for classification.

Circularity, solidity against the convex hull, corrected vertex count of the
simplified contour, and bounding box aspect ratio.
"""

import math

from shapedetect.geometry.hull import convex_hull
from shapedetect.geometry.metrics import polygon_area
from shapedetect.geometry.point import distance
from shapedetect.geometry.simplify import simplify_contour
from shapedetect.models import ShapeFeatures


def circularity(area, perimeter):
    """4*pi*area / perimeter^2, 1.0 for a perfect circle and 0 without a perimeter."""
    if perimeter <= 0:
        return 0.0
    return (4 * math.pi * area) / (perimeter * perimeter)


def solidity(area, hull_area):
    """Ratio of area to hull area, 0 when the hull is degenerate."""
    if hull_area <= 0:
        return 0.0
    return area / hull_area


def corrected_vertex_count(vertices, closed_loop_tolerance=10.0):
    """
    Count polygon vertices, not counting a repeated closing point.

    Simplifying a closed contour leaves its start and end as separate
    vertices next to each other; those count once.
    """
    count = len(vertices)
    if count > 1 and distance(vertices[0], vertices[-1]) < closed_loop_tolerance:
        count -= 1
    return count


def aspect_ratio(width, height):
    """Elongation of a box, a zero side counting as 1."""
    return max(width / (height or 1), height / (width or 1))


def compute_features(contour, metrics, config, vertices=None):
    """
    Compute ShapeFeatures for a contour.

    The hull is built from the full contour, not the simplified polygon.
    vertices is the simplified contour when the caller already has it.
    """
    hull_area = polygon_area(convex_hull(contour))

    if vertices is None:
        epsilon = config.simplify.epsilon_fraction * metrics.perimeter
        vertices = simplify_contour(contour, epsilon)

    box = metrics.bounding_box

    return ShapeFeatures(
        circularity=circularity(metrics.area, metrics.perimeter),
        hull_area=hull_area,
        solidity=solidity(metrics.area, hull_area),
        vertex_count=corrected_vertex_count(vertices, config.classify.closed_loop_tolerance),
        aspect_ratio=aspect_ratio(box.width, box.height),
    )

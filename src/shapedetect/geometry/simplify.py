"""
Contour simplification using the Ramer-Douglas-Peucker algorithm.

Reduces a dense traced contour to the vertices that carry its shape. Splits
are driven by an explicit stack of index ranges so long contours never hit
the recursion limit.
"""

import math

import numpy as np

from shapedetect.geometry.metrics import calculate_metrics
from shapedetect.tracer import get_tracer, trace


def simplify_contour(points, epsilon):
    """
    Ramer-Douglas-Peucker simplification.

    The point farthest from the segment joining the ends of a range becomes
    a vertex when its distance exceeds epsilon, and both halves are
    processed the same way. Ranges with nothing beyond epsilon keep only
    their endpoints. Ties resolve to the earliest point.

    Args:
        points: sequence of (x, y) points
        epsilon: distance threshold

    Returns:
        list of the kept input points, in order
    """
    if len(points) < 3:
        return list(points)

    points_arr = np.asarray(points, dtype=np.float64).reshape(-1, 2)
    last = len(points) - 1

    keep = np.zeros(len(points), dtype=bool)
    keep[0] = keep[last] = True

    stack = [(0, last)]
    while stack:
        first, end = stack.pop()
        if end - first < 2:
            continue

        distances = _segment_distances(points_arr[first + 1:end], points_arr[first], points_arr[end])
        offset = int(np.argmax(distances))
        max_dist = distances[offset]

        if max_dist > epsilon:
            split = first + 1 + offset
            keep[split] = True
            stack.append((split, end))
            stack.append((first, split))

    return [points[i] for i in np.flatnonzero(keep)]


@trace(label="simplify_contours")
def simplify_contours(contours, epsilon_fraction, perimeters=None):
    """
    Simplify every contour with an epsilon proportional to its perimeter.

    Perimeters already measured by the caller can be passed in, one per
    contour; otherwise they are computed here.

    Returns:
        list of simplified contours
    """
    tracer = get_tracer()

    if perimeters is None:
        perimeters = [calculate_metrics(contour).perimeter for contour in contours]

    simplified = []
    total_points_before = 0
    total_points_after = 0

    for contour, perimeter in zip(contours, perimeters):
        epsilon = epsilon_fraction * perimeter
        simple = simplify_contour(contour, epsilon)
        simplified.append(simple)
        total_points_before += len(contour)
        total_points_after += len(simple)

    reduction = 1 - (total_points_after / total_points_before) if total_points_before > 0 else 0
    tracer.event(f"Simplified: {total_points_before} -> {total_points_after} points ({reduction:.1%} reduction)")

    return simplified


def perpendicular_distance(point, line_start, line_end):
    """
    Distance from point to the segment line_start-line_end.

    The projection onto the line is clamped to the segment. A zero-length
    segment gives the distance to line_start.
    """
    dx = line_end[0] - line_start[0]
    dy = line_end[1] - line_start[1]

    if dx == 0 and dy == 0:
        return math.hypot(point[0] - line_start[0], point[1] - line_start[1])

    t = ((point[0] - line_start[0]) * dx + (point[1] - line_start[1]) * dy) / (dx * dx + dy * dy)
    t = min(max(t, 0.0), 1.0)

    closest_x = line_start[0] + t * dx
    closest_y = line_start[1] + t * dy
    return math.hypot(point[0] - closest_x, point[1] - closest_y)


def _segment_distances(points, start, end):
    """
    Vectorized perpendicular_distance for an (N, 2) array of points.
    """
    line_vec = end - start
    len_sq = float(np.dot(line_vec, line_vec))

    if len_sq == 0:
        return np.hypot(points[:, 0] - start[0], points[:, 1] - start[1])

    t = np.clip(((points - start) @ line_vec) / len_sq, 0.0, 1.0)
    nearest = start + np.outer(t, line_vec)

    return np.hypot(points[:, 0] - nearest[:, 0], points[:, 1] - nearest[:, 1])

"""
Convex hull by Andrew's monotone chain.
"""

from shapedetect.geometry.point import Point


def cross_product(o, a, b):
    """Z component of (a - o) x (b - o); positive for a counter-clockwise turn."""
    return (a[0] - o[0]) * (b[1] - o[1]) - (a[1] - o[1]) * (b[0] - o[0])


def convex_hull(points):
    """
    Compute the convex hull of a point sequence.

    Collinear points on the hull boundary are dropped. Three points or
    fewer are returned unchanged.

    Returns:
        list of Points, lower chain followed by upper chain
    """
    if len(points) <= 3:
        return [Point(p[0], p[1]) for p in points]

    sorted_points = sorted((Point(p[0], p[1]) for p in points), key=lambda p: (p.x, p.y))

    lower = []
    for p in sorted_points:
        while len(lower) >= 2 and cross_product(lower[-2], lower[-1], p) <= 0:
            lower.pop()
        lower.append(p)

    upper = []
    for p in reversed(sorted_points):
        while len(upper) >= 2 and cross_product(upper[-2], upper[-1], p) <= 0:
            upper.pop()
        upper.append(p)

    # Each chain ends where the other begins
    return lower[:-1] + upper[:-1]

"""Point type shared by the contour and geometry stages."""

import math
from typing import NamedTuple


class Point(NamedTuple):
    """Immutable 2D coordinate."""
    x: float
    y: float


def distance(a, b):
    """Euclidean distance between two points."""
    return math.hypot(a[0] - b[0], a[1] - b[1])

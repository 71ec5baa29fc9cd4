"""
Contour extraction by Moore-neighbor boundary following.

Walks connected edge pixels of a binary edge grid into ordered point
sequences. Each edge pixel is consumed by at most one walk.
"""

import numpy as np

from shapedetect.geometry.point import Point
from shapedetect.tracer import get_tracer, trace

EDGE = 255
VISITED = 128

# Clockwise from East: E, SE, S, SW, W, NW, N, NE
NEIGHBOR_OFFSETS = (
    (1, 0), (1, 1), (0, 1), (-1, 1),
    (-1, 0), (-1, -1), (0, -1), (1, -1),
)

# The first scan starts West, behind a walk that enters moving East
INITIAL_SEARCH_INDEX = 4

# Resume scanning one step past the direction pointing back where we came from
BACKTRACK_SKIP = 5


def trace_contour(grid, start, max_steps=20000):
    """
    Follow the boundary that begins at start.

    The grid is mutated: every pixel appended to the contour is marked
    VISITED. The start pixel is expected to be marked by the caller.

    Args:
        grid: uint8 edge grid (0, 255 or 128), shape (height, width)
        start: (x, y) of the first pixel
        max_steps: safety cap on walk iterations

    Returns:
        list of Points. Closed when the walk returns next to start,
        partial on a dead end or when max_steps is exceeded.
    """
    height, width = grid.shape
    start = Point(int(start[0]), int(start[1]))
    contour = [start]
    current = start
    search_index = INITIAL_SEARCH_INDEX

    for _ in range(max_steps):
        next_point = None

        for i in range(8):
            neighbor_index = (search_index + i) % 8
            dx, dy = NEIGHBOR_OFFSETS[neighbor_index]
            nx = current.x + dx
            ny = current.y + dy

            if nx < 0 or nx >= width or ny < 0 or ny >= height:
                continue

            if nx == start.x and ny == start.y:
                return contour

            if grid[ny, nx] == EDGE:
                next_point = Point(nx, ny)
                grid[ny, nx] = VISITED
                search_index = (neighbor_index + BACKTRACK_SKIP) % 8
                break

        if next_point is None:
            # Dead end, an open curve
            return contour

        contour.append(next_point)
        current = next_point

    get_tracer().event(
        "Max trace length exceeded, keeping partial walk",
        level="WARN",
        start=start,
        partial=contour,
    )
    return contour


@trace(label="find_contours")
def find_contours(edge_grid, min_length=30, max_steps=20000):
    """
    Extract all contours from an edge grid.

    Scans row-major over a private copy of the grid. Every unvisited edge
    pixel starts a new walk; contours with min_length points or fewer are
    discarded as noise.

    Returns:
        list of contours in discovery order
    """
    tracer = get_tracer()

    grid = np.array(edge_grid, dtype=np.uint8, copy=True)
    width = grid.shape[1]
    flat = grid.reshape(-1)

    contours = []
    discarded = 0

    # Pixels only ever leave the EDGE state, so candidates can be listed once
    for flat_index in np.flatnonzero(flat == EDGE):
        if flat[flat_index] != EDGE:
            continue

        y, x = divmod(int(flat_index), width)
        grid[y, x] = VISITED
        contour = trace_contour(grid, (x, y), max_steps)

        if len(contour) > min_length:
            contours.append(contour)
        else:
            discarded += 1

    tracer.event(f"{discarded} walks at or below {min_length} points discarded", contours=contours)

    return contours

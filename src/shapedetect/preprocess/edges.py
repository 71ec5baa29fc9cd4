"""
Sobel edge detection for shape detection.

Thresholds the gradient magnitude of a grayscale grid into a binary edge grid
(0 for background, 255 for edges).
"""

import numpy as np

from shapedetect.tracer import get_tracer, trace

EDGE = 255

# Kernels are indexed [ky + 1][kx + 1]
SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.float64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.float64)

BORDER_POLICIES = ("zero", "replicate")


@trace(label="sobel_edges")
def sobel_edges(gray, threshold=128.0, border_policy="zero"):
    """
    Detect edges with the Sobel operator.

    Args:
        gray: uint8 grid of shape (height, width)
        threshold: magnitude above which a pixel is an edge
        border_policy: "zero" leaves the 1-pixel border at 0 and treats
            off-grid samples as intensity 0; "replicate" samples the
            nearest in-grid pixel and thresholds the border as well

    Returns:
        uint8 grid of the same shape containing only 0 and 255
    """
    if border_policy not in BORDER_POLICIES:
        raise ValueError(f"Unknown border policy: {border_policy}")

    tracer = get_tracer()
    grid = np.asarray(gray, dtype=np.float64)
    height, width = grid.shape
    edges = np.zeros((height, width), dtype=np.uint8)

    if border_policy == "replicate":
        if height == 0 or width == 0:
            return edges
        magnitude = gradient_magnitude(np.pad(grid, 1, mode="edge"))
        edges[magnitude > threshold] = EDGE
    else:
        if height < 3 or width < 3:
            return edges
        magnitude = gradient_magnitude(grid)
        edges[1:-1, 1:-1][magnitude > threshold] = EDGE

    edge_count = int(np.count_nonzero(edges))
    tracer.event(f"Edge pixels: {edge_count} ({edge_count / edges.size:.2%})", edges=edges)

    return edges


def gradient_magnitude(grid):
    """
    Sobel gradient magnitude for every pixel that has a full 3x3 window.

    Returns an array two rows and two columns smaller than the input.
    """
    height, width = grid.shape
    gx = np.zeros((height - 2, width - 2), dtype=np.float64)
    gy = np.zeros((height - 2, width - 2), dtype=np.float64)

    for ky in range(3):
        for kx in range(3):
            window = grid[ky:ky + height - 2, kx:kx + width - 2]
            if SOBEL_X[ky, kx]:
                gx += SOBEL_X[ky, kx] * window
            if SOBEL_Y[ky, kx]:
                gy += SOBEL_Y[ky, kx] * window

    return np.sqrt(gx * gx + gy * gy)

"""
Contour filtering: noise rejection and duplicate outline resolution.

A drawn stroke has an inner and an outer edge, and each traces into its own
contour around the same center. Only the largest of such a group is kept.
"""

from typing import List, NamedTuple

from shapedetect.geometry.metrics import calculate_metrics
from shapedetect.geometry.point import distance
from shapedetect.models import Metrics
from shapedetect.tracer import get_tracer, trace


class MeasuredContour(NamedTuple):
    """A contour with its metrics computed once."""
    contour: List
    metrics: Metrics


def measure_contours(contours):
    """Pair each contour with its metrics."""
    return [MeasuredContour(contour, calculate_metrics(contour)) for contour in contours]


def reject_small_contours(measured, min_area=50.0):
    """Drop contours whose area is below min_area."""
    return [mc for mc in measured if mc.metrics.area >= min_area]


def resolve_nested_contours(measured, tolerance=15.0):
    """
    Keep only the largest contour among those sharing a center.

    A contour is dropped when another contour's center lies closer than
    tolerance and that contour has a strictly larger area. Discovery order
    is preserved.
    """
    kept = []
    for mc in measured:
        center = (mc.metrics.center.x, mc.metrics.center.y)
        is_inner = False
        for other in measured:
            if other is mc:
                continue
            other_center = (other.metrics.center.x, other.metrics.center.y)
            if distance(center, other_center) < tolerance and other.metrics.area > mc.metrics.area:
                is_inner = True
                break
        if not is_inner:
            kept.append(mc)
    return kept


@trace(label="filter_contours")
def filter_contours(measured, config):
    """
    Run noise rejection then duplicate resolution.

    Args:
        measured: list of MeasuredContour
        config: PipelineConfig

    Returns:
        surviving MeasuredContour entries in discovery order
    """
    tracer = get_tracer()

    large = reject_small_contours(measured, config.filter.min_area)
    outer = resolve_nested_contours(large, config.filter.duplicate_center_tolerance)

    tracer.event(
        f"Filtered: {len(measured)} contours -> {len(large)} above area "
        f"-> {len(outer)} after duplicate resolution"
    )

    return outer

"""Tests for contour tracing and filtering."""

import numpy as np
import pytest


def square_ring(size=9, lo=2, hi=6):
    """Edge grid holding a one pixel wide square ring."""
    grid = np.zeros((size, size), dtype=np.uint8)
    grid[lo, lo:hi + 1] = 255
    grid[hi, lo:hi + 1] = 255
    grid[lo:hi + 1, lo] = 255
    grid[lo:hi + 1, hi] = 255
    return grid


class TestTraceContour:
    """Tests for Moore-neighbor tracing of a single contour."""

    def test_closed_square_clockwise(self):
        """Test that a ring is walked clockwise and closes next to the start."""
        from shapedetect.contours.trace import VISITED, trace_contour

        grid = square_ring()
        grid[2, 2] = VISITED
        contour = trace_contour(grid, (2, 2))

        expected = (
            [(x, 2) for x in range(2, 7)]
            + [(6, y) for y in range(3, 7)]
            + [(x, 6) for x in range(5, 1, -1)]
            + [(2, y) for y in range(5, 2, -1)]
        )
        assert contour == expected
        assert not np.any(grid == 255)

    def test_consecutive_points_are_neighbors(self):
        """Test that each step moves to one of the 8 neighbors."""
        from shapedetect.contours.trace import VISITED, trace_contour

        grid = square_ring(size=20, lo=3, hi=15)
        grid[3, 3] = VISITED
        contour = trace_contour(grid, (3, 3))

        for a, b in zip(contour, contour[1:]):
            assert max(abs(a.x - b.x), abs(a.y - b.y)) == 1

    def test_dead_end_returns_partial(self):
        """Test that an open segment is returned up to its end."""
        from shapedetect.contours.trace import VISITED, trace_contour

        grid = np.zeros((7, 9), dtype=np.uint8)
        grid[3, 2:7] = 255
        grid[3, 2] = VISITED
        contour = trace_contour(grid, (2, 3))

        assert contour == [(x, 3) for x in range(2, 7)]

    def test_isolated_pixel(self):
        """Test a start pixel with no edge neighbors."""
        from shapedetect.contours.trace import VISITED, trace_contour

        grid = np.zeros((5, 5), dtype=np.uint8)
        grid[2, 2] = VISITED
        assert trace_contour(grid, (2, 2)) == [(2, 2)]

    def test_grid_border(self):
        """Test that a contour on the grid edge does not wrap around."""
        from shapedetect.contours.trace import VISITED, trace_contour

        grid = np.zeros((4, 6), dtype=np.uint8)
        grid[0, :] = 255
        grid[0, 0] = VISITED
        contour = trace_contour(grid, (0, 0))

        assert contour == [(x, 0) for x in range(6)]

    def test_step_cap_returns_partial(self, capsys):
        """Test that the safety cap keeps the partial walk and warns."""
        from shapedetect.contours.trace import VISITED, trace_contour
        from shapedetect.tracer import configure_tracer

        grid = square_ring()
        grid[2, 2] = VISITED

        configure_tracer(enabled=True, level="WARN")
        try:
            contour = trace_contour(grid, (2, 2), max_steps=3)
        finally:
            configure_tracer(enabled=False)

        assert contour == [(2, 2), (3, 2), (4, 2), (5, 2)]
        assert "Max trace length exceeded" in capsys.readouterr().err


class TestFindContours:
    """Tests for the row-major contour scan."""

    def test_two_rings(self):
        """Test that separate rings become separate contours in scan order."""
        from shapedetect.contours.trace import find_contours

        grid = np.zeros((12, 24), dtype=np.uint8)
        grid[:9, :9] = square_ring()
        grid[2:11, 12:21] = square_ring()
        contours = find_contours(grid, min_length=10)

        assert len(contours) == 2
        assert contours[0][0] == (2, 2)
        assert contours[1][0] == (14, 4)
        assert all(len(c) == 16 for c in contours)

    def test_min_length_is_exclusive(self):
        """Test that contours need more than min_length points."""
        from shapedetect.contours.trace import find_contours

        assert len(find_contours(square_ring(), min_length=15)) == 1
        assert find_contours(square_ring(), min_length=16) == []

    def test_input_grid_untouched(self):
        """Test that visited marking happens on a private copy."""
        from shapedetect.contours.trace import find_contours

        grid = square_ring()
        before = grid.copy()
        find_contours(grid, min_length=1)

        assert np.array_equal(grid, before)

    def test_each_pixel_consumed_once(self):
        """Test that no pixel appears in two contours."""
        from shapedetect.contours.trace import find_contours

        grid = np.zeros((20, 20), dtype=np.uint8)
        grid[5:15, 5:15] = 255
        contours = find_contours(grid, min_length=0)

        seen = [p for c in contours for p in c]
        assert len(seen) == len(set(seen))


class TestContourFilter:
    """Tests for noise rejection and duplicate resolution."""

    def _measured(self, area, cx, cy):
        from shapedetect.contours.filter import MeasuredContour
        from shapedetect.models import Coordinate, Metrics

        return MeasuredContour([], Metrics(area=area, center=Coordinate(x=cx, y=cy)))

    def test_small_contours_rejected(self):
        """Test that area below the minimum is dropped and the minimum kept."""
        from shapedetect.contours.filter import reject_small_contours

        measured = [self._measured(49.9, 0, 0), self._measured(50, 100, 100)]
        kept = reject_small_contours(measured, min_area=50)

        assert kept == [measured[1]]

    def test_nested_keeps_larger(self):
        """Test that a contour sharing a center with a larger one is dropped."""
        from shapedetect.contours.filter import resolve_nested_contours

        inner = self._measured(500, 50, 50)
        outer = self._measured(900, 55, 52)
        kept = resolve_nested_contours([inner, outer], tolerance=15)

        assert kept == [outer]

    def test_distant_centers_kept(self):
        """Test that separate objects both survive in discovery order."""
        from shapedetect.contours.filter import resolve_nested_contours

        a = self._measured(500, 50, 50)
        b = self._measured(900, 80, 50)
        kept = resolve_nested_contours([a, b], tolerance=15)

        assert kept == [a, b]

    def test_equal_areas_both_kept(self):
        """Test that only a strictly larger twin removes a contour."""
        from shapedetect.contours.filter import resolve_nested_contours

        a = self._measured(500, 50, 50)
        b = self._measured(500, 51, 50)

        assert resolve_nested_contours([a, b]) == [a, b]

    def test_filter_contours_uses_config(self, default_config):
        """Test both passes through the config entry point."""
        from shapedetect.contours.filter import filter_contours

        noise = self._measured(10, 0, 0)
        inner = self._measured(500, 50, 50)
        outer = self._measured(900, 50, 60)
        other = self._measured(300, 150, 50)

        kept = filter_contours([noise, inner, outer, other], default_config)
        assert kept == [outer, other]

        default_config.filter.duplicate_center_tolerance = 5
        kept = filter_contours([noise, inner, outer, other], default_config)
        assert kept == [inner, outer, other]

    def test_measure_contours(self):
        """Test pairing contours with their metrics."""
        from shapedetect.contours.filter import measure_contours

        square = [(0, 0), (10, 0), (10, 10), (0, 10)]
        measured = measure_contours([square])

        assert measured[0].contour is square
        assert measured[0].metrics.area == pytest.approx(100)

import numpy as np
import pytest

from skyswarm.core.geometry import (
    clamp_speed,
    clamp_to_bounds,
    distance,
    heading_deg,
    normalize,
    segment_intersects_circle,
)


def test_distance():
    assert distance((0, 0), (3, 4)) == pytest.approx(5.0)


def test_normalize_zero_vector_is_zero():
    np.testing.assert_array_equal(normalize([0.0, 0.0]), [0.0, 0.0])
    np.testing.assert_allclose(normalize([0.0, 5.0]), [0.0, 1.0])


def test_clamp_speed():
    np.testing.assert_allclose(clamp_speed(np.array([6.0, 8.0]), 5.0), [3.0, 4.0])
    np.testing.assert_allclose(clamp_speed(np.array([1.0, 1.0]), 5.0), [1.0, 1.0])


def test_heading_deg():
    assert heading_deg([0.0, 1.0]) == pytest.approx(90.0)
    assert heading_deg([-1.0, 0.0]) == pytest.approx(180.0)


def test_segment_crossing_circle():
    assert segment_intersects_circle((0, 0), (100, 0), (50, 0), 10)
    assert segment_intersects_circle((0, 0), (100, 0), (50, 9), 10)


def test_segment_missing_circle():
    assert not segment_intersects_circle((0, 0), (100, 0), (50, 20), 10)
    # circle lies beyond the end of the segment
    assert not segment_intersects_circle((0, 0), (30, 0), (50, 0), 10)


def test_segment_inside_circle_does_not_cross_boundary():
    assert not segment_intersects_circle((40, 0), (60, 0), (50, 0), 100)


def test_degenerate_segment():
    assert not segment_intersects_circle((5, 5), (5, 5), (0, 0), 10)


def test_clamp_to_bounds_with_margin():
    bounds = [0, 800, 0, 600]
    np.testing.assert_allclose(clamp_to_bounds((-50, 700), bounds, 20), [20, 580])
    np.testing.assert_allclose(clamp_to_bounds((400, 300), bounds, 20), [400, 300])

"""Pytest tests for the spline wall profile and the mirrored wall pair."""

import numpy as np
import pytest

from wall_profile import WallPair, WallProfile

KNOTS = np.array([[0.0, 150.0], [300.0, 190.0], [700.0, 120.0], [1100.0, 170.0], [1600.0, 160.0]])


@pytest.fixture
def profile():
    return WallProfile(KNOTS)


def test_interpolation_passes_through_knots(profile):
    for x, y in KNOTS:
        assert profile.height_at(x) == pytest.approx(y)


def test_queries_outside_span_are_clamped(profile):
    assert profile.height_at(-500.0) == 150.0
    assert profile.height_at(0.0) == 150.0
    assert profile.height_at(1600.0) == 160.0
    assert profile.height_at(2500.0) == 160.0


def test_array_queries_match_scalar_queries(profile):
    xs = np.array([-10.0, 50.0, 450.0, 1599.0, 1700.0])
    heights = profile.height_at(xs)
    assert heights.shape == xs.shape
    for x, h in zip(xs, heights):
        assert profile.height_at(x) == pytest.approx(h)


def test_first_derivative_is_continuous_at_interior_knots(profile):
    for x in KNOTS[1:-1, 0]:
        left = (profile.height_at(x) - profile.height_at(x - 1e-4)) / 1e-4
        right = (profile.height_at(x + 1e-4) - profile.height_at(x)) / 1e-4
        assert left == pytest.approx(right, abs=1e-3)


def test_natural_boundary_conditions(profile):
    start, end = profile.x_range
    assert profile.spline(start, 2) == pytest.approx(0.0, abs=1e-9)
    assert profile.spline(end, 2) == pytest.approx(0.0, abs=1e-9)


def test_points_are_sorted_by_downstream_position():
    profile = WallProfile(KNOTS[::-1])
    np.testing.assert_array_equal(profile.points, KNOTS)


def test_duplicate_downstream_positions_are_pushed_apart():
    profile = WallProfile([[0.0, 100.0], [500.0, 120.0], [500.0, 140.0], [1000.0, 100.0]])
    assert np.all(np.diff(profile.points[:, 0]) > 0)
    assert np.isfinite(profile.height_at(500.5))


def test_single_point_profile_is_flat():
    profile = WallProfile([[400.0, 250.0]])
    assert profile.height_at(0.0) == 250.0
    assert profile.height_at(1000.0) == 250.0


@pytest.mark.parametrize("points", [[], [1.0, 2.0], [[1.0, 2.0, 3.0]]])
def test_malformed_points_are_rejected(points):
    with pytest.raises(ValueError):
        WallProfile(points)


def test_set_control_points_invalidates_spline(profile):
    before = profile.height_at(450.0)
    new_points = KNOTS.copy()
    new_points[2, 1] = 300.0
    profile.set_control_points(new_points)
    assert profile.height_at(450.0) > before
    assert profile.height_at(700.0) == pytest.approx(300.0)


def test_move_point_returns_index_after_sort(profile):
    assert profile.move_point(1, (200.0, 180.0)) == 1
    assert profile.height_at(200.0) == pytest.approx(180.0)

    new_index = profile.move_point(1, (900.0, 180.0))
    assert new_index == 2
    np.testing.assert_array_equal(profile.points[new_index], [900.0, 180.0])
    assert np.all(np.diff(profile.points[:, 0]) > 0)


def test_move_point_rejects_bad_index(profile):
    with pytest.raises(IndexError):
        profile.move_point(5, (0.0, 0.0))


def test_velocity_buffer_keeps_most_recent_fifty(profile):
    for v in range(51):
        profile.record_velocity(300.0, float(v))
    buffer = profile.velocity_measurements[1]
    assert len(buffer) == 50
    assert list(buffer) == [float(v) for v in range(1, 51)]
    assert profile.average_velocity_at(1) == pytest.approx(np.mean(range(1, 51)))


def test_velocity_recorded_at_closest_point_only_when_near(profile):
    profile.record_velocity(330.0, 80.0)
    profile.record_velocity(500.0, 90.0)  # 200 px from any point
    assert list(profile.velocity_measurements[1]) == [80.0]
    assert all(len(profile.velocity_measurements[i]) == 0 for i in (0, 2, 3, 4))


def test_average_velocity_of_empty_buffer_is_zero(profile):
    assert profile.average_velocity_at(3) == 0.0


def test_sample_spans_control_points(profile):
    polyline = profile.sample(50)
    assert polyline.shape == (50, 2)
    assert polyline[0, 0] == 0.0 and polyline[-1, 0] == 1600.0
    assert polyline[0, 1] == 150.0 and polyline[-1, 1] == 160.0


def test_hit_test(profile):
    assert profile.hit_test((302.0, 193.0)) == 1
    assert profile.hit_test((320.0, 190.0)) is None


def test_default_layout():
    top = WallProfile.default(1600, 800, is_top=True)
    bottom = WallProfile.default(1600, 800, is_top=False)
    np.testing.assert_allclose(top.points[:, 0], [0, 400, 800, 1200, 1600])
    np.testing.assert_allclose(top.points[:, 1], [160, 180, 160, 140, 160], atol=1e-9)
    np.testing.assert_allclose(bottom.points[:, 1], [640, 660, 640, 620, 640], atol=1e-9)


def test_dragging_top_point_mirrors_bottom(walls):
    assert walls.begin_drag((400.0, 180.0))
    assert walls.drag_wall is walls.top
    walls.drag((420.0, 150.0))
    np.testing.assert_allclose(walls.top.points[1], [420.0, 150.0])
    np.testing.assert_allclose(walls.bottom.points[1], [420.0, 650.0])
    assert walls.bottom.height_at(420.0) == pytest.approx(650.0)


def test_dragging_bottom_point_mirrors_top(walls):
    assert walls.begin_drag((1200.0, 620.0))
    assert walls.drag_wall is walls.bottom
    walls.drag((1200.0, 700.0))
    np.testing.assert_allclose(walls.top.points[3], [1200.0, 100.0])


def test_drag_past_neighbor_keeps_walls_paired(walls):
    walls.begin_drag((400.0, 180.0))
    walls.drag((900.0, 150.0))
    assert walls.drag_index == 2
    walls.drag((950.0, 140.0))
    np.testing.assert_allclose(walls.top.points[2], [950.0, 140.0])
    np.testing.assert_allclose(walls.bottom.points[2], [950.0, 660.0])


def test_drag_without_grab_does_nothing(walls):
    before = walls.top.points.copy()
    assert not walls.begin_drag((50.0, 400.0))
    walls.drag((60.0, 410.0))
    np.testing.assert_array_equal(walls.top.points, before)


def test_end_drag_stops_moving_points(walls):
    walls.begin_drag((400.0, 180.0))
    walls.end_drag()
    walls.drag((420.0, 150.0))
    np.testing.assert_allclose(walls.top.points[1], [400.0, 180.0])


def test_reset_restores_default_layout(walls):
    walls.top.record_velocity(400.0, 100.0)
    walls.begin_drag((400.0, 180.0))
    walls.drag((420.0, 150.0))
    walls.reset(800, 400)
    assert walls.drag_wall is None
    np.testing.assert_allclose(walls.top.points[:, 0], [0, 200, 400, 600, 800])
    assert walls.top.average_velocity_at(1) == 0.0


def test_pair_records_velocity_on_both_walls(walls):
    walls.record_velocity(805.0, 120.0)
    assert walls.top.average_velocity_at(2) == 120.0
    assert walls.bottom.average_velocity_at(2) == 120.0


def test_unpaired_point_drags_without_mirror(walls):
    xs = np.linspace(0, 1600, 6)
    walls.top.set_control_points(np.column_stack((xs, np.full(6, 200.0))))
    bottom_before = walls.bottom.points.copy()

    assert walls.begin_drag((1600.0, 200.0))
    assert walls.drag_index == 5
    walls.drag((1590.0, 210.0))

    np.testing.assert_allclose(walls.top.points[5], [1590.0, 210.0])
    np.testing.assert_array_equal(walls.bottom.points, bottom_before)


def test_velocity_buffers_follow_moved_point(profile):
    profile.record_velocity(300.0, 120.0)
    profile.record_velocity(700.0, 80.0)
    new_index = profile.move_point(1, (900.0, 180.0))
    assert new_index == 2
    assert profile.average_velocity_at(2) == 120.0
    assert profile.average_velocity_at(1) == 80.0


def test_spline_is_memoized_until_a_point_moves(profile):
    spline = profile.spline
    profile.height_at(450.0)
    assert profile.spline is spline

    profile.move_point(2, (700.0, 130.0))
    rebuilt = profile.spline
    assert rebuilt is not spline
    assert profile.spline is rebuilt

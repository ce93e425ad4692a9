"""Tests for roomshell.core.plane: equation, corners, mutation."""

import numpy as np
import pytest

from roomshell.core.errors import DegenerateGeometryError, InsufficientDataError
from roomshell.core.plane import Orientation, Plane, classify_orientation, normalize_coefficients
from roomshell.core.pointcloud import BLUE, PointCloud


class TestCoefficients:
    def test_normalized_on_assignment(self):
        np.testing.assert_allclose(normalize_coefficients([2, 0, 0, -4]), [1, 0, 0, -2])

    def test_zero_normal(self):
        with pytest.raises(DegenerateGeometryError):
            normalize_coefficients([0, 0, 0, 1])

    def test_wrong_length(self):
        with pytest.raises(ValueError):
            normalize_coefficients([1, 0, 0])

    def test_unfit_plane(self):
        plane = Plane(PointCloud.from_points(np.zeros((3, 3))))
        assert not plane.has_coefficients
        with pytest.raises(InsufficientDataError):
            plane.normal

    def test_orientation(self):
        assert classify_orientation(np.array([0.1, 0.0, 0.99])) == Orientation.HORIZONTAL
        assert classify_orientation(np.array([0.7, 0.7, 0.1])) == Orientation.VERTICAL

    def test_height_at_origin(self, make_slab):
        floor = make_slab((0, 4), (0, 3), z=0.5)
        assert floor.height_at_origin() == pytest.approx(0.5)
        floor.coefficients = -floor.coefficients
        assert floor.height_at_origin() == pytest.approx(0.5)

    def test_height_of_wall_raises(self, make_wall):
        with pytest.raises(DegenerateGeometryError):
            make_wall((0, 0), (0, 3)).height_at_origin()


class TestCorners:
    def test_wall_corners(self, make_wall):
        """Wall at x=2 facing +x: u runs along +y, v points up."""
        wall = make_wall((2, 0), (2, 3), z_min=0.0, z_max=2.5)
        np.testing.assert_allclose(wall.left_up, [2, 0, 2.5], atol=1e-9)
        np.testing.assert_allclose(wall.left_down, [2, 0, 0], atol=1e-9)
        np.testing.assert_allclose(wall.right_up, [2, 3, 2.5], atol=1e-9)
        np.testing.assert_allclose(wall.right_down, [2, 3, 0], atol=1e-9)
        assert wall.top_z == pytest.approx(2.5)
        assert wall.bottom_z == pytest.approx(0.0)

    def test_corners_lie_on_plane(self, make_wall):
        wall = make_wall((0, 0), (3, 4), z_min=0.5, z_max=2.0)
        for corner in wall.corners:
            assert wall.normal @ corner + wall.d == pytest.approx(0.0, abs=1e-9)

    def test_up_is_up_for_flipped_normal(self, make_wall):
        wall = make_wall((0, 0), (0, 3), flip=True)
        assert wall.left_up[2] > wall.left_down[2]

    def test_recomputed_after_append(self, make_wall):
        wall = make_wall((0, 0), (0, 3), z_max=2.0)
        assert wall.top_z == pytest.approx(2.0)
        wall.append(PointCloud.from_points(np.array([[0.0, 1.0, 2.8]])))
        assert wall.top_z == pytest.approx(2.8)

    def test_recomputed_after_coefficient_change(self, make_wall):
        wall = make_wall((0, 0), (0, 3))
        before = wall.left_up.copy()
        wall.coefficients = -wall.coefficients
        assert not np.allclose(wall.left_up, before)

    def test_empty_plane(self):
        plane = Plane(PointCloud(), [1, 0, 0, 0])
        with pytest.raises(InsufficientDataError):
            plane.corners


class TestGroup:
    def test_assign_once(self, make_wall):
        wall = make_wall((0, 0), (0, 1))
        assert not wall.is_grouped
        wall.assign_group(3)
        wall.assign_group(3)
        assert wall.group_index == 3
        with pytest.raises(ValueError):
            wall.assign_group(4)


class TestMutation:
    def test_remove_within(self, make_wall):
        wall = make_wall((0, 0), (0, 3))
        total = len(wall)
        removed = wall.remove_within((-0.1, 0.1), (2.0, 1.0), (0.0, 2.5))
        assert removed > 0
        assert len(wall) == total - removed
        pts = wall.cloud.points
        assert not np.any((pts[:, 1] >= 1.0) & (pts[:, 1] <= 2.0))
        assert wall.right_up[1] == pytest.approx(3.0)

    def test_fill_grid(self, make_wall):
        rng = np.random.default_rng(0)
        pts = np.column_stack([np.zeros(200), rng.uniform(0, 2, 200), rng.uniform(0, 1, 200)])
        plane = Plane(PointCloud.from_points(pts), [1, 0, 0, 0], color=BLUE)
        plane.fill(point_pitch=10)
        np.testing.assert_allclose(plane.cloud.points[:, 0], 0.0, atol=1e-9)
        np.testing.assert_allclose(plane.cloud.colors, np.tile(BLUE, (len(plane), 1)))
        # Regular spacing along y
        ys = np.unique(np.round(plane.cloud.points[:, 1], 9))
        assert np.allclose(np.diff(ys), np.diff(ys)[0])

    def test_fill_with_z_limits(self, make_wall):
        wall = make_wall((0, 0), (0, 3), z_min=0.5, z_max=1.5)
        wall.fill(point_pitch=20, z_max=2.5, z_min=0.0)
        assert wall.top_z == pytest.approx(2.5)
        assert wall.bottom_z == pytest.approx(0.0)
        assert wall.cloud.points[:, 2].min() == pytest.approx(0.0)

    def test_fill_horizontal_with_z_limits(self, make_slab):
        with pytest.raises(DegenerateGeometryError):
            make_slab((0, 1), (0, 1), z=0.0).fill(10, z_max=2.0, z_min=0.0)

    def test_copy_is_independent(self, make_wall):
        wall = make_wall((0, 0), (0, 1))
        twin = wall.copy()
        twin.cloud.points[:] = 0.0
        assert wall.cloud.points[:, 1].max() == pytest.approx(1.0)

"""Tests for roomshell.utils.visualization: checkpoint views."""

import matplotlib

matplotlib.use("Agg")

import numpy as np

from roomshell.core.pointcloud import RED, PointCloud
from roomshell.utils.visualization import simple_view


class TestSimpleView:
    def test_disabled_returns_immediately(self, make_wall):
        assert simple_view("Walls", [make_wall((0, 0), (0, 1))], enabled=False) is None

    def test_snapshot_written(self, tmp_path, make_wall):
        planes = [make_wall((0, 0), (0, 1)), make_wall((0, 1), (1, 1))]
        path = simple_view("Group Planes", planes, save_dir=tmp_path / "views")
        assert path == tmp_path / "views" / "group_planes.png"
        assert path.exists()

    def test_does_not_modify_input(self, tmp_path):
        cloud = PointCloud.from_points(np.random.default_rng(0).uniform(0, 1, (50, 3)), RED)
        before_pts, before_cols = cloud.points.copy(), cloud.colors.copy()
        simple_view("cloud", cloud, save_dir=tmp_path)
        np.testing.assert_array_equal(cloud.points, before_pts)
        np.testing.assert_array_equal(cloud.colors, before_cols)

    def test_empty_is_skipped(self, tmp_path, caplog):
        with caplog.at_level("WARNING"):
            assert simple_view("empty", PointCloud(), save_dir=tmp_path) is None
        assert "nothing to show" in caplog.text

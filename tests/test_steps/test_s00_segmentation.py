"""Tests for S00: Segmentation (region growing + RANSAC)."""

import numpy as np
import pytest

from roomshell.core.errors import CollaboratorError
from roomshell.core.plane import Orientation
from roomshell.steps.s00_segmentation._region_growing import estimate_curvature, grow_regions
from roomshell.steps.s00_segmentation.contracts import SegmentationInput
from roomshell.steps.s00_segmentation.step import SegmentationStep, _classify_fit, _face_point


def _has_open3d() -> bool:
    try:
        import open3d  # noqa: F401
        return True
    except ImportError:
        return False


needs_o3d = pytest.mark.skipif(not _has_open3d(), reason="open3d not installed")


def _grid(origin, u, v, n=20, spacing=0.05) -> np.ndarray:
    s, t = np.meshgrid(np.arange(n) * spacing, np.arange(n) * spacing)
    return np.asarray(origin) + s.reshape(-1, 1) * np.asarray(u) + t.reshape(-1, 1) * np.asarray(v)


class TestCurvature:
    def test_flat(self):
        pts = _grid((0, 0, 0), (1, 0, 0), (0, 1, 0))
        np.testing.assert_allclose(estimate_curvature(pts, 10), 0.0, atol=1e-9)

    def test_blob(self):
        pts = np.random.default_rng(0).normal(size=(200, 3))
        assert estimate_curvature(pts, 20).mean() > 0.1

    def test_empty(self):
        assert len(estimate_curvature(np.empty((0, 3)), 10)) == 0


class TestGrowRegions:
    @pytest.fixture
    def scene(self):
        floor = _grid((0, 0, 0), (1, 0, 0), (0, 1, 0))
        wall = _grid((3, 0, 0), (0, 1, 0), (0, 0, 1))
        speck = _grid((6, 6, 0), (1, 0, 0), (0, 0, 1), n=4)
        points = np.vstack([floor, wall, speck])
        normals = np.vstack([
            np.tile([0, 0, 1.0], (len(floor), 1)),
            np.tile([1.0, 0, 0], (len(wall), 1)),
            np.tile([0, 1.0, 0], (len(speck), 1)),
        ])
        return points, normals

    def test_two_planes(self, scene):
        points, normals = scene
        curvature = estimate_curvature(points, 10)
        regions = grow_regions(points, normals, curvature, num_neighbours=10, min_cluster_size=50)
        assert [len(r) for r in regions] == [400, 400]
        for region in regions:
            assert len(np.unique(normals[region], axis=0)) == 1

    def test_flipped_normals_join(self, scene):
        """Normal sign from estimation is arbitrary; it must not split a plane."""
        points, normals = scene
        normals = normals.copy()
        normals[::2] *= -1
        regions = grow_regions(points, normals, estimate_curvature(points, 10), num_neighbours=10, min_cluster_size=50)
        assert len(regions) == 2

    def test_small_regions_dropped(self, scene):
        points, normals = scene
        regions = grow_regions(points, normals, estimate_curvature(points, 10), num_neighbours=10, min_cluster_size=50)
        assert all(len(r) >= 50 for r in regions)
        assert not any(i >= 800 for r in regions for i in r)


class TestFitHelpers:
    def test_classify(self):
        assert _classify_fit(np.array([0, 0, 1.0]), 10) == Orientation.HORIZONTAL
        assert _classify_fit(np.array([1.0, 0, 0]), 10) == Orientation.VERTICAL
        assert _classify_fit(np.array([1.0, 0, 1.0]) / np.sqrt(2), 10) is None

    def test_face_point(self):
        coeffs = np.array([1.0, 0, 0, 0])
        np.testing.assert_array_equal(_face_point(coeffs, np.array([2.0, 0, 0])), coeffs)
        np.testing.assert_array_equal(_face_point(coeffs, np.array([-2.0, 0, 0])), -coeffs)


class TestSegmentationStep:
    def test_missing_file(self, tmp_path, config):
        with pytest.raises(ValueError):
            SegmentationStep(config).execute(SegmentationInput(cloud_path=tmp_path / "none.ply"))

    @needs_o3d
    def test_box_room(self, room_ply, segmentation_config):
        out = SegmentationStep(segmentation_config).execute(SegmentationInput(cloud_path=room_ply))
        horizontal = [p for p in out.planes if p.orientation == Orientation.HORIZONTAL]
        vertical = [p for p in out.planes if p.orientation == Orientation.VERTICAL]
        assert len(horizontal) >= 2
        assert len(vertical) >= 4
        assert out.num_downsampled_points <= out.num_input_points
        center = np.array([2.0, 1.5, 1.25])
        for plane in vertical:
            assert np.linalg.norm(plane.normal) == pytest.approx(1.0)
            assert plane.normal @ center + plane.d > 0

    @needs_o3d
    def test_no_planes_is_fatal(self, tmp_path, segmentation_config):
        import open3d as o3d

        pcd = o3d.geometry.PointCloud()
        pcd.points = o3d.utility.Vector3dVector(np.random.default_rng(0).uniform(0, 1, (300, 3)))
        path = tmp_path / "noise.ply"
        o3d.io.write_point_cloud(str(path), pcd)
        with pytest.raises(CollaboratorError):
            SegmentationStep(segmentation_config).execute(SegmentationInput(cloud_path=path))

"""Tests for roomshell.utils.ransac: seeded plane fitting."""

import numpy as np
import pytest

from roomshell.core.errors import CollaboratorError
from roomshell.utils.ransac import fit_plane, fit_plane_svd


def _has_open3d() -> bool:
    try:
        import open3d  # noqa: F401
        return True
    except ImportError:
        return False


needs_o3d = pytest.mark.skipif(not _has_open3d(), reason="open3d not installed")


@pytest.fixture
def noisy_floor() -> np.ndarray:
    rng = np.random.default_rng(3)
    pts = np.column_stack([
        rng.uniform(0, 4, 2000),
        rng.uniform(0, 3, 2000),
        1.0 + rng.normal(0, 0.005, 2000),
    ])
    outliers = rng.uniform([0, 0, 1.5], [4, 3, 2.5], (100, 3))
    return np.vstack([pts, outliers])


class TestFitPlaneSvd:
    def test_exact_plane(self):
        pts = np.array([[0, 0, 2], [1, 0, 2], [0, 1, 2], [1, 1, 2]], dtype=float)
        coeffs = fit_plane_svd(pts)
        assert abs(coeffs[2]) == pytest.approx(1.0)
        assert coeffs[3] / coeffs[2] == pytest.approx(-2.0)

    def test_too_few_points(self):
        with pytest.raises(CollaboratorError):
            fit_plane_svd(np.zeros((2, 3)))


@needs_o3d
class TestFitPlane:
    def test_recovers_floor(self, noisy_floor):
        coeffs, inliers = fit_plane(noisy_floor, distance_threshold=0.05)
        assert abs(coeffs[2]) == pytest.approx(1.0, abs=1e-3)
        assert -coeffs[3] / coeffs[2] == pytest.approx(1.0, abs=0.01)
        assert inliers[:2000].mean() > 0.99
        assert inliers[2000:].mean() < 0.1

    def test_reference_normal_fixes_sign(self, noisy_floor):
        up, _ = fit_plane(noisy_floor, 0.05, reference_normal=np.array([0, 0, 1.0]))
        down, _ = fit_plane(noisy_floor, 0.05, reference_normal=np.array([0, 0, -1.0]))
        assert up[2] > 0
        assert down[2] < 0
        np.testing.assert_allclose(up, -down, atol=1e-9)

    def test_seeded_is_deterministic(self, noisy_floor):
        a, _ = fit_plane(noisy_floor, 0.05, seed=7)
        b, _ = fit_plane(noisy_floor, 0.05, seed=7)
        np.testing.assert_allclose(a, b, atol=1e-9)

    def test_refit_is_idempotent(self):
        """Refitting points that lie on the fitted plane returns the same plane."""
        xx, yy = np.meshgrid(np.linspace(0, 4, 41), np.linspace(0, 3, 31))
        zz = 0.1 * xx - 0.05 * yy + 1.0
        pts = np.column_stack([xx.ravel(), yy.ravel(), zz.ravel()])
        first, inliers = fit_plane(pts, 0.05)
        second, _ = fit_plane(pts[inliers], 0.05, reference_normal=first[:3])
        np.testing.assert_allclose(first, second, atol=1e-6)

    def test_low_inlier_ratio_warns(self, caplog):
        rng = np.random.default_rng(0)
        cloud = rng.uniform(0, 1, (300, 3))
        with caplog.at_level("WARNING"):
            fit_plane(cloud, 0.01, min_inlier_ratio=0.8, iterations=20)
        assert "inlier ratio" in caplog.text


class TestFitPlaneInput:
    def test_too_few_points(self):
        with pytest.raises(CollaboratorError):
            fit_plane(np.zeros((2, 3)), 0.05)

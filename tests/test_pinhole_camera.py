"""Unit tests for the pinhole camera.

Tests cover:
- Image-plane increments derived from the image size
- Primary ray origin and direction for known pixel coordinates
- Stratified, tent-jittered rays staying inside their pixel
- Configuration errors
"""

import numpy as np
import pytest
import taichi as ti


def _setup_cornell_camera(width=512, height=384):
    from pathtracer.camera.pinhole import setup_camera
    from pathtracer.scene.cornell_box import create_cornell_box_camera

    camera = create_cornell_box_camera()
    setup_camera(camera, width, height)
    return camera


class TestCameraSetup:
    """Tests for setup_camera."""

    def test_increment_vectors(self):
        """cx spans the aspect ratio and cy is perpendicular with length fov_scale."""
        from pathtracer.camera.pinhole import get_camera_info

        camera = _setup_cornell_camera(512, 384)
        info = get_camera_info()
        cx = np.array(info["cx"])
        cy = np.array(info["cy"])
        direction = np.array(info["direction"])

        assert cx == pytest.approx([512 * 0.5135 / 384, 0.0, 0.0])
        assert np.linalg.norm(cy) == pytest.approx(0.5135)
        assert cy[1] > 0.0
        assert np.dot(cy, direction) == pytest.approx(0.0, abs=1e-12)
        assert np.linalg.norm(direction) == pytest.approx(1.0)
        assert info["origin"] == pytest.approx(camera.origin)

    def test_rejects_bad_configuration(self):
        """Zero-sized images and zero directions are configuration errors."""
        from pathtracer.camera.pinhole import PinholeCamera, setup_camera

        camera = PinholeCamera(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, -1.0))
        with pytest.raises(ValueError):
            setup_camera(camera, 0, 10)
        with pytest.raises(ValueError):
            setup_camera(PinholeCamera(origin=(0.0, 0.0, 0.0), direction=(0.0, 0.0, 0.0)), 8, 8)


class TestRayGeneration:
    """Tests for get_ray and get_ray_stratified."""

    def test_corner_ray(self):
        """Pixel (0, 0), sub-pixel (0, 0) with offsets -0.5 maps to the lower-left corner."""
        from pathtracer.camera.pinhole import NEAR_OFFSET, get_camera_info, get_ray

        width, height = 64, 48
        _setup_cornell_camera(width, height)
        origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = get_ray(0, 0, 0, 0, -0.5, -0.5, width, height)
            origin[None] = ray.origin
            direction[None] = ray.direction

        test_kernel()
        info = get_camera_info()
        d = (
            np.array(info["cx"]) * -0.5
            + np.array(info["cy"]) * -0.5
            + np.array(info["direction"])
        )
        assert origin[None].to_numpy() == pytest.approx(np.array(info["origin"]) + d * NEAR_OFFSET)
        assert direction[None].to_numpy() == pytest.approx(d / np.linalg.norm(d))

    def test_centre_ray_follows_view_direction(self):
        """The ray through the image centre points along the camera direction."""
        from pathtracer.camera.pinhole import get_camera_info, get_ray

        width, height = 64, 48
        _setup_cornell_camera(width, height)
        direction = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            # Pixel 32 sub-pixel 0 with offset -0.5 lands exactly on x = width / 2
            direction[None] = get_ray(32, 24, 0, 0, -0.5, -0.5, width, height).direction

        test_kernel()
        assert direction[None].to_numpy() == pytest.approx(get_camera_info()["direction"])

    def test_stratified_rays_stay_in_pixel_neighbourhood(self):
        """Tent-jittered rays spread at most one sub-pixel beyond their pixel."""
        from pathtracer.camera.pinhole import get_camera_info, get_ray_stratified
        from pathtracer.core.sampler import seed_streams

        width, height = 16, 16
        _setup_cornell_camera(width, height)
        n = 512
        directions = ti.Vector.field(3, dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                directions[i] = get_ray_stratified(8, 8, i % 2, (i // 2) % 2, 0, width, height).direction

        seed_streams(0, 1)
        test_kernel()
        info = get_camera_info()
        cx, cy = np.array(info["cx"]), np.array(info["cy"])
        forward = np.array(info["direction"])

        dirs = directions.to_numpy()
        # Project back onto the image plane at unit distance along the view direction
        plane = dirs / (dirs @ forward)[:, None] - forward
        fx = plane @ cx / np.dot(cx, cx) + 0.5
        fy = plane @ cy / np.dot(cy, cy) + 0.5
        px, py = fx * width, fy * height
        assert np.all(px >= 8.0 - 0.5 - 1e-9)
        assert np.all(px <= 9.0 + 0.5 + 1e-9)
        assert np.all(py >= 8.0 - 0.5 - 1e-9)
        assert np.all(py <= 9.0 + 0.5 + 1e-9)
        assert px.mean() == pytest.approx(8.5, abs=0.05)
        assert py.mean() == pytest.approx(8.5, abs=0.05)

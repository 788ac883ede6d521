"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls, which would
    invalidate every field declared by the already imported modules.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data and integrator settings around each test."""
    # Import here so the fields are declared after Taichi is initialized
    from pathtracer.core.integrator import reset_integrator_settings
    from pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        reset_integrator_settings()

    _clear_all()
    yield
    _clear_all()


@pytest.fixture
def cornell_box():
    """Load the Cornell box scene and return (scene, camera)."""
    from pathtracer.scene.cornell_box import create_cornell_box_scene
    from pathtracer.scene.intersection import load_scene

    scene, camera = create_cornell_box_scene()
    load_scene(scene)
    return scene, camera

"""Pytest configuration for pathlight tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    from pathlight import runtime

    runtime.init(arch="cpu", seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene and material storage before and after each test."""
    # Import here so fields are created after Taichi is initialized
    from pathlight.materials.material import clear_materials
    from pathlight.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()

    _clear_all()
    yield
    _clear_all()

"""Pytest configuration for sphere tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. fast_math stays off
    so precondition violations produce IEEE NaN.
    """
    ti.init(arch=ti.cpu, random_seed=42, fast_math=False)
    yield
    # Note: We don't call ti.reset() here as it can cause issues
    # with subsequent tests if any cleanup happens after


@pytest.fixture
def batch():
    """A small RayBatch for host-side queries."""
    from src.spheretrace.core.batch import RayBatch

    return RayBatch(capacity=4096)

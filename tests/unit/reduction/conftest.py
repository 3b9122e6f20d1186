"""Fixtures for reduction unit tests."""

import numpy as np
import pytest


@pytest.fixture
def planar_points():
    """Random 2-D points (40 samples)."""
    np.random.seed(42)
    return np.random.randn(40, 2) * 5.0


@pytest.fixture
def planar_distances(planar_points):
    """Euclidean distance matrix of the planar points."""
    diff = planar_points[:, None, :] - planar_points[None, :, :]
    return np.sqrt(np.sum(diff * diff, axis=2))


@pytest.fixture
def high_dim_distances():
    """Euclidean distance matrix of 60 samples in 10 dimensions."""
    np.random.seed(42)
    points = np.random.randn(60, 10)
    diff = points[:, None, :] - points[None, :, :]
    return np.sqrt(np.sum(diff * diff, axis=2))

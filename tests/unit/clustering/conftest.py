"""Fixtures for clustering unit tests."""

import numpy as np
import pytest

from localfq.clustering import Box, QuadTreeNode


@pytest.fixture
def grid_points():
    """16 points on a 4x4 integer grid."""
    xs, ys = np.meshgrid(np.arange(4.0), np.arange(4.0))
    return np.column_stack([xs.ravel(), ys.ravel()])


@pytest.fixture
def random_points():
    """Random 2-D points (200 samples)."""
    np.random.seed(42)
    return np.random.randn(200, 2)


@pytest.fixture
def two_blob_embedding():
    """Two well separated 2-D blobs (30 samples each) with their labels."""
    np.random.seed(42)
    embedding = np.vstack(
        [np.random.randn(30, 2), np.random.randn(30, 2) + np.array([10.0, 10.0])]
    )
    labels = np.array([0] * 30 + [1] * 30)
    return embedding, labels


def make_leaf(n_points: int, area: float, start: int = 0, xmin: float = 0.0) -> QuadTreeNode:
    """Leaf with ``n_points`` consecutive indices in a box of the given area."""
    box = Box(xmin, xmin + area, 0.0, 1.0)
    return QuadTreeNode(box, np.arange(start, start + n_points), depth=1)


@pytest.fixture
def leaf_factory():
    """Factory for quad-tree leaves with a chosen density."""
    return make_leaf

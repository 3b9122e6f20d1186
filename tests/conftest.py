"""Pytest fixtures for localfq tests."""

import numpy as np
import pandas as pd
import pytest


def make_blob_frame(n_per_blob: int = 50, seed: int = 42) -> pd.DataFrame:
    """Three separated 4-D blobs with a per-blob labelling rule."""
    np.random.seed(seed)
    centers = np.array(
        [
            [0.0, 0.0, 0.0, 0.0],
            [8.0, 8.0, 0.0, 2.0],
            [0.0, 8.0, 8.0, 4.0],
        ]
    )
    frames = []
    for blob, center in enumerate(centers):
        features = np.random.randn(n_per_blob, 4) + center
        # Each blob uses a different feature to decide the label
        labels = (features[:, blob] > center[blob]).astype(int)
        frame = pd.DataFrame(features, columns=["loc", "churn", "complexity", "age"])
        frame["label"] = labels
        frames.append(frame)
    return pd.concat(frames, ignore_index=True)


@pytest.fixture
def training_frame() -> pd.DataFrame:
    """150 labelled samples in three blobs."""
    return make_blob_frame()


@pytest.fixture
def test_frame() -> pd.DataFrame:
    """30 held-out samples from the same distribution."""
    return make_blob_frame(n_per_blob=10, seed=7)


@pytest.fixture
def square_distance_matrix() -> np.ndarray:
    """Euclidean distances of A(0,0), B(0,10), C(10,10), D(10,0)."""
    corners = np.array([[0.0, 0.0], [0.0, 10.0], [10.0, 10.0], [10.0, 0.0]])
    return np.linalg.norm(corners[:, None, :] - corners[None, :, :], axis=2)

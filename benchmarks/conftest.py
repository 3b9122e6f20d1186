"""Shared pytest fixtures for benchmarks."""

import numpy as np
import pandas as pd
import pytest

from localfq import EuclideanDistance, LocalFQ


def _make_training_data(n_samples: int, n_features: int = 6) -> pd.DataFrame:
    np.random.seed(42)
    centers = np.random.uniform(-10, 10, size=(5, n_features))
    assignments = np.random.randint(0, 5, size=n_samples)
    features = centers[assignments] + np.random.randn(n_samples, n_features)
    frame = pd.DataFrame(features, columns=[f"metric_{i}" for i in range(n_features)])
    frame["label"] = (features[:, 0] > centers[assignments, 0]).astype(int)
    return frame


@pytest.fixture
def small_training_data() -> pd.DataFrame:
    """Small training DataFrame (200 samples)."""
    return _make_training_data(200)


@pytest.fixture
def medium_training_data() -> pd.DataFrame:
    """Medium training DataFrame (1000 samples)."""
    return _make_training_data(1000)


@pytest.fixture
def large_training_data() -> pd.DataFrame:
    """Large training DataFrame (3000 samples)."""
    return _make_training_data(3000)


@pytest.fixture
def synthetic_distances() -> np.ndarray:
    """Normalized distance matrix of 1000 samples."""
    np.random.seed(42)
    features = np.random.randn(1000, 10)
    return EuclideanDistance().fit(features).pairwise(features)


@pytest.fixture
def fitted_localfq(medium_training_data) -> LocalFQ:
    """LocalFQ fitted on the medium dataset."""
    return LocalFQ(random_state=42).fit(medium_training_data)

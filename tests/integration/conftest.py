"""Fixtures for integration tests."""

import pytest

from localfq import LocalFQ


@pytest.fixture
def fitted_localfq(training_frame) -> LocalFQ:
    """LocalFQ fitted on the three-blob training frame."""
    return LocalFQ(random_state=42).fit(training_frame, label_col="label")


@pytest.fixture
def feature_columns() -> list[str]:
    """Feature columns of the training frame."""
    return ["loc", "churn", "complexity", "age"]

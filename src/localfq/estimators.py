"""Per-cluster estimators.

Any object following scikit-learn's ``fit(X, y)`` / ``predict(X)`` contract can
serve as the local model of a cluster. The configured estimator is used as a
template and cloned once per cluster.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Protocol, runtime_checkable

import numpy as np
from sklearn.base import clone
from sklearn.dummy import DummyClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.naive_bayes import GaussianNB
from sklearn.neighbors import KNeighborsClassifier
from sklearn.tree import DecisionTreeClassifier

from localfq.exceptions import ModelTrainingError

logger = logging.getLogger(__name__)

ESTIMATORS = ("tree", "naive_bayes", "logistic", "knn", "dummy")


@runtime_checkable
class TrainableModel(Protocol):
    """Protocol for the local model trained on each cluster."""

    def fit(self, features: np.ndarray, labels: np.ndarray) -> Any:
        """Train on features of shape (n_samples, n_features) and their labels."""
        ...

    def predict(self, features: np.ndarray) -> np.ndarray:
        """Predict labels of shape (n_samples,)."""
        ...


def make_estimator(name: str = "tree", random_state: int | None = 42) -> TrainableModel:
    """Create one of the built-in estimator templates.

    Args:
        name: One of "tree", "naive_bayes", "logistic", "knn", "dummy"
        random_state: Seed for estimators that use randomness

    Returns:
        An unfitted scikit-learn classifier
    """
    if name == "tree":
        return DecisionTreeClassifier(random_state=random_state)
    if name == "naive_bayes":
        return GaussianNB()
    if name == "logistic":
        return LogisticRegression(max_iter=1000, random_state=random_state)
    if name == "knn":
        # Clusters can be as small as 5 samples
        return KNeighborsClassifier(n_neighbors=3)
    if name == "dummy":
        return DummyClassifier(strategy="most_frequent")
    raise ValueError(f"Unknown estimator '{name}'. Expected one of {ESTIMATORS}")


def train_estimator(
    template: TrainableModel,
    features: np.ndarray,
    labels: np.ndarray,
    cluster_id: int,
) -> TrainableModel:
    """Clone ``template`` and fit the clone on one cluster's data.

    Raises:
        ModelTrainingError: If the estimator fails to fit. The original
            exception is chained.
    """
    try:
        estimator = clone(template)
    except TypeError:
        # Not a scikit-learn estimator, fall back to a deep copy
        estimator = copy.deepcopy(template)

    try:
        estimator.fit(features, labels)
    except Exception as e:
        raise ModelTrainingError(cluster_id, str(e)) from e

    logger.debug(f"Trained {type(estimator).__name__} on cluster {cluster_id}")
    return estimator

"""Distance oracles used for the Fastmap embedding and fallback routing."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np
from scipy.spatial.distance import cdist


@runtime_checkable
class DistanceOracle(Protocol):
    """Protocol for distance components.

    Implementations must be symmetric and non-negative, and return zero for
    vectors that are equal on the compared attributes. ``fit`` learns whatever
    state the metric needs (e.g. attribute ranges) from the training features;
    the fitted oracle is reused unchanged at inference time.
    """

    def fit(self, features: np.ndarray) -> "DistanceOracle":
        """Learn metric state from training features of shape (n_samples, n_features)."""
        ...

    def pairwise(self, a: np.ndarray, b: np.ndarray | None = None) -> np.ndarray:
        """Distance matrix between the rows of ``a`` and ``b`` (``a`` if None)."""
        ...

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        """Distance between two single vectors."""
        ...


class EuclideanDistance:
    """Euclidean distance with optional min-max attribute normalization.

    With ``normalize=True`` every attribute is rescaled by the range seen at
    fit time, so that attributes on large scales do not dominate. Attributes
    that were constant during fit contribute nothing. Query values outside
    the fitted range are not clipped.

    Example:
        >>> oracle = EuclideanDistance().fit(train_features)
        >>> matrix = oracle.pairwise(train_features)
    """

    def __init__(self, normalize: bool = True) -> None:
        self.normalize = normalize
        self._minimum: np.ndarray | None = None
        self._scale: np.ndarray | None = None

    def fit(self, features: np.ndarray) -> "EuclideanDistance":
        """Learn per-attribute ranges.

        Args:
            features: Training features of shape (n_samples, n_features)

        Returns:
            Self
        """
        features = np.asarray(features, dtype=np.float64)
        if features.ndim != 2 or features.shape[0] == 0:
            raise ValueError(
                f"features must be a non-empty 2-D array, got shape {features.shape}"
            )
        self._minimum = features.min(axis=0)
        value_range = features.max(axis=0) - self._minimum
        scale = np.zeros_like(value_range)
        np.divide(1.0, value_range, out=scale, where=value_range > 0)
        self._scale = scale
        return self

    def _prepare(self, features: np.ndarray) -> np.ndarray:
        features = np.atleast_2d(np.asarray(features, dtype=np.float64))
        if not self.normalize:
            return features
        if self._minimum is None or self._scale is None:
            raise RuntimeError(
                "EuclideanDistance must be fitted before use. Call fit() first."
            )
        return (features - self._minimum) * self._scale

    def pairwise(self, a: np.ndarray, b: np.ndarray | None = None) -> np.ndarray:
        """Distance matrix between the rows of ``a`` and ``b``.

        Args:
            a: Array of shape (n_a, n_features)
            b: Array of shape (n_b, n_features); defaults to ``a``

        Returns:
            Distances of shape (n_a, n_b). When ``b`` is None the result is
            exactly symmetric with a zero diagonal.
        """
        left = self._prepare(a)
        if b is None:
            matrix = cdist(left, left, metric="euclidean")
            np.fill_diagonal(matrix, 0.0)
            return matrix
        return cdist(left, self._prepare(b), metric="euclidean")

    def distance(self, a: np.ndarray, b: np.ndarray) -> float:
        """Distance between two single vectors."""
        return float(self.pairwise(a, b)[0, 0])

    def __repr__(self) -> str:
        return f"EuclideanDistance(normalize={self.normalize})"

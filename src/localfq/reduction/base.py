"""Distance-based projection protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np


@runtime_checkable
class Projector(Protocol):
    """Protocol for projection components that work on distances only.

    Implementations embed objects given only their pairwise distances, and
    later embed single new objects from their distances to a fixed set of
    retained reference objects (the pivots).
    """

    def fit(self, distance_matrix: np.ndarray) -> "Projector":
        """Fit the projector on a square distance matrix.

        Args:
            distance_matrix: Symmetric distances of shape (n_samples, n_samples)

        Returns:
            Self
        """
        ...

    def transform(self, pivot_distances: np.ndarray) -> np.ndarray:
        """Project new objects from their distances to the retained pivots.

        Args:
            pivot_distances: Distances of shape (n_queries, n_pivots)

        Returns:
            Embedding of shape (n_queries, n_components)
        """
        ...

    def fit_transform(self, distance_matrix: np.ndarray) -> np.ndarray:
        """Fit the projector and return the training embedding.

        Args:
            distance_matrix: Symmetric distances of shape (n_samples, n_samples)

        Returns:
            Embedding of shape (n_samples, n_components)
        """
        ...

    @property
    def pivots_(self) -> np.ndarray:
        """Training indices of the pivots, shape (2, n_components)."""
        ...

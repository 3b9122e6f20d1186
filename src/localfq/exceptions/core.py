"""Custom exceptions for the LocalFQ engine.

This module defines a hierarchy of exceptions specific to LocalFQ, providing
clearer error messages for the training and routing paths.
"""

from __future__ import annotations


class LocalFQError(Exception):
    """Base exception for all LocalFQ operations.

    This is the root exception that all other LocalFQ exceptions inherit from.
    """


class DegenerateInputError(LocalFQError, ValueError):
    """Raised when the input cannot be embedded.

    This exception is raised when:
    - The training set is empty
    - Fewer than 2 distinct objects are available for the embedding
    - A distance matrix is not square
    """


class SchemaMismatchError(LocalFQError, ValueError):
    """Raised when a query lacks attributes the cluster models were trained on.

    Only raised in strict schema mode. In lenient mode the missing attributes
    are filled with zeros and a warning is logged instead.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__(f"Query is missing required attributes: {self.missing}")


class RoutingExhaustionError(LocalFQError):
    """Raised when there is no cluster to route a query to.

    This happens when training produced zero surviving clusters, usually because
    the minimum cluster size is too aggressive for the dataset size.
    """


class ModelTrainingError(LocalFQError):
    """Raised when the per-cluster estimator fails to train.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, cluster_id: int, message: str) -> None:
        self.cluster_id = cluster_id
        super().__init__(f"Training failed for cluster {cluster_id}: {message}")


class NotFittedError(LocalFQError, RuntimeError):
    """Raised when routing or introspection is attempted before fit()."""

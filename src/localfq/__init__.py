"""LocalFQ - local models over a Fastmap + quad-tree partition.

This package trains one model per density-homogeneous region of a 2-D Fastmap
embedding of the training data and routes new samples to the model of their
region, falling back to the region of the nearest training sample.

Usage:
    >>> from localfq import LocalFQ
    >>> import pandas as pd
    >>>
    >>> train = pd.DataFrame({
    ...     "loc": [120, 45, 300, ...],
    ...     "complexity": [12, 3, 40, ...],
    ...     "label": [1, 0, 1, ...],
    ... })
    >>>
    >>> model = LocalFQ(estimator="tree", random_state=42)
    >>> model.fit(train, label_col="label")
    >>> predictions = model.predict(test)
"""

# ============================================================================
# Main API
# ============================================================================

from localfq.localfq import LocalCluster, LocalFQ, RouteResult

# Configuration
from localfq.models.config import LocalFQConfig, LocalFQSettings, configure_logging

# Distances and estimators
from localfq.distance import DistanceOracle, EuclideanDistance
from localfq.estimators import TrainableModel, make_estimator

# Exceptions
from localfq.exceptions import (
    DegenerateInputError,
    LocalFQError,
    ModelTrainingError,
    NotFittedError,
    RoutingExhaustionError,
    SchemaMismatchError,
)

# Reduction components
from localfq import reduction

# Clustering components
from localfq import clustering

# ============================================================================
# Package metadata
# ============================================================================

__version__ = "0.1.0"

__all__ = [
    # Main API
    "LocalFQ",
    "LocalCluster",
    "RouteResult",
    # Configuration
    "LocalFQConfig",
    "LocalFQSettings",
    "configure_logging",
    # Distances and estimators
    "DistanceOracle",
    "EuclideanDistance",
    "TrainableModel",
    "make_estimator",
    # Exceptions
    "LocalFQError",
    "DegenerateInputError",
    "SchemaMismatchError",
    "RoutingExhaustionError",
    "ModelTrainingError",
    "NotFittedError",
    # Modules
    "reduction",
    "clustering",
]

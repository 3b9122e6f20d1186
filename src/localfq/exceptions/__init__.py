"""LocalFQ Exceptions Module.

This module contains exception classes used throughout the LocalFQ library.
"""

from localfq.exceptions.core import (
    DegenerateInputError,
    LocalFQError,
    ModelTrainingError,
    NotFittedError,
    RoutingExhaustionError,
    SchemaMismatchError,
)

__all__ = [
    "DegenerateInputError",
    "LocalFQError",
    "ModelTrainingError",
    "NotFittedError",
    "RoutingExhaustionError",
    "SchemaMismatchError",
]

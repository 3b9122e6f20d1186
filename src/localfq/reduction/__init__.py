"""Dimensionality reduction components for LocalFQ."""

from localfq.reduction.base import Projector
from localfq.reduction.fastmap import (
    FastmapProjector,
    fastmap,
    local_distance_matrix,
    project_point,
)

__all__ = [
    "Projector",
    "FastmapProjector",
    "fastmap",
    "local_distance_matrix",
    "project_point",
]

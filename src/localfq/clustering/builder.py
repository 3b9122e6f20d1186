"""Merge quad-tree leaves into clusters of similar density."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

from localfq.clustering.quadtree import Box, QuadTreeNode

logger = logging.getLogger(__name__)


@dataclass
class RawCluster:
    """A group of merged leaves, before any model is trained on it.

    Attributes:
        cluster_id: Identifier, assigned in density order after dropping
        density: Reference density (of the leaf that started the cluster)
        boxes: Boxes of the absorbed leaves
        indices: Indices of the points of the absorbed leaves
    """

    cluster_id: int
    density: float
    boxes: list[Box] = field(default_factory=list)
    indices: list[np.ndarray] = field(default_factory=list)

    @property
    def size(self) -> int:
        return sum(int(chunk.shape[0]) for chunk in self.indices)

    def point_indices(self) -> np.ndarray:
        """All point indices of the cluster as one array."""
        if not self.indices:
            return np.array([], dtype=np.intp)
        return np.concatenate(self.indices)

    def absorb(self, leaf: QuadTreeNode) -> None:
        self.boxes.append(leaf.box)
        self.indices.append(leaf.indices)


def density_similar(first: float, second: float, tolerance: float = 0.5) -> bool:
    """Whether two densities differ by at most ``tolerance`` of the larger one.

    Two infinite densities are similar; infinite and finite are not.
    """
    if math.isinf(first) or math.isinf(second):
        return math.isinf(first) and math.isinf(second)
    largest = max(first, second)
    if largest == 0:
        return True
    return abs(first - second) / largest <= tolerance


def build_clusters(
    leaves: list[QuadTreeNode],
    tolerance: float = 0.5,
    min_cluster_size: int = 4,
) -> list[RawCluster]:
    """Greedily merge leaves by density and drop undersized clusters.

    Leaves are visited densest first. A leaf joins the first existing cluster
    (in creation order) whose reference density is within ``tolerance``;
    otherwise it starts a new cluster. Clusters holding ``min_cluster_size``
    points or fewer are dropped and their points are not reassigned.

    Args:
        leaves: Quad-tree leaves
        tolerance: Maximum relative density difference for merging
        min_cluster_size: Size at or below which a cluster is dropped

    Returns:
        Surviving clusters with ids 0..m-1 in density order
    """
    ordered = sorted(leaves, key=lambda leaf: leaf.density, reverse=True)

    merged: list[RawCluster] = []
    for leaf in ordered:
        target = next(
            (c for c in merged if density_similar(c.density, leaf.density, tolerance)),
            None,
        )
        if target is None:
            target = RawCluster(cluster_id=len(merged), density=leaf.density)
            merged.append(target)
        target.absorb(leaf)

    surviving: list[RawCluster] = []
    for cluster in merged:
        if cluster.size <= min_cluster_size:
            logger.info(
                f"Dropping cluster {cluster.cluster_id}, only {cluster.size} instances"
            )
            continue
        cluster.cluster_id = len(surviving)
        surviving.append(cluster)

    logger.info(
        f"Merged {len(leaves)} leaves into {len(merged)} clusters, "
        f"{len(surviving)} kept"
    )
    return surviving

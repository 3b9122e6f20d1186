"""Clustering components for LocalFQ."""

from localfq.clustering.builder import RawCluster, build_clusters, density_similar
from localfq.clustering.metrics import (
    ClusterInfo,
    ClusterMetrics,
    compute_cluster_metrics,
)
from localfq.clustering.quadtree import (
    Box,
    PartitionContext,
    QuadTree,
    QuadTreeNode,
    partition,
)

__all__ = [
    # Quad-tree
    "Box",
    "PartitionContext",
    "QuadTree",
    "QuadTreeNode",
    "partition",
    # Builder
    "RawCluster",
    "build_clusters",
    "density_similar",
    # Metrics
    "ClusterInfo",
    "ClusterMetrics",
    "compute_cluster_metrics",
]

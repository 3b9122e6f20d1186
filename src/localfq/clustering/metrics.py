"""Clustering metrics and info classes."""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from localfq.clustering.quadtree import Box


@dataclass(frozen=True)
class ClusterInfo:
    """Information about a single cluster.

    Attributes:
        cluster_id: Unique identifier for the cluster
        size: Number of training samples in the cluster
        density: Reference density the cluster was merged around
        boxes: Bounding boxes of the merged quad-tree leaves
        label_counts: Number of training samples per class label
    """

    cluster_id: int
    size: int
    density: float
    boxes: tuple[Box, ...]
    label_counts: dict[object, int] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"ClusterInfo(id={self.cluster_id}, size={self.size}, "
            f"boxes={len(self.boxes)}, labels={len(self.label_counts)})"
        )


@dataclass(frozen=True)
class ClusterMetrics:
    """Overall clustering metrics.

    Attributes:
        silhouette_score: Silhouette score of the embedding (-1 to 1, higher is better)
        n_clusters: Number of surviving clusters
        n_samples: Total number of training samples
        cluster_sizes: List of cluster sizes
        n_dropped: Samples left in dropped clusters
        n_leaves: Number of quad-tree leaves (if known)
    """

    silhouette_score: float
    n_clusters: int
    n_samples: int
    cluster_sizes: list[int]
    n_dropped: int = 0
    n_leaves: int | None = None

    @property
    def min_cluster_size(self) -> int:
        """Minimum cluster size."""
        return min(self.cluster_sizes) if self.cluster_sizes else 0

    @property
    def max_cluster_size(self) -> int:
        """Maximum cluster size."""
        return max(self.cluster_sizes) if self.cluster_sizes else 0

    @property
    def avg_cluster_size(self) -> float:
        """Average cluster size."""
        if not self.cluster_sizes:
            return 0.0
        return sum(self.cluster_sizes) / len(self.cluster_sizes)

    @property
    def coverage(self) -> float:
        """Fraction of training samples that belong to a surviving cluster."""
        if self.n_samples == 0:
            return 0.0
        return (self.n_samples - self.n_dropped) / self.n_samples

    def __repr__(self) -> str:
        return (
            f"ClusterMetrics(n_clusters={self.n_clusters}, "
            f"silhouette={self.silhouette_score:.3f}, "
            f"sizes={self.min_cluster_size}-{self.max_cluster_size}, "
            f"dropped={self.n_dropped})"
        )


def compute_cluster_metrics(
    embedding: np.ndarray,
    labels: np.ndarray,
    n_leaves: int | None = None,
) -> ClusterMetrics:
    """Compute clustering metrics from an embedding and cluster labels.

    Args:
        embedding: Embedded points of shape (n_samples, n_components)
        labels: Cluster labels of shape (n_samples,); -1 marks dropped samples
        n_leaves: Optional number of quad-tree leaves

    Returns:
        ClusterMetrics object with computed metrics
    """
    from sklearn.metrics import silhouette_score as sk_silhouette_score

    n_samples = len(labels)
    unique_labels = np.unique(labels)

    # Dropped samples (-1) do not count as a cluster
    valid_labels = unique_labels[unique_labels >= 0]
    n_clusters = len(valid_labels)

    cluster_sizes = [int(np.sum(labels == label)) for label in valid_labels]
    n_dropped = int(np.sum(labels < 0))

    # Silhouette needs at least 2 clusters and more samples than clusters
    silhouette = 0.0
    if n_clusters >= 2:
        valid_mask = labels >= 0
        if valid_mask.sum() > n_clusters:
            silhouette = float(
                sk_silhouette_score(embedding[valid_mask], labels[valid_mask])
            )

    return ClusterMetrics(
        silhouette_score=silhouette,
        n_clusters=n_clusters,
        n_samples=n_samples,
        cluster_sizes=cluster_sizes,
        n_dropped=n_dropped,
        n_leaves=n_leaves,
    )

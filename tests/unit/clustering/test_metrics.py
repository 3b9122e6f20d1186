"""Tests for clustering metrics."""

import numpy as np
import pytest

from localfq.clustering import Box, ClusterInfo, ClusterMetrics, compute_cluster_metrics


class TestClusterInfo:
    """Tests for ClusterInfo."""

    def test_frozen(self):
        """Test that ClusterInfo is immutable."""
        info = ClusterInfo(cluster_id=0, size=5, density=2.0, boxes=(Box(0, 1, 0, 1),))
        with pytest.raises(AttributeError):
            info.size = 6

    def test_repr(self):
        """Test string representation."""
        info = ClusterInfo(
            cluster_id=1,
            size=5,
            density=2.0,
            boxes=(Box(0, 1, 0, 1),),
            label_counts={"yes": 3, "no": 2},
        )
        assert repr(info) == "ClusterInfo(id=1, size=5, boxes=1, labels=2)"


class TestClusterMetrics:
    """Tests for ClusterMetrics properties."""

    def test_size_statistics(self):
        """Test min, max and average cluster size."""
        metrics = ClusterMetrics(
            silhouette_score=0.5, n_clusters=3, n_samples=60, cluster_sizes=[10, 20, 30]
        )
        assert metrics.min_cluster_size == 10
        assert metrics.max_cluster_size == 30
        assert metrics.avg_cluster_size == 20.0

    def test_empty_sizes(self):
        """Test properties with no clusters."""
        metrics = ClusterMetrics(
            silhouette_score=0.0, n_clusters=0, n_samples=10, cluster_sizes=[], n_dropped=10
        )
        assert metrics.min_cluster_size == 0
        assert metrics.max_cluster_size == 0
        assert metrics.avg_cluster_size == 0.0
        assert metrics.coverage == 0.0

    def test_coverage(self):
        """Test the fraction of samples kept in clusters."""
        metrics = ClusterMetrics(
            silhouette_score=0.0, n_clusters=1, n_samples=20, cluster_sizes=[15], n_dropped=5
        )
        assert metrics.coverage == 0.75


class TestComputeClusterMetrics:
    """Tests for compute_cluster_metrics()."""

    def test_two_separated_clusters(self, two_blob_embedding):
        """Test that well separated blobs score a high silhouette."""
        embedding, labels = two_blob_embedding
        metrics = compute_cluster_metrics(embedding, labels, n_leaves=8)

        assert metrics.n_clusters == 2
        assert metrics.n_samples == 60
        assert metrics.cluster_sizes == [30, 30]
        assert metrics.n_leaves == 8
        assert metrics.silhouette_score > 0.8

    def test_dropped_samples_are_excluded(self, two_blob_embedding):
        """Test that -1 labels count as dropped, not as a cluster."""
        embedding, labels = two_blob_embedding
        labels = labels.copy()
        labels[:5] = -1
        metrics = compute_cluster_metrics(embedding, labels)

        assert metrics.n_clusters == 2
        assert metrics.n_dropped == 5
        assert metrics.cluster_sizes == [25, 30]
        assert metrics.coverage == pytest.approx(55 / 60)

    def test_single_cluster_silhouette_is_zero(self, two_blob_embedding):
        """Test that silhouette is 0 with fewer than two clusters."""
        embedding, _ = two_blob_embedding
        metrics = compute_cluster_metrics(embedding, np.zeros(60, dtype=int))
        assert metrics.silhouette_score == 0.0

    def test_all_dropped(self, two_blob_embedding):
        """Test metrics when every sample was dropped."""
        embedding, _ = two_blob_embedding
        metrics = compute_cluster_metrics(embedding, np.full(60, -1))

        assert metrics.n_clusters == 0
        assert metrics.n_dropped == 60
        assert metrics.cluster_sizes == []

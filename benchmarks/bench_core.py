"""Benchmark core LocalFQ operations."""

import numpy as np
import pytest

from localfq import LocalFQ
from localfq.clustering import build_clusters, partition
from localfq.reduction import FastmapProjector


@pytest.mark.benchmark
@pytest.mark.parametrize("data_size", [100, 500, 1000])
def bench_fastmap_fit(benchmark, synthetic_distances, data_size):
    """Benchmark Fastmap embedding of a precomputed distance matrix."""
    matrix = synthetic_distances[:data_size, :data_size]
    projector = FastmapProjector(random_state=42)

    result = benchmark(projector.fit_transform, matrix)
    assert result.shape == (data_size, 2)


@pytest.mark.benchmark
def bench_fastmap_transform(benchmark, synthetic_distances):
    """Benchmark projecting 100 queries against the retained pivots."""
    projector = FastmapProjector(random_state=42).fit(synthetic_distances)
    queries = synthetic_distances[:100, projector.pivot_order_]

    result = benchmark(projector.transform, queries)
    assert result.shape == (100, 2)


@pytest.mark.benchmark
@pytest.mark.parametrize("data_size", [1000, 10000])
def bench_quadtree_partition(benchmark, data_size):
    """Benchmark quad-tree partitioning and leaf merging."""
    np.random.seed(42)
    points = np.random.randn(data_size, 2)

    def _partition():
        return build_clusters(partition(points))

    result = benchmark(_partition)
    assert result is not None


@pytest.mark.benchmark
def bench_fit_small(benchmark, small_training_data):
    """Benchmark fit() with a small dataset (200 samples)."""
    model = LocalFQ(random_state=42)

    result = benchmark(model.fit, small_training_data)
    assert result is not None


@pytest.mark.benchmark
def bench_fit_medium(benchmark, medium_training_data):
    """Benchmark fit() with a medium dataset (1000 samples)."""
    model = LocalFQ(random_state=42)

    result = benchmark(model.fit, medium_training_data)
    assert result is not None


@pytest.mark.benchmark
def bench_fit_large_parallel(benchmark, large_training_data):
    """Benchmark fit() with a large dataset and threaded cluster training."""
    model = LocalFQ(random_state=42, n_jobs=-1)

    result = benchmark.pedantic(model.fit, args=(large_training_data,), rounds=3)
    assert result is not None


@pytest.mark.benchmark
def bench_route_single(benchmark, fitted_localfq, medium_training_data):
    """Benchmark routing a single sample."""
    row = medium_training_data.iloc[0]

    result = benchmark(fitted_localfq.route, row)
    assert result is not None


@pytest.mark.benchmark
def bench_predict_batch(benchmark, fitted_localfq, medium_training_data):
    """Benchmark predicting 1000 samples."""
    result = benchmark(fitted_localfq.predict, medium_training_data)
    assert len(result) == len(medium_training_data)

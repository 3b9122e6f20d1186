"""Main LocalFQ orchestrator class with sklearn-like API.

This module provides the LocalFQ class that trains one local model per region
of a Fastmap + quad-tree partition of the training data, and routes new
samples to the model of the region they fall into.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from dataclasses import dataclass

import numpy as np
import pandas as pd
from joblib import Parallel, delayed
from pandas.api.types import is_numeric_dtype

from localfq.clustering import (
    Box,
    ClusterInfo,
    ClusterMetrics,
    QuadTree,
    QuadTreeNode,
    RawCluster,
    build_clusters,
    compute_cluster_metrics,
)
from localfq.distance import DistanceOracle, EuclideanDistance
from localfq.estimators import TrainableModel, make_estimator, train_estimator
from localfq.exceptions import (
    DegenerateInputError,
    NotFittedError,
    RoutingExhaustionError,
    SchemaMismatchError,
)
from localfq.models.config import LocalFQConfig
from localfq.reduction import FastmapProjector, Projector

logger = logging.getLogger(__name__)

Query = pd.Series | Mapping[str, float] | np.ndarray


@dataclass(frozen=True)
class RouteResult:
    """Result of routing a sample to a cluster.

    Attributes:
        cluster_id: Assigned cluster ID
        x: First embedding coordinate of the sample
        y: Second embedding coordinate of the sample
        fallback: True if no cluster box contained the point and the nearest
            training instance decided the cluster
        distance: Distance to the nearest training instance (fallback only)
    """

    cluster_id: int
    x: float
    y: float
    fallback: bool = False
    distance: float | None = None


@dataclass(frozen=True)
class LocalCluster:
    """A surviving cluster with its trained local model.

    Attributes:
        cluster_id: Cluster ID (0..n_clusters-1, densest first)
        boxes: Bounding boxes of the merged quad-tree leaves
        indices: Positions of the cluster's training rows
        density: Reference density of the cluster
        estimator: Local model trained on the cluster's rows
    """

    cluster_id: int
    boxes: tuple[Box, ...]
    indices: np.ndarray
    density: float
    estimator: TrainableModel

    @property
    def size(self) -> int:
        return int(self.indices.shape[0])

    def contains(self, x: float, y: float) -> bool:
        """Whether any of the cluster's boxes contains (x, y)."""
        return any(box.contains(x, y) for box in self.boxes)


class LocalFQ:
    """Local models over a Fastmap embedding partitioned by a quad-tree.

    Training embeds all samples into 2-D with Fastmap, splits the plane with a
    median quad-tree, merges leaves of similar density into clusters and
    trains one estimator per cluster. Prediction re-embeds a sample from its
    distances to the four retained pivots and uses the estimator of the
    cluster whose box contains it, or of the cluster owning the nearest
    training sample if no box does.

    Example:
        >>> from localfq import LocalFQ
        >>> import pandas as pd
        >>>
        >>> df = pd.DataFrame({"loc": [...], "churn": [...], "label": [...]})
        >>> model = LocalFQ(random_state=42)
        >>> model.fit(df, label_col="label")
        >>> predictions = model.predict(test_df)
    """

    def __init__(
        self,
        estimator: TrainableModel | str | None = None,
        distance: DistanceOracle | None = None,
        projector: Projector | None = None,
        config: LocalFQConfig | None = None,
        **overrides,
    ) -> None:
        """Initialize LocalFQ.

        Args:
            estimator: Local model template cloned per cluster, or the name of
                a built-in one (default: decision tree)
            distance: Distance oracle (default: normalized Euclidean distance)
            projector: Projection component (default: FastmapProjector)
            config: Pipeline configuration (default: LocalFQConfig())
            **overrides: Individual LocalFQConfig fields overriding ``config``
        """
        base = config or LocalFQConfig()
        self._config = (
            LocalFQConfig(**{**base.model_dump(), **overrides}) if overrides else base
        )

        if estimator is None or isinstance(estimator, str):
            estimator = make_estimator(
                estimator or "tree", random_state=self._config.random_state
            )
        self._estimator = estimator

        self._distance_template: DistanceOracle = distance or EuclideanDistance(
            normalize=self._config.normalize_distances
        )
        self._projector_template: Projector = projector or FastmapProjector(
            n_components=self._config.n_components,
            random_state=self._config.random_state,
        )

        # Fitted state (None until fit() is called)
        self._feature_names: list[str] | None = None
        self._distance: DistanceOracle | None = None
        self._projector: Projector | None = None
        self._pivot_features: np.ndarray | None = None
        self._clusters: tuple[LocalCluster, ...] = ()
        self._fallback_features: np.ndarray | None = None
        self._fallback_owner: np.ndarray | None = None
        self._embedding: np.ndarray | None = None
        self._labels: np.ndarray | None = None
        self._targets: np.ndarray | None = None
        self._leaves: list[QuadTreeNode] | None = None
        self._metrics: ClusterMetrics | None = None
        self._is_fitted = False

    @property
    def config(self) -> LocalFQConfig:
        return self._config

    # =========================================================================
    # Training
    # =========================================================================

    def _select_features(self, df: pd.DataFrame, label_col: str) -> list[str]:
        names = [
            col
            for col in df.columns
            if col != label_col and is_numeric_dtype(df[col])
        ]
        if not names:
            raise DegenerateInputError(
                "DataFrame has no numeric feature columns besides the label"
            )
        return names

    def _train_clusters(
        self,
        clusters: list[RawCluster],
        features: np.ndarray,
        targets: np.ndarray,
    ) -> list[TrainableModel]:
        jobs = [
            (cluster.cluster_id, cluster.point_indices()) for cluster in clusters
        ]
        if self._config.n_jobs == 1 or len(jobs) < 2:
            return [
                train_estimator(self._estimator, features[idx], targets[idx], cid)
                for cid, idx in jobs
            ]

        logger.info(
            f"Training {len(jobs)} cluster models with n_jobs={self._config.n_jobs}"
        )
        return Parallel(n_jobs=self._config.n_jobs, prefer="threads")(
            delayed(train_estimator)(self._estimator, features[idx], targets[idx], cid)
            for cid, idx in jobs
        )

    def fit(self, df: pd.DataFrame, label_col: str = "label") -> "LocalFQ":
        """Fit the clusters and their local models on training data.

        Args:
            df: DataFrame with numeric feature columns and a label column
            label_col: Name of the label column

        Returns:
            Self

        Raises:
            ValueError: If the label column is missing
            DegenerateInputError: If the data is empty or cannot be embedded
            ModelTrainingError: If a cluster's estimator fails to train
        """
        logger.info(f"Fitting LocalFQ on {len(df)} samples")

        if label_col not in df.columns:
            raise ValueError(f"DataFrame must have a '{label_col}' column")
        if len(df) == 0:
            raise DegenerateInputError("Training set is empty")

        feature_names = self._select_features(df, label_col)
        features = df[feature_names].to_numpy(dtype=np.float64)
        targets = df[label_col].to_numpy()
        n_samples = features.shape[0]

        # Step 1: Distance matrix (label excluded)
        logger.info(f"Computing distance matrix over {len(feature_names)} features...")
        distance = copy.deepcopy(self._distance_template).fit(features)
        matrix = distance.pairwise(features)

        # Step 2: Fastmap embedding
        logger.info("Computing Fastmap embedding...")
        projector = copy.deepcopy(self._projector_template)
        embedding = projector.fit_transform(matrix)
        pivots = projector.pivots_
        pivot_order = pivots.T.ravel()
        logger.debug(f"Fastmap pivots: {pivots.tolist()}")

        # Step 3: Quad-tree over the embedding bounding box
        tree = QuadTree(
            embedding,
            Box.around(embedding),
            min_split_size=self._config.resolve_min_split_size(n_samples),
            max_depth=self._config.max_depth,
        ).build()
        leaves = tree.leaves()

        # Step 4: Merge leaves into clusters
        raw_clusters = build_clusters(
            leaves,
            tolerance=self._config.merge_tolerance,
            min_cluster_size=self._config.resolve_min_cluster_size(n_samples),
        )
        if not raw_clusters:
            logger.warning(
                "No cluster survived the minimum size threshold; "
                "routing will fail until refitted"
            )

        # Step 5: One local model per cluster
        logger.info(f"Training {len(raw_clusters)} local models...")
        estimators = self._train_clusters(raw_clusters, features, targets)

        clusters = tuple(
            LocalCluster(
                cluster_id=raw.cluster_id,
                boxes=tuple(raw.boxes),
                indices=raw.point_indices(),
                density=raw.density,
                estimator=estimator,
            )
            for raw, estimator in zip(raw_clusters, estimators)
        )

        labels = np.full(n_samples, -1, dtype=np.intp)
        for cluster in clusters:
            labels[cluster.indices] = cluster.cluster_id
        metrics = compute_cluster_metrics(embedding, labels, n_leaves=len(leaves))
        logger.info(f"Clustering complete: {metrics}")

        if clusters:
            retained = np.concatenate([cluster.indices for cluster in clusters])
            owner = np.concatenate(
                [np.full(cluster.size, cluster.cluster_id) for cluster in clusters]
            )
        else:
            retained = np.array([], dtype=np.intp)
            owner = np.array([], dtype=np.intp)

        # Step 6: Keep what routing needs
        self._feature_names = feature_names
        self._distance = distance
        self._projector = projector
        self._pivot_features = features[pivot_order].copy()
        self._clusters = clusters
        self._fallback_features = features[retained]
        self._fallback_owner = owner
        self._embedding = embedding
        self._labels = labels
        self._targets = targets
        self._leaves = leaves
        self._metrics = metrics
        self._is_fitted = True

        logger.info("LocalFQ fitting complete")
        return self

    def fit_transform(
        self, df: pd.DataFrame, label_col: str = "label"
    ) -> tuple[np.ndarray, np.ndarray]:
        """Fit and return the training embedding and cluster labels.

        Args:
            df: DataFrame with feature columns and a label column
            label_col: Name of the label column

        Returns:
            Tuple of (embedding, cluster labels); dropped samples are labelled -1
        """
        self.fit(df, label_col)
        return self.embedding_, self.labels_

    # =========================================================================
    # Inference
    # =========================================================================

    def _reformat(self, df: pd.DataFrame) -> np.ndarray:
        """Align a query frame to the training feature schema by column name."""
        feature_names = self.feature_names_
        missing = [name for name in feature_names if name not in df.columns]
        if missing:
            if self._config.strict_schema:
                raise SchemaMismatchError(missing)
            logger.warning(f"Query is missing attributes {missing}; filling with 0.0")
        aligned = df.reindex(columns=feature_names, fill_value=0.0)
        return aligned.to_numpy(dtype=np.float64)

    def _as_frame(self, query: Query) -> pd.DataFrame:
        if isinstance(query, pd.Series):
            return query.to_frame().T
        if isinstance(query, Mapping):
            return pd.DataFrame([dict(query)])
        values = np.asarray(query, dtype=np.float64).ravel()
        feature_names = self.feature_names_
        if values.shape[0] != len(feature_names):
            raise ValueError(
                f"Expected {len(feature_names)} feature values, got {values.shape[0]}"
            )
        return pd.DataFrame([values], columns=feature_names)

    def _project(self, features: np.ndarray) -> np.ndarray:
        assert self._distance is not None and self._projector is not None
        pivot_distances = self._distance.pairwise(features, self._pivot_features)
        return self._projector.transform(pivot_distances)

    def _route_row(self, row: np.ndarray, point: np.ndarray) -> RouteResult:
        x, y = float(point[0]), float(point[1])

        # Clusters are ordered by id, so the smallest id wins on overlaps
        for cluster in self._clusters:
            if cluster.contains(x, y):
                return RouteResult(cluster_id=cluster.cluster_id, x=x, y=y)

        assert self._distance is not None and self._fallback_owner is not None
        distances = self._distance.pairwise(row, self._fallback_features)[0]
        nearest = int(np.argmin(distances))
        cluster_id = int(self._fallback_owner[nearest])
        logger.debug(
            f"Point ({x:.4g}, {y:.4g}) outside all clusters, "
            f"nearest instance is in cluster {cluster_id}"
        )
        return RouteResult(
            cluster_id=cluster_id,
            x=x,
            y=y,
            fallback=True,
            distance=float(distances[nearest]),
        )

    def _route_matrix(self, features: np.ndarray) -> list[RouteResult]:
        self._check_is_fitted()
        if not self._clusters:
            raise RoutingExhaustionError(
                "No clusters available for routing; the minimum cluster size "
                "is too large for the training set"
            )
        points = self._project(features)
        return [
            self._route_row(features[i : i + 1], points[i])
            for i in range(features.shape[0])
        ]

    def route(self, query: Query) -> RouteResult:
        """Route a single sample to a cluster.

        Args:
            query: Sample as a Series or mapping keyed by feature name, or an
                array in training feature order

        Returns:
            RouteResult with the assigned cluster and embedding coordinates
        """
        self._check_is_fitted()
        return self._route_matrix(self._reformat(self._as_frame(query)))[0]

    def route_batch(self, df: pd.DataFrame) -> list[RouteResult]:
        """Route every row of a DataFrame to a cluster.

        Args:
            df: DataFrame with the training feature columns

        Returns:
            List of RouteResults in row order
        """
        self._check_is_fitted()
        if len(df) == 0:
            return []
        return self._route_matrix(self._reformat(df))

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        """Predict labels with the local model of each row's cluster.

        Args:
            df: DataFrame with the training feature columns. Extra columns
                (including the label) are ignored.

        Returns:
            Predicted labels of shape (n_samples,)
        """
        self._check_is_fitted()
        assert self._targets is not None
        if len(df) == 0:
            return np.array([], dtype=self._targets.dtype)

        features = self._reformat(df)
        routes = self._route_matrix(features)
        assignments = np.array([route.cluster_id for route in routes])
        n_fallback = sum(route.fallback for route in routes)
        if n_fallback:
            logger.debug(f"{n_fallback}/{len(routes)} samples routed by nearest instance")

        outputs = []
        for cluster_id in np.unique(assignments):
            mask = assignments == cluster_id
            estimator = self._clusters[int(cluster_id)].estimator
            outputs.append((mask, np.asarray(estimator.predict(features[mask]))))

        # Local models may return a wider type than the training labels
        dtype = np.result_type(*(values for _, values in outputs))
        predictions = np.empty(features.shape[0], dtype=dtype)
        for mask, values in outputs:
            predictions[mask] = values
        return predictions

    def predict_one(self, query: Query):
        """Predict the label of a single sample.

        Args:
            query: Sample as a Series or mapping keyed by feature name, or an
                array in training feature order

        Returns:
            Predicted label
        """
        self._check_is_fitted()
        return self.predict(self._as_frame(query))[0]

    # =========================================================================
    # State checks
    # =========================================================================

    def _check_is_fitted(self) -> None:
        """Check if model is fitted."""
        if not self._is_fitted:
            raise NotFittedError("LocalFQ must be fitted before use. Call fit() first.")

    def _ensure(self, value, name: str):
        self._check_is_fitted()
        if value is None:
            raise NotFittedError(
                f"{name} is not available. This should not happen after fit()."
            )
        return value

    # =========================================================================
    # Introspection methods
    # =========================================================================

    def get_cluster_info(self, cluster_id: int) -> ClusterInfo:
        """Get information about a specific cluster.

        Args:
            cluster_id: Cluster ID

        Returns:
            ClusterInfo with cluster details
        """
        self._check_is_fitted()
        if cluster_id < 0 or cluster_id >= len(self._clusters):
            raise ValueError(f"Invalid cluster_id: {cluster_id}")

        cluster = self._clusters[cluster_id]
        targets = self._ensure(self._targets, "Training labels")
        counts = pd.Series(targets[cluster.indices]).value_counts(sort=False)

        return ClusterInfo(
            cluster_id=cluster.cluster_id,
            size=cluster.size,
            density=cluster.density,
            boxes=cluster.boxes,
            label_counts={label: int(count) for label, count in counts.items()},
        )

    def get_clusters(self) -> list[ClusterInfo]:
        """Get information about all clusters.

        Returns:
            List of ClusterInfo objects
        """
        self._check_is_fitted()
        return [
            self.get_cluster_info(cluster_id)
            for cluster_id in range(len(self._clusters))
        ]

    def get_metrics(self) -> ClusterMetrics:
        """Get clustering metrics.

        Returns:
            ClusterMetrics object
        """
        return self._ensure(self._metrics, "Metrics")

    # =========================================================================
    # Fitted attributes (sklearn convention: trailing underscore)
    # =========================================================================

    @property
    def clusters_(self) -> tuple[LocalCluster, ...]:
        """Surviving clusters ordered by id."""
        self._check_is_fitted()
        return self._clusters

    @property
    def embedding_(self) -> np.ndarray:
        """Training embedding of shape (n_samples, 2)."""
        return self._ensure(self._embedding, "Embedding")

    @property
    def labels_(self) -> np.ndarray:
        """Cluster id per training sample, -1 for samples in dropped clusters."""
        return self._ensure(self._labels, "Labels")

    @property
    def pivots_(self) -> np.ndarray:
        """Training indices of the Fastmap pivots, shape (2, 2)."""
        projector = self._ensure(self._projector, "Projector")
        return projector.pivots_

    @property
    def pivot_features_(self) -> np.ndarray:
        """Copies of the pivot feature vectors in order A_x, B_x, A_y, B_y."""
        return self._ensure(self._pivot_features, "Pivot features")

    @property
    def feature_names_(self) -> list[str]:
        """Feature columns used for distances and local models."""
        return self._ensure(self._feature_names, "Feature names")

    @property
    def leaves_(self) -> list[QuadTreeNode]:
        """Quad-tree leaves of the training embedding."""
        return self._ensure(self._leaves, "Leaves")

    @property
    def metrics_(self) -> ClusterMetrics:
        """Clustering metrics computed during fit."""
        return self.get_metrics()

    @property
    def n_clusters_(self) -> int:
        """Number of surviving clusters."""
        self._check_is_fitted()
        return len(self._clusters)

    def __repr__(self) -> str:
        status = "fitted" if self._is_fitted else "not fitted"
        return (
            f"LocalFQ(estimator={type(self._estimator).__name__}, "
            f"distance={self._distance_template}, "
            f"projector={self._projector_template}, "
            f"status={status})"
        )

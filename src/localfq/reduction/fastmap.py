"""Fastmap projection.

Fastmap (Faloutsos & Lin, 1995) embeds N objects into k dimensions using only
their pairwise distances. Each axis is the line through two pivot objects; the
coordinate of an object is its projection onto that line by the cosine law,
computed on the distances left over after the previous axes.

Because only the distances are needed, a new object can be embedded later from
its distances to the 2k pivots alone: the same routine is run on a small
(2k + 1) x (2k + 1) matrix with the pivots pinned.
"""

from __future__ import annotations

import logging

import numpy as np

from localfq.exceptions import DegenerateInputError

logger = logging.getLogger(__name__)

RandomState = int | np.random.Generator | None


def _residual_to(
    distance_matrix: np.ndarray, embedding: np.ndarray, index: int, axis: int
) -> np.ndarray:
    """Squared residual distance from every object to ``index`` on ``axis``."""
    residual = distance_matrix[:, index] ** 2
    if axis > 0:
        diff = embedding[:, :axis] - embedding[index, :axis]
        residual = residual - np.sum(diff * diff, axis=1)
    # Round-off can leave small negatives
    return np.abs(residual)


def _farthest(
    distance_matrix: np.ndarray, embedding: np.ndarray, index: int, axis: int
) -> int:
    residual = _residual_to(distance_matrix, embedding, index, axis)
    residual[index] = -np.inf
    return int(np.argmax(residual))


def _choose_pivots(
    distance_matrix: np.ndarray,
    embedding: np.ndarray,
    axis: int,
    rng: np.random.Generator,
) -> tuple[int, int]:
    """Approximate the farthest pair: random start, then two farthest hops."""
    start = int(rng.integers(distance_matrix.shape[0]))
    first = _farthest(distance_matrix, embedding, start, axis)
    second = _farthest(distance_matrix, embedding, first, axis)
    return first, second


def _validate(distance_matrix: np.ndarray) -> np.ndarray:
    matrix = np.asarray(distance_matrix, dtype=np.float64)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise DegenerateInputError(
            f"Distance matrix must be square, got shape {matrix.shape}"
        )
    if matrix.shape[0] < 2:
        raise DegenerateInputError(
            f"Fastmap needs at least 2 objects, got {matrix.shape[0]}"
        )
    return matrix


def fastmap(
    distance_matrix: np.ndarray,
    n_components: int = 2,
    pivots: np.ndarray | None = None,
    random_state: RandomState = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Embed objects into ``n_components`` dimensions from their distances.

    Args:
        distance_matrix: Symmetric distances of shape (n, n)
        n_components: Number of target dimensions k
        pivots: Optional fixed pivot layout of shape (2, k). Row 0 holds the
            A endpoints and row 1 the B endpoints of each axis. When given, no
            pivot search is performed.
        random_state: Seed or Generator for the pivot search start object

    Returns:
        Tuple of (embedding of shape (n, k), pivots of shape (2, k))

    Raises:
        DegenerateInputError: If the matrix is not square, has fewer than 2
            objects, or (when searching pivots) holds fewer than 2 distinct
            objects.
    """
    matrix = _validate(distance_matrix)
    n_objects = matrix.shape[0]

    if pivots is None:
        if not np.any(matrix > 0):
            raise DegenerateInputError(
                "Fastmap needs at least 2 distinct objects, all distances are zero"
            )
        layout = np.zeros((2, n_components), dtype=np.intp)
        rng = np.random.default_rng(random_state)
    else:
        layout = np.array(pivots, dtype=np.intp, copy=True)
        if layout.shape != (2, n_components):
            raise ValueError(
                f"pivots must have shape (2, {n_components}), got {layout.shape}"
            )
        rng = None

    embedding = np.zeros((n_objects, n_components), dtype=np.float64)

    for axis in range(n_components):
        if rng is not None:
            layout[:, axis] = _choose_pivots(matrix, embedding, axis, rng)

        pivot_a, pivot_b = int(layout[0, axis]), int(layout[1, axis])
        to_a = _residual_to(matrix, embedding, pivot_a, axis)
        d_ab = to_a[pivot_b]

        if d_ab == 0:
            # Nothing left to explain on this axis, coordinates stay 0
            logger.debug(f"Fastmap axis {axis} is degenerate, skipping")
            continue

        to_b = _residual_to(matrix, embedding, pivot_b, axis)
        embedding[:, axis] = (to_a + d_ab - to_b) / (2.0 * np.sqrt(d_ab))
        logger.debug(
            f"Fastmap axis {axis}: pivots=({pivot_a}, {pivot_b}), "
            f"pivot distance={np.sqrt(d_ab):.6g}"
        )

    return embedding, layout


def pinned_pivots(n_components: int = 2) -> np.ndarray:
    """Pivot layout of a local matrix: query at 0, then A_0, B_0, A_1, B_1, ..."""
    axes = np.arange(n_components, dtype=np.intp)
    return np.vstack([1 + 2 * axes, 2 + 2 * axes])


def local_distance_matrix(
    query_distances: np.ndarray, pivot_distances: np.ndarray
) -> np.ndarray:
    """Assemble the (2k + 1) x (2k + 1) matrix for single-object projection.

    Args:
        query_distances: Distances from the query to the pivots, shape (2k,),
            ordered A_0, B_0, A_1, B_1, ...
        pivot_distances: Pivot-to-pivot distances in the same order, shape (2k, 2k)

    Returns:
        Local distance matrix with the query at index 0
    """
    query_distances = np.asarray(query_distances, dtype=np.float64).ravel()
    size = query_distances.shape[0] + 1
    local = np.zeros((size, size), dtype=np.float64)
    local[0, 1:] = query_distances
    local[1:, 0] = query_distances
    local[1:, 1:] = pivot_distances
    return local


def project_point(local_matrix: np.ndarray, n_components: int = 2) -> np.ndarray:
    """Embed the object at index 0 of a local matrix against pinned pivots.

    Args:
        local_matrix: Matrix built by :func:`local_distance_matrix`
        n_components: Number of target dimensions k

    Returns:
        Coordinates of shape (k,)
    """
    embedding, _ = fastmap(
        local_matrix, n_components=n_components, pivots=pinned_pivots(n_components)
    )
    return embedding[0]


class FastmapProjector:
    """Fastmap projection with retained pivots.

    Example:
        >>> projector = FastmapProjector(n_components=2, random_state=42)
        >>> embedding = projector.fit_transform(distance_matrix)
        >>> coords = projector.transform(query_to_pivot_distances)
    """

    def __init__(self, n_components: int = 2, random_state: RandomState = 42) -> None:
        """Initialize Fastmap projector.

        Args:
            n_components: Number of target dimensions (default: 2)
            random_state: Seed or Generator for pivot selection (default: 42)
        """
        self.n_components = n_components
        self.random_state = random_state
        self._embedding: np.ndarray | None = None
        self._pivots: np.ndarray | None = None
        self._pivot_distances: np.ndarray | None = None

    def fit(self, distance_matrix: np.ndarray) -> "FastmapProjector":
        """Fit the projector on a distance matrix.

        Args:
            distance_matrix: Symmetric distances of shape (n_samples, n_samples)

        Returns:
            Self
        """
        matrix = np.asarray(distance_matrix, dtype=np.float64)
        embedding, pivots = fastmap(
            matrix, n_components=self.n_components, random_state=self.random_state
        )
        order = pivots.T.ravel()
        self._embedding = embedding
        self._pivots = pivots
        self._pivot_distances = matrix[np.ix_(order, order)].copy()
        return self

    def fit_transform(self, distance_matrix: np.ndarray) -> np.ndarray:
        """Fit the projector and return the training embedding.

        Args:
            distance_matrix: Symmetric distances of shape (n_samples, n_samples)

        Returns:
            Embedding of shape (n_samples, n_components)
        """
        return self.fit(distance_matrix).embedding_

    def transform(self, pivot_distances: np.ndarray) -> np.ndarray:
        """Project new objects from their distances to the retained pivots.

        Args:
            pivot_distances: Distances of shape (n_queries, 2 * n_components),
                columns ordered as :attr:`pivot_order_`

        Returns:
            Embedding of shape (n_queries, n_components)
        """
        if self._pivot_distances is None:
            raise RuntimeError(
                "Projector must be fitted before transform. Call fit() first."
            )
        rows = np.atleast_2d(np.asarray(pivot_distances, dtype=np.float64))
        if rows.shape[1] != 2 * self.n_components:
            raise ValueError(
                f"Expected {2 * self.n_components} pivot distances per query, "
                f"got {rows.shape[1]}"
            )
        return np.vstack(
            [
                project_point(
                    local_distance_matrix(row, self._pivot_distances),
                    self.n_components,
                )
                for row in rows
            ]
        )

    def _ensure_fitted(self) -> None:
        if self._embedding is None:
            raise RuntimeError("Projector must be fitted first.")

    @property
    def embedding_(self) -> np.ndarray:
        """Training embedding of shape (n_samples, n_components)."""
        self._ensure_fitted()
        assert self._embedding is not None
        return self._embedding

    @property
    def pivots_(self) -> np.ndarray:
        """Training indices of the pivots, shape (2, n_components)."""
        self._ensure_fitted()
        assert self._pivots is not None
        return self._pivots

    @property
    def pivot_order_(self) -> np.ndarray:
        """Pivot training indices in local-matrix order A_0, B_0, A_1, B_1, ..."""
        return self.pivots_.T.ravel()

    @property
    def pivot_distances_(self) -> np.ndarray:
        """Pivot-to-pivot distances in :attr:`pivot_order_` order."""
        self._ensure_fitted()
        assert self._pivot_distances is not None
        return self._pivot_distances

    def __repr__(self) -> str:
        return (
            f"FastmapProjector(n_components={self.n_components}, "
            f"random_state={self.random_state})"
        )

"""Quad-tree partitioning of a 2-D embedding.

The tree is split recursively at the median x and median y of the points in a
node. Leaves carry a density (points per unit area) that the cluster builder
uses to merge them into regions.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

import numpy as np

logger = logging.getLogger(__name__)

QUADRANTS = ("sw", "se", "nw", "ne")


@dataclass(frozen=True)
class Box:
    """Axis-aligned bounding box, closed on every side."""

    xmin: float
    xmax: float
    ymin: float
    ymax: float

    @property
    def width(self) -> float:
        return self.xmax - self.xmin

    @property
    def height(self) -> float:
        return self.ymax - self.ymin

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, x: float, y: float) -> bool:
        """Whether (x, y) lies inside the box or on its boundary."""
        return self.xmin <= x <= self.xmax and self.ymin <= y <= self.ymax

    def as_list(self) -> list[float]:
        return [self.xmin, self.xmax, self.ymin, self.ymax]

    @classmethod
    def around(cls, points: np.ndarray) -> "Box":
        """Tight bounding box of an (n, 2) point array."""
        lower = points.min(axis=0)
        upper = points.max(axis=0)
        return cls(float(lower[0]), float(upper[0]), float(lower[1]), float(upper[1]))


@dataclass
class QuadTreeNode:
    """A node of the quad-tree.

    Attributes:
        box: Region covered by the node
        indices: Indices (into the partitioned point array) of the points inside
        depth: Distance from the root
        children: Non-empty child quadrants keyed by "sw", "se", "nw", "ne"
    """

    box: Box
    indices: np.ndarray
    depth: int = 0
    children: dict[str, "QuadTreeNode"] = field(default_factory=dict)

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def size(self) -> int:
        return int(self.indices.shape[0])

    @property
    def density(self) -> float:
        """Points per unit area; a zero-area box is infinitely dense."""
        area = self.box.area
        if area <= 0:
            return math.inf
        return self.size / area

    def __repr__(self) -> str:
        return (
            f"QuadTreeNode(depth={self.depth}, size={self.size}, "
            f"density={self.density:.4g}, leaf={self.is_leaf})"
        )


@dataclass
class PartitionContext:
    """State shared across one recursive build.

    Attributes:
        points: The full (n, 2) point array
        min_split_size: Nodes with this many points or fewer are not split
        max_depth: Nodes at this depth are not split
        leaves: Leaves collected in depth-first order
        n_nodes: Number of nodes created so far
    """

    points: np.ndarray
    min_split_size: int
    max_depth: int
    leaves: list[QuadTreeNode] = field(default_factory=list)
    n_nodes: int = 0


def _split(node: QuadTreeNode, context: PartitionContext) -> dict[str, QuadTreeNode]:
    coords = context.points[node.indices]
    mid_x = float(np.median(coords[:, 0]))
    mid_y = float(np.median(coords[:, 1]))

    # Ties on the median go west / south
    west = coords[:, 0] <= mid_x
    south = coords[:, 1] <= mid_y
    masks = {
        "sw": west & south,
        "se": ~west & south,
        "nw": west & ~south,
        "ne": ~west & ~south,
    }
    box = node.box
    boxes = {
        "sw": Box(box.xmin, mid_x, box.ymin, mid_y),
        "se": Box(mid_x, box.xmax, box.ymin, mid_y),
        "nw": Box(box.xmin, mid_x, mid_y, box.ymax),
        "ne": Box(mid_x, box.xmax, mid_y, box.ymax),
    }
    return {
        name: QuadTreeNode(boxes[name], node.indices[masks[name]], node.depth + 1)
        for name in QUADRANTS
        if masks[name].any()
    }


def _recursive_split(node: QuadTreeNode, context: PartitionContext) -> None:
    context.n_nodes += 1

    if node.size <= context.min_split_size or node.depth >= context.max_depth:
        context.leaves.append(node)
        return

    coords = context.points[node.indices]
    if np.all(coords == coords[0]):
        context.leaves.append(node)
        return

    children = _split(node, context)
    if len(children) < 2:
        # Splitting would not reduce the population
        context.leaves.append(node)
        return

    node.children = children
    for name in QUADRANTS:
        if name in children:
            _recursive_split(children[name], context)


class QuadTree:
    """Median-split quad-tree over 2-D points.

    Example:
        >>> tree = QuadTree(points).build()
        >>> leaves = tree.leaves()
    """

    def __init__(
        self,
        points: np.ndarray,
        bounds: Box | None = None,
        min_split_size: int | None = None,
        max_depth: int = 32,
    ) -> None:
        """Initialize quad-tree.

        Args:
            points: Points of shape (n_samples, 2)
            bounds: Root box (default: tight bounding box of the points)
            min_split_size: Nodes at or below this size are leaves
                (default: sqrt(n_samples))
            max_depth: Maximum depth of the tree (default: 32)
        """
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 2:
            raise ValueError(f"points must have shape (n, 2), got {points.shape}")
        if points.shape[0] == 0:
            raise ValueError("Cannot build a quad-tree over zero points")
        self.points = points
        self.bounds = bounds if bounds is not None else Box.around(points)
        if min_split_size is None:
            min_split_size = max(1, int(math.sqrt(points.shape[0])))
        self.min_split_size = min_split_size
        self.max_depth = max_depth
        self._root: QuadTreeNode | None = None
        self._context: PartitionContext | None = None

    def build(self) -> "QuadTree":
        """Split the tree recursively.

        Returns:
            Self
        """
        context = PartitionContext(
            points=self.points,
            min_split_size=self.min_split_size,
            max_depth=self.max_depth,
        )
        root = QuadTreeNode(self.bounds, np.arange(self.points.shape[0]))
        _recursive_split(root, context)
        self._root = root
        self._context = context
        logger.info(
            f"Quad-tree built: {context.n_nodes} nodes, {len(context.leaves)} leaves "
            f"(split threshold {self.min_split_size})"
        )
        return self

    @property
    def root(self) -> QuadTreeNode:
        if self._root is None:
            raise RuntimeError("QuadTree must be built first. Call build().")
        return self._root

    def leaves(self) -> list[QuadTreeNode]:
        """Non-empty leaves in depth-first order."""
        if self._context is None:
            raise RuntimeError("QuadTree must be built first. Call build().")
        return list(self._context.leaves)

    @property
    def n_nodes(self) -> int:
        if self._context is None:
            raise RuntimeError("QuadTree must be built first. Call build().")
        return self._context.n_nodes

    def __repr__(self) -> str:
        return (
            f"QuadTree(n_points={self.points.shape[0]}, "
            f"min_split_size={self.min_split_size})"
        )


def partition(
    points: np.ndarray,
    bounds: Box | None = None,
    min_split_size: int | None = None,
    max_depth: int = 32,
) -> list[QuadTreeNode]:
    """Partition points with a quad-tree and return its leaves.

    Args:
        points: Points of shape (n_samples, 2)
        bounds: Root box (default: tight bounding box of the points)
        min_split_size: Nodes at or below this size are leaves
        max_depth: Maximum depth of the tree

    Returns:
        Leaves in depth-first order, each with a density
    """
    tree = QuadTree(points, bounds, min_split_size=min_split_size, max_depth=max_depth)
    return tree.build().leaves()

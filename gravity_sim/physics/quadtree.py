"""2D quadtree with bottom-up mass aggregation for Barnes-Hut queries.

The tree is rebuilt from scratch on every derivative evaluation and thrown
away after traversal, so nodes carry no bookkeeping beyond what the force
query needs.
"""

import numpy as np
from typing import List


# Subdivision stops here; whatever is left in the node is aggregated into one leaf
MAX_TREE_DEPTH = 48


class TreeInvariantError(RuntimeError):
    """Raised when tree construction produces a node without positive mass."""


class Region:
    """Axis-aligned region of the plane plus the mass aggregated inside it.

    ``extent`` is the full size of the box, not the half-width.
    """

    __slots__ = ("total_mass", "center_of_mass", "geometric_center", "extent")

    def __init__(self, geometric_center: np.ndarray, extent: np.ndarray):
        self.geometric_center = geometric_center  # (2,)
        self.extent = extent  # (2,)
        self.total_mass = 0.0
        self.center_of_mass = np.zeros(2)

    def __repr__(self) -> str:
        return (
            f"Region(total_mass={self.total_mass!r}, "
            f"center_of_mass={self.center_of_mass.tolist()!r}, "
            f"geometric_center={self.geometric_center.tolist()!r}, "
            f"extent={self.extent.tolist()!r})"
        )


class QuadNode:
    """Single node of the quadtree; owns its region and up to four children.

    A leaf that absorbed several points (coincident, or cut off at the depth
    limit) keeps them in ``members`` as ``(positions (k, 2), masses (k,))``.
    """

    __slots__ = ("region", "children", "depth", "count", "members")

    def __init__(self, region: Region, depth: int = 0):
        self.region = region
        self.children: List["QuadNode"] = []
        self.depth = depth
        self.count = 0
        self.members = None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    def iter_nodes(self):
        """Yield this node and all descendants, depth first."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


def bounding_region(positions: np.ndarray) -> Region:
    """Bounding box of all positions; zero center and extent when empty."""
    if positions.shape[0] == 0:
        return Region(np.zeros(2), np.zeros(2))
    lo = positions.min(axis=0)
    hi = positions.max(axis=0)
    return Region((lo + hi) / 2.0, hi - lo)


def _child_offsets(extent: np.ndarray) -> List[np.ndarray]:
    """Center offsets of the four quadrants, in classification order."""
    qx, qy = extent[0] / 4.0, extent[1] / 4.0
    return [
        np.array([-qx, -qy]),
        np.array([qx, -qy]),
        np.array([-qx, qy]),
        np.array([qx, qy]),
    ]


def _aggregate_leaf(node: QuadNode, positions: np.ndarray, masses: np.ndarray, indices: np.ndarray):
    """Collapse every point in ``indices`` into this node without subdividing."""
    region = node.region
    if len(indices) == 1:
        i = indices[0]
        region.total_mass = float(masses[i])
        region.center_of_mass = positions[i].copy()
        return
    m = masses[indices]
    total = float(np.sum(m))
    if not total > 0:
        raise TreeInvariantError(
            f"aggregated mass {total!r} of {len(indices)} coincident points is not positive"
        )
    region.total_mass = total
    region.center_of_mass = np.sum(positions[indices] * m[:, None], axis=0) / total
    node.members = (positions[indices].copy(), m.copy())


def _partition(
    node: QuadNode,
    positions: np.ndarray,
    masses: np.ndarray,
    indices: np.ndarray,
    max_depth: int,
):
    node.count = len(indices)
    if len(indices) == 0:
        return
    pts = positions[indices]
    if len(indices) == 1 or node.depth >= max_depth or np.all(pts == pts[0]):
        _aggregate_leaf(node, positions, masses, indices)
        return

    region = node.region
    cx, cy = region.geometric_center
    right = pts[:, 0] >= cx
    upper = pts[:, 1] >= cy
    quads = [
        ~right & ~upper,
        right & ~upper,
        ~right & upper,
        right & upper,
    ]
    child_extent = region.extent / 2.0
    for mask, offset in zip(quads, _child_offsets(region.extent)):
        sub = indices[mask]
        if len(sub) == 0:
            continue
        child = QuadNode(Region(region.geometric_center + offset, child_extent), node.depth + 1)
        _partition(child, positions, masses, sub, max_depth)
        node.children.append(child)

    total = 0.0
    weighted = np.zeros(2)
    for child in node.children:
        total += child.region.total_mass
        weighted += child.region.center_of_mass * child.region.total_mass
    if not total > 0:
        raise TreeInvariantError(
            f"internal node at depth {node.depth} aggregated non-positive mass {total!r}"
        )
    region.total_mass = total
    region.center_of_mass = weighted / total


def build_tree(
    positions: np.ndarray,
    masses: np.ndarray,
    max_depth: int = MAX_TREE_DEPTH,
) -> QuadNode:
    """Build a quadtree over ``positions`` (n, 2) weighted by ``masses`` (n,).

    The root covers the bounding box of all points. Every internal node ends
    up with the sum of its children's mass and their mass-weighted center.
    Points sharing identical coordinates, or still sharing a node at
    ``max_depth``, are merged into a single leaf.

    Raises:
        ValueError: On malformed or non-finite input.
        TreeInvariantError: If any occupied node aggregates non-positive mass.
    """
    positions = np.asarray(positions, dtype=np.float64)
    masses = np.asarray(masses, dtype=np.float64)
    if positions.ndim != 2 or positions.shape[1] != 2:
        raise ValueError(f"positions must have shape (n, 2), got {positions.shape}")
    if masses.shape != (positions.shape[0],):
        raise ValueError(
            f"masses must have shape ({positions.shape[0]},), got {masses.shape}"
        )
    if not np.all(np.isfinite(positions)):
        raise ValueError("positions must be finite")

    root = QuadNode(bounding_region(positions), depth=0)
    _partition(root, positions, masses, np.arange(positions.shape[0]), max_depth)
    return root

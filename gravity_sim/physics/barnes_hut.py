"""Barnes-Hut 2D acceleration queries against a quadtree.

A node is treated as one aggregate body when it is far enough from the query
point relative to its size, or when it is a single-point leaf. A nearby
leaf holding several collapsed points is summed point by point, so a
query point never attracts itself through its own leaf. The opening test
works on squared quantities shifted by ``opening_offset`` so that a zero-sized
node at zero distance never produces 0/0; the acceleration itself uses the
unshifted separation.
"""

import numpy as np
from typing import Optional
from gravity_sim.physics.quadtree import QuadNode, build_tree, MAX_TREE_DEPTH


# Additive shift applied to both squared distance and squared size in the opening test
OPENING_OFFSET = 1.0


def _aggregate_acceleration(
    position: np.ndarray,
    node: QuadNode,
    G: float,
    softening: float,
) -> np.ndarray:
    region = node.region
    diff = region.center_of_mass - position
    r_sq = diff[0] * diff[0] + diff[1] * diff[1]
    if r_sq == 0.0:
        # Aggregate sits exactly on the query point (usually the point itself)
        return np.zeros(2)
    magnitude = G * region.total_mass / (r_sq + softening * softening)
    return diff * (magnitude / np.sqrt(r_sq))


def _members_acceleration(
    position: np.ndarray,
    node: QuadNode,
    G: float,
    softening: float,
) -> np.ndarray:
    """Sum over the points of a collapsed leaf one by one.

    Members sitting exactly on the query point (the point itself, or bodies
    coincident with it) contribute nothing.
    """
    member_positions, member_masses = node.members
    diff = member_positions - position
    r_sq = np.sum(diff ** 2, axis=1)
    keep = r_sq > 0.0
    if not np.any(keep):
        return np.zeros(2)
    r_sq = r_sq[keep]
    magnitude = G * member_masses[keep] / (r_sq + softening * softening) / np.sqrt(r_sq)
    return np.sum(diff[keep] * magnitude[:, None], axis=0)


def acceleration_at(
    position: np.ndarray,
    node: Optional[QuadNode],
    G: float,
    accuracy_threshold: float,
    softening: float,
    opening_offset: float = OPENING_OFFSET,
) -> np.ndarray:
    """Acceleration at ``position`` due to everything under ``node``.

    Args:
        position: Query point (2,)
        node: Root of the (sub)tree to query
        G: Gravitational constant
        accuracy_threshold: Nodes with distance^2/size^2 above this are aggregated;
            larger values mean more recursion and higher accuracy
        softening: Softening length added (squared) to the squared separation
        opening_offset: Shift added to both squared terms of the opening test

    Returns:
        Acceleration vector (2,)
    """
    if node is None or node.count == 0:
        return np.zeros(2)
    region = node.region
    d = position - region.center_of_mass
    distance_sq = d[0] * d[0] + d[1] * d[1] + opening_offset
    size_sq = region.extent[0] * region.extent[0] + region.extent[1] * region.extent[1] + opening_offset
    if distance_sq / size_sq > accuracy_threshold:
        return _aggregate_acceleration(position, node, G, softening)
    if node.is_leaf:
        if node.members is not None:
            return _members_acceleration(position, node, G, softening)
        return _aggregate_acceleration(position, node, G, softening)
    out = np.zeros(2)
    for child in node.children:
        out += acceleration_at(position, child, G, accuracy_threshold, softening, opening_offset)
    return out


def compute_accelerations_barnes_hut(
    positions: np.ndarray,
    masses: np.ndarray,
    G: float = 1.0,
    accuracy_threshold: float = 4.0,
    softening: float = 1e-3,
    opening_offset: float = OPENING_OFFSET,
    max_depth: int = MAX_TREE_DEPTH,
) -> np.ndarray:
    """Compute accelerations (n, 2) for every point against one shared tree."""
    positions = np.asarray(positions, dtype=np.float64)
    n = positions.shape[0]
    if n == 0:
        return np.zeros((0, 2))
    tree = build_tree(positions, masses, max_depth=max_depth)
    accels = np.zeros((n, 2))
    for i in range(n):
        accels[i] = acceleration_at(
            positions[i], tree, G, accuracy_threshold, softening, opening_offset
        )
    return accels

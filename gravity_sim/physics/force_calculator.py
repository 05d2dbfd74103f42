"""Gravity parameters and the acceleration calculator used by the ensemble.

Barnes-Hut is the default path. The vectorized all-pairs path applies the
same softened force law and exists as a reference for validating the
approximation (and for small N where building a tree is not worth it).
"""

import numpy as np
from dataclasses import dataclass, asdict
from typing import Literal
from gravity_sim.physics.barnes_hut import compute_accelerations_barnes_hut, OPENING_OFFSET
from gravity_sim.physics.quadtree import MAX_TREE_DEPTH


FORCE_METHODS = ("barnes_hut", "direct")


@dataclass(frozen=True)
class GravityParams:
    """Scalar configuration shared by an ensemble and all of its clones."""
    gravity_constant: float = 1.0
    # Opening criterion: aggregate a node once distance^2 / size^2 exceeds this.
    # 4.0 is roughly the classical opening angle of 0.5.
    accuracy_threshold: float = 4.0
    softening: float = 1e-3
    opening_offset: float = OPENING_OFFSET
    method: Literal["barnes_hut", "direct"] = "barnes_hut"
    max_depth: int = MAX_TREE_DEPTH

    def validate(self) -> "GravityParams":
        """Check parameter ranges.

        Raises:
            ValueError: If any parameter is out of range
        """
        if not np.isfinite(self.gravity_constant):
            raise ValueError(f"gravity_constant must be finite, got {self.gravity_constant}")
        if self.accuracy_threshold < 0 or np.isnan(self.accuracy_threshold):
            raise ValueError(f"accuracy_threshold must be >= 0, got {self.accuracy_threshold}")
        if self.softening < 0 or not np.isfinite(self.softening):
            raise ValueError(f"softening must be a finite value >= 0, got {self.softening}")
        if self.opening_offset < 0 or not np.isfinite(self.opening_offset):
            raise ValueError(f"opening_offset must be a finite value >= 0, got {self.opening_offset}")
        if self.method not in FORCE_METHODS:
            raise ValueError(f"Unknown force method '{self.method}'. Available: {list(FORCE_METHODS)}")
        if self.max_depth < 1:
            raise ValueError(f"max_depth must be >= 1, got {self.max_depth}")
        return self

    def to_dict(self) -> dict:
        return asdict(self)


def compute_accelerations_direct(
    positions: np.ndarray,
    masses: np.ndarray,
    G: float = 1.0,
    softening: float = 1e-3,
) -> np.ndarray:
    """All-pairs softened accelerations (n, 2), O(N^2) time and memory.

    a_i = sum_j G * m_j * r_ij / |r_ij| / (|r_ij|^2 + softening^2),
    with coincident pairs (including i == j) contributing nothing.
    """
    positions = np.asarray(positions, dtype=np.float64)
    masses = np.asarray(masses, dtype=np.float64).flatten()
    n = positions.shape[0]
    if n == 0:
        return np.zeros((0, 2))
    # r_diff[i, j] = r_j - r_i
    r_diff = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    r_sq = np.sum(r_diff ** 2, axis=2)
    coincident = r_sq == 0.0
    safe_r_sq = np.where(coincident, 1.0, r_sq)
    magnitude = G * masses[np.newaxis, :] / (safe_r_sq + softening ** 2) / np.sqrt(safe_r_sq)
    magnitude = np.where(coincident, 0.0, magnitude)
    return np.sum(magnitude[:, :, np.newaxis] * r_diff, axis=1)


class ForceCalculator:
    """Dispatches acceleration computation according to ``GravityParams.method``."""

    def __init__(self, params: GravityParams):
        self.params = params.validate()

    def compute_accelerations(self, positions: np.ndarray, masses: np.ndarray) -> np.ndarray:
        """Accelerations (n, 2) for positions (n, 2) and masses (n,)."""
        p = self.params
        if p.method == "direct":
            return compute_accelerations_direct(
                positions, masses, G=p.gravity_constant, softening=p.softening
            )
        return compute_accelerations_barnes_hut(
            positions,
            masses,
            G=p.gravity_constant,
            accuracy_threshold=p.accuracy_threshold,
            softening=p.softening,
            opening_offset=p.opening_offset,
            max_depth=p.max_depth,
        )

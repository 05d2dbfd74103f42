"""Diagnostics for 2D point-mass ensembles."""

import numpy as np
from typing import Tuple
from gravity_sim.physics.ensemble import MassEnsemble


class Diagnostics:
    """Compute energy and momentum diagnostics consistent with the force law."""

    def __init__(self, G: float = 1.0, softening: float = 1e-3):
        """Initialize diagnostics.

        Args:
            G: Gravitational constant
            softening: Softening length (must match force calculation)
        """
        self.G = G
        self.softening = softening

    @classmethod
    def for_ensemble(cls, ensemble: MassEnsemble) -> "Diagnostics":
        """Diagnostics using the ensemble's own G and softening."""
        return cls(G=ensemble.params.gravity_constant, softening=ensemble.params.softening)

    def pair_potential(self, r: np.ndarray) -> np.ndarray:
        """Potential per unit G*m_i*m_j at separation ``r``.

        The force law G*m/(r^2 + s^2) integrates to -arctan(s/r)/s, which
        tends to the Newtonian -1/r as the softening s goes to zero.
        """
        r = np.asarray(r, dtype=np.float64)
        s = self.softening
        if s == 0:
            return -1.0 / r
        return -np.arctan2(s, r) / s

    def compute_kinetic_energy(self, ensemble: MassEnsemble) -> float:
        """K = 0.5 * sum(m_i * |v_i|^2)."""
        v_sq = ensemble.velocities_x ** 2 + ensemble.velocities_y ** 2
        return float(0.5 * np.sum(ensemble.masses * v_sq))

    def compute_potential_energy(self, ensemble: MassEnsemble) -> float:
        """U = G * sum_{i<j} m_i * m_j * phi(r_ij), coincident pairs skipped."""
        n = len(ensemble)
        if n < 2:
            return 0.0
        i, j = np.triu_indices(n, k=1)
        dx = ensemble.positions_x[j] - ensemble.positions_x[i]
        dy = ensemble.positions_y[j] - ensemble.positions_y[i]
        r = np.hypot(dx, dy)
        keep = r > 0
        m_pair = ensemble.masses[i[keep]] * ensemble.masses[j[keep]]
        return float(self.G * np.sum(m_pair * self.pair_potential(r[keep])))

    def compute_energies(self, ensemble: MassEnsemble) -> Tuple[float, float, float]:
        """Compute kinetic, potential, and total energy.

        Returns:
            Tuple of (kinetic_energy, potential_energy, total_energy)
        """
        K = self.compute_kinetic_energy(ensemble)
        U = self.compute_potential_energy(ensemble)
        return K, U, K + U

    def total_momentum(self, ensemble: MassEnsemble) -> np.ndarray:
        """Total linear momentum (2,)."""
        return np.array([
            np.sum(ensemble.masses * ensemble.velocities_x),
            np.sum(ensemble.masses * ensemble.velocities_y),
        ])

    def angular_momentum(self, ensemble: MassEnsemble) -> float:
        """L_z = sum(m_i * (x_i * vy_i - y_i * vx_i)) about the origin."""
        return float(np.sum(ensemble.masses * (
            ensemble.positions_x * ensemble.velocities_y
            - ensemble.positions_y * ensemble.velocities_x
        )))

    def center_of_mass(self, ensemble: MassEnsemble) -> np.ndarray:
        """Mass-weighted centroid (2,); zeros for an empty ensemble."""
        total = np.sum(ensemble.masses)
        if total == 0:
            return np.zeros(2)
        return np.array([
            np.sum(ensemble.masses * ensemble.positions_x) / total,
            np.sum(ensemble.masses * ensemble.positions_y) / total,
        ])

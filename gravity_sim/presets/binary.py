"""Two-body presets: circular binary and the browser demo pair."""

import numpy as np
from typing import Tuple
from gravity_sim.presets.base import Preset


class BinaryOrbit(Preset):
    """Two bodies on a circular orbit about their common center of mass.

    With zero softening this is an exact solution of the two-body problem,
    which makes it the reference scenario for integrator accuracy.
    """

    def __init__(
        self,
        n_particles: int = 2,
        seed: int = None,
        mass_1: float = 1.0,
        mass_2: float = 1.0,
        separation: float = 2.0,
        G: float = 1.0,
    ):
        """Initialize binary preset.

        Args:
            n_particles: Ignored beyond validation; always 2
            seed: Unused (deterministic), kept for a uniform preset signature
            mass_1: Mass of the first body
            mass_2: Mass of the second body
            separation: Distance between the bodies
            G: Gravitational constant the orbit is tuned for
        """
        if n_particles != 2:
            raise ValueError(f"binary preset has exactly 2 bodies, got n_particles={n_particles}")
        super().__init__(2, seed)
        self.mass_1 = mass_1
        self.mass_2 = mass_2
        self.separation = separation
        self.G = G

    @property
    def name(self) -> str:
        return "binary"

    @property
    def period(self) -> float:
        """Orbital period T = 2*pi*sqrt(d^3 / (G*(m1 + m2)))."""
        return 2 * np.pi * np.sqrt(self.separation ** 3 / (self.G * (self.mass_1 + self.mass_2)))

    def generate(self) -> Tuple:
        m1, m2, d = self.mass_1, self.mass_2, self.separation
        total = m1 + m2
        # Distances from the center of mass
        r1 = d * m2 / total
        r2 = d * m1 / total
        omega = 2 * np.pi / self.period
        masses = np.array([m1, m2])
        positions_x = np.array([-r1, r2])
        positions_y = np.zeros(2)
        velocities_x = np.zeros(2)
        velocities_y = np.array([-omega * r1, omega * r2])
        return masses, positions_x, positions_y, velocities_x, velocities_y


class DemoPair(Preset):
    """Two equal masses drifting past each other, as in the browser demo."""

    def __init__(self, n_particles: int = 2, seed: int = None):
        if n_particles != 2:
            raise ValueError(f"demo preset has exactly 2 bodies, got n_particles={n_particles}")
        super().__init__(2, seed)

    @property
    def name(self) -> str:
        return "demo"

    def generate(self) -> Tuple:
        masses = np.array([10.0, 10.0])
        positions_x = np.array([300.0, 200.0])
        positions_y = np.array([300.0, 400.0])
        velocities_x = np.array([0.1, -0.1])
        velocities_y = np.zeros(2)
        return masses, positions_x, positions_y, velocities_x, velocities_y

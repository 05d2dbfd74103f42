"""Rotating cluster preset."""

import numpy as np
from typing import Tuple
from gravity_sim.presets.base import Preset


class RotatingCluster(Preset):
    """Heavy central body surrounded by a disc of light bodies on near-circular orbits."""

    def __init__(
        self,
        n_particles: int = 200,
        seed: int = None,
        central_mass: float = 1000.0,
        cluster_radius: float = 50.0,
        inner_radius: float = 5.0,
        body_mass: float = 1.0,
        velocity_dispersion: float = 0.05,
        G: float = 1.0,
    ):
        """Initialize rotating cluster preset.

        Args:
            n_particles: Total number of bodies including the central one
            seed: Random seed
            central_mass: Mass of the body at the origin
            cluster_radius: Outer radius of the disc
            inner_radius: Inner radius of the disc (keeps bodies off the center)
            body_mass: Mass of each disc body
            velocity_dispersion: Random velocity kick as a fraction of circular speed
            G: Gravitational constant used for the circular speeds
        """
        if n_particles < 1:
            raise ValueError(f"n_particles must be >= 1, got {n_particles}")
        if not 0 < inner_radius < cluster_radius:
            raise ValueError("need 0 < inner_radius < cluster_radius")
        super().__init__(n_particles, seed)
        self.central_mass = central_mass
        self.cluster_radius = cluster_radius
        self.inner_radius = inner_radius
        self.body_mass = body_mass
        self.velocity_dispersion = velocity_dispersion
        self.G = G

    @property
    def name(self) -> str:
        return "cluster"

    def generate(self) -> Tuple:
        """Generate cluster initial conditions."""
        rng = np.random.default_rng(self.seed)
        n_disc = self.n_particles - 1

        # Uniform surface density between inner and outer radius
        u = rng.uniform(0.0, 1.0, n_disc)
        r = np.sqrt(self.inner_radius ** 2 + u * (self.cluster_radius ** 2 - self.inner_radius ** 2))
        theta = rng.uniform(0.0, 2 * np.pi, n_disc)

        # Circular speed from the mass enclosed at each radius
        enclosed = self.central_mass + self.body_mass * n_disc * u
        v_circ = np.sqrt(self.G * enclosed / r)
        kick = 1.0 + self.velocity_dispersion * rng.standard_normal(n_disc)

        masses = np.concatenate(([self.central_mass], np.full(n_disc, self.body_mass)))
        positions_x = np.concatenate(([0.0], r * np.cos(theta)))
        positions_y = np.concatenate(([0.0], r * np.sin(theta)))
        velocities_x = np.concatenate(([0.0], -v_circ * kick * np.sin(theta)))
        velocities_y = np.concatenate(([0.0], v_circ * kick * np.cos(theta)))
        return masses, positions_x, positions_y, velocities_x, velocities_y

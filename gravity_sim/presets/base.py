"""Base class for preset scenarios."""

from abc import ABC, abstractmethod
from typing import Tuple
import numpy as np


class Preset(ABC):
    """Abstract base class for preset scenarios."""

    def __init__(self, n_particles: int = 2, seed: int = None):
        """Initialize preset.

        Args:
            n_particles: Number of bodies
            seed: Random seed for reproducibility
        """
        self.n_particles = n_particles
        self.seed = seed

    @abstractmethod
    def generate(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
        """Generate initial conditions.

        Returns:
            Tuple of (masses, positions_x, positions_y, velocities_x, velocities_y)
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this preset."""
        pass

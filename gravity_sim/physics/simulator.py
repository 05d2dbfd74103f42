"""Main simulator controller."""

from dataclasses import replace
from typing import Optional, Callable
import time
import numpy as np
from gravity_sim.physics.diagnostics import Diagnostics
from gravity_sim.physics.ensemble import MassEnsemble
from gravity_sim.physics.force_calculator import GravityParams
from gravity_sim.physics.integrators.base import Integrator
from gravity_sim.physics.integrators.rk4 import RK4Integrator


class Simulator:
    """Main simulation controller.

    Owns the ensemble, drives it with an integrator and exposes the flat
    arrays a renderer needs.
    """

    def __init__(
        self,
        integrator: Optional[Integrator] = None,
        dt: float = 1.0,
        params: Optional[GravityParams] = None,
        merge_density: Optional[float] = None,
    ):
        """Initialize simulator.

        Args:
            integrator: Integrator to use (default: RK4)
            dt: Default time step used by ``step()``
            params: Gravity configuration
            merge_density: If set, merge overlapping bodies after every tick
                assuming this density
        """
        self.integrator = integrator or RK4Integrator()
        self.set_timestep(dt)
        self.system = MassEnsemble(params=params)
        self.merge_density = None
        if merge_density is not None:
            self.set_merge_density(merge_density)
        self.time = 0.0
        self.paused = False
        self.step_count = 0
        self.merged_count = 0

        # Profiling: last tick timing (ms)
        self._last_integrator_ms: Optional[float] = None
        self._last_merge_ms: Optional[float] = None
        self._profile: bool = False

        # Callbacks
        self.on_step_callback: Optional[Callable] = None
        self.on_energy_callback: Optional[Callable] = None
        self.debug_table: bool = False
        self.debug_table_interval: int = 100

    def set_profiling(self, enabled: bool = True):
        """Enable or disable tick timing (integrator ms, merge ms)."""
        self._profile = enabled

    def get_timing(self) -> dict:
        """Return last tick timing in ms: integrator_ms, merge_ms."""
        return {
            "integrator_ms": self._last_integrator_ms,
            "merge_ms": self._last_merge_ms,
        }

    def initialize(self, masses, positions_x, positions_y, velocities_x, velocities_y):
        """Replace all bodies at once from parallel (n,) arrays.

        Raises:
            ValueError: On mismatched lengths, non-positive masses or non-finite values
        """
        self.system = MassEnsemble(
            masses, positions_x, positions_y, velocities_x, velocities_y,
            params=self.system.params,
        )
        self.time = 0.0
        self.step_count = 0
        self.merged_count = 0

    # Ingestion

    def add_mass(self, mass: float, x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> int:
        """Add a point mass; returns its current index."""
        return self.system.add_mass(mass, x, y, vx, vy)

    def set_gravity_constant(self, G: float):
        self.system.params = replace(self.system.params, gravity_constant=G)

    def set_accuracy_threshold(self, threshold: float):
        """Set the Barnes-Hut distance^2/size^2 ratio above which nodes are aggregated."""
        self.system.params = replace(self.system.params, accuracy_threshold=threshold)

    def set_softening(self, softening: float):
        self.system.params = replace(self.system.params, softening=softening)

    def set_merge_density(self, density: Optional[float]):
        """Enable the post-tick merge pass with this density, or disable it with None."""
        if density is not None and not (np.isfinite(density) and density > 0):
            raise ValueError(f"merge density must be positive and finite, got {density}")
        self.merge_density = density

    # Stepping

    def tick(self, duration: Optional[float] = None):
        """Advance the ensemble by ``duration`` (default: ``dt``).

        Raises:
            ValueError: If duration is not a positive finite number
        """
        if self.paused:
            return
        if duration is None:
            duration = self.dt
        if not (np.isfinite(duration) and duration > 0):
            raise ValueError(f"duration must be positive and finite, got {duration}")

        if self._profile:
            t0 = time.perf_counter()
        self.integrator.step(self.system, duration)
        if self._profile:
            t1 = time.perf_counter()
        if self.merge_density is not None:
            self.merged_count += self.system.merge_overlapping(self.merge_density)
        if self._profile:
            t2 = time.perf_counter()
            self._last_integrator_ms = (t1 - t0) * 1000.0
            self._last_merge_ms = (t2 - t1) * 1000.0

        self.time += duration
        self.step_count += 1

        if self.debug_table and (self.step_count % self.debug_table_interval == 0):
            self._log_stability_table()

        if self.on_step_callback:
            self.on_step_callback(self)
        if self.on_energy_callback:
            self.on_energy_callback(self, self.get_energy())

    def step(self):
        """Perform one simulation step of length ``dt``."""
        self.tick(self.dt)

    def _log_stability_table(self):
        """Log K, U, E, Lz, body count."""
        diagnostics = Diagnostics.for_ensemble(self.system)
        K, U, E = diagnostics.compute_energies(self.system)
        Lz = diagnostics.angular_momentum(self.system)
        print(f"[Diag] step={self.step_count} t={self.time:.4f} n={self.mass_count} "
              f"K={K:.6g} U={U:.6g} E={E:.6g} Lz={Lz:.6g}")

    def run_steps(self, k: int):
        """Run k steps (decoupled render: run K steps, then render); stops early if paused."""
        for _ in range(k):
            if self.paused:
                return
            self.step()

    def run(self, n_steps: int):
        """Run simulation for specified number of steps.

        Args:
            n_steps: Number of steps to run
        """
        for _ in range(n_steps):
            self.step()

    def pause(self):
        """Pause simulation."""
        self.paused = True

    def resume(self):
        """Resume simulation."""
        self.paused = False

    def set_timestep(self, dt: float):
        """Set default time step.

        Args:
            dt: New time step
        """
        if not (np.isfinite(dt) and dt > 0):
            raise ValueError(f"dt must be positive and finite, got {dt}")
        self.dt = dt

    def set_integrator(self, integrator: Integrator):
        """Set integrator.

        Args:
            integrator: New integrator
        """
        self.integrator = integrator

    # Readout

    @property
    def mass_count(self) -> int:
        return len(self.system)

    @property
    def masses(self) -> np.ndarray:
        return self.system.masses

    @property
    def positions_x(self) -> np.ndarray:
        return self.system.positions_x

    @property
    def positions_y(self) -> np.ndarray:
        return self.system.positions_y

    @property
    def velocities_x(self) -> np.ndarray:
        return self.system.velocities_x

    @property
    def velocities_y(self) -> np.ndarray:
        return self.system.velocities_y

    def get_state(self):
        """Get current simulation state.

        Returns:
            Tuple of (masses, positions (n, 2), velocities (n, 2), time, step_count)
        """
        masses, positions, velocities = self.system.to_arrays()
        return masses, positions, velocities, self.time, self.step_count

    def get_energy(self) -> float:
        """Get current total energy (kinetic + potential)."""
        return Diagnostics.for_ensemble(self.system).compute_energies(self.system)[2]

    def get_kinetic_energy(self) -> float:
        return Diagnostics.for_ensemble(self.system).compute_kinetic_energy(self.system)

    def get_potential_energy(self) -> float:
        return Diagnostics.for_ensemble(self.system).compute_potential_energy(self.system)

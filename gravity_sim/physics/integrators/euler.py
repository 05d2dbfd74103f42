"""Forward Euler integrator (baseline, O(h) accuracy)."""

from gravity_sim.physics.integrators.base import Integrator, State


class EulerIntegrator(Integrator):
    """Forward Euler - simple first-order integrator.

    One derivative evaluation per step. Fast but drifts; good for baseline
    comparisons.
    """

    @property
    def name(self) -> str:
        return "euler"

    @property
    def order(self) -> int:
        return 1

    def step(self, state: State, dt: float) -> None:
        """Euler step: y_new = y + dt * f(y)."""
        difference = state.derive()
        state.advance(dt, difference)

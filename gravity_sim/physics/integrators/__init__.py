"""Numerical integrators for generic states."""

from typing import List
from gravity_sim.physics.integrators.base import State, ArithmeticState, Integrator
from gravity_sim.physics.integrators.euler import EulerIntegrator
from gravity_sim.physics.integrators.rk4 import RK4Integrator

_INTEGRATORS = {
    "euler": EulerIntegrator,
    "rk4": RK4Integrator,
}


def available_integrators() -> List[str]:
    """List integrator names accepted by ``get_integrator``."""
    return list(_INTEGRATORS)


def get_integrator(name: str) -> Integrator:
    """Get an integrator instance by name.

    Raises:
        ValueError: If the name is unknown
    """
    integrator_class = _INTEGRATORS.get(name.lower())
    if integrator_class is None:
        raise ValueError(f"Unknown integrator '{name}'. Available: {available_integrators()}")
    return integrator_class()


__all__ = [
    "State",
    "ArithmeticState",
    "Integrator",
    "EulerIntegrator",
    "RK4Integrator",
    "available_integrators",
    "get_integrator",
]

"""
Gravity Simulator - 2D point-mass gravity with Barnes-Hut force approximation.

Features:
- Quadtree force approximation with a tunable accuracy threshold
- Softened gravity and optional merging of overlapping bodies
- Generic integrators (Euler, RK4) over any derive/advance state
- Flat structure-of-arrays readout for external renderers
- Preset scenarios, state export and a CLI
"""

__version__ = "0.1.0"

from gravity_sim.physics.simulator import Simulator
from gravity_sim.physics.ensemble import MassEnsemble
from gravity_sim.physics.force_calculator import GravityParams
from gravity_sim.physics.integrators import get_integrator, available_integrators

__all__ = [
    "Simulator",
    "MassEnsemble",
    "GravityParams",
    "get_integrator",
    "available_integrators",
]

"""Physics engine for 2D point-mass gravity."""

from gravity_sim.physics.ensemble import MassEnsemble, EnsembleDifference
from gravity_sim.physics.force_calculator import GravityParams, ForceCalculator
from gravity_sim.physics.quadtree import build_tree, TreeInvariantError
from gravity_sim.physics.simulator import Simulator

__all__ = [
    "MassEnsemble",
    "EnsembleDifference",
    "GravityParams",
    "ForceCalculator",
    "build_tree",
    "TreeInvariantError",
    "Simulator",
]

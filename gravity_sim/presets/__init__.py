"""Preset scenario generators."""

from typing import List
from gravity_sim.presets.base import Preset
from gravity_sim.presets.binary import BinaryOrbit, DemoPair
from gravity_sim.presets.cluster import RotatingCluster

_PRESETS = {
    "binary": BinaryOrbit,
    "cluster": RotatingCluster,
    "demo": DemoPair,
}


def available_presets() -> List[str]:
    return list(_PRESETS)


def get_preset(name: str, n_particles: int = None, seed: int = None, **kwargs) -> Preset:
    """Get preset by name."""
    preset_class = _PRESETS.get(name.lower())
    if preset_class is None:
        raise ValueError(f"Unknown preset: {name}. Available: {available_presets()}")
    if n_particles is None:
        return preset_class(seed=seed, **kwargs)
    return preset_class(n_particles=n_particles, seed=seed, **kwargs)


__all__ = [
    "Preset",
    "BinaryOrbit",
    "DemoPair",
    "RotatingCluster",
    "available_presets",
    "get_preset",
]

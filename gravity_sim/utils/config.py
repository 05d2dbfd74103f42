"""Configuration management."""

import json
import yaml
from typing import Dict, Any, Optional
from pathlib import Path
from dataclasses import dataclass, asdict, fields
from gravity_sim.physics.force_calculator import GravityParams


@dataclass
class SimulationConfig:
    """Simulation configuration."""
    # Simulation parameters
    n_particles: int = 200
    steps: int = 1000
    dt: float = 0.01
    integrator: str = "rk4"

    # Gravity parameters
    gravity_constant: float = 1.0
    accuracy_threshold: float = 4.0
    softening: float = 1e-3
    opening_offset: float = 1.0
    method: str = "barnes_hut"
    merge_density: Optional[float] = None

    # Preset parameters
    preset: str = "cluster"
    preset_params: Dict[str, Any] = None

    # Output
    debug_every: int = 100
    save_state: Optional[str] = None

    # Reproducibility
    seed: Optional[int] = None

    def __post_init__(self):
        if self.preset_params is None:
            self.preset_params = {}

    def gravity_params(self) -> GravityParams:
        """Gravity parameters described by this config (validated)."""
        return GravityParams(
            gravity_constant=self.gravity_constant,
            accuracy_threshold=self.accuracy_threshold,
            softening=self.softening,
            opening_offset=self.opening_offset,
            method=self.method,
        ).validate()

    def update(self, **overrides) -> "SimulationConfig":
        """Apply non-None overrides in place (e.g. from CLI flags)."""
        known = {f.name for f in fields(self)}
        for key, value in overrides.items():
            if key not in known:
                raise ValueError(f"Unknown config field: {key}")
            if value is not None:
                setattr(self, key, value)
        return self


def load_config(config_path: str) -> SimulationConfig:
    """Load configuration from file.

    Args:
        config_path: Path to config file (.json or .yaml)

    Returns:
        SimulationConfig object
    """
    config_path = Path(config_path)

    with open(config_path, 'r') as f:
        if config_path.suffix in ('.yaml', '.yml'):
            data = yaml.safe_load(f) or {}
        elif config_path.suffix == '.json':
            data = json.load(f)
        else:
            raise ValueError(f"Unsupported config format: {config_path.suffix}. Use .json or .yaml")

    known = {f.name for f in fields(SimulationConfig)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown config fields: {sorted(unknown)}")
    return SimulationConfig(**data)


def save_config(config: SimulationConfig, output_path: str):
    """Save configuration to file.

    Args:
        config: SimulationConfig object
        output_path: Output file path (.json or .yaml)
    """
    output_path = Path(output_path)
    data = asdict(config)

    with open(output_path, 'w') as f:
        if output_path.suffix in ('.yaml', '.yml'):
            yaml.safe_dump(data, f, default_flow_style=False)
        elif output_path.suffix == '.json':
            json.dump(data, f, indent=2)
        else:
            raise ValueError(f"Unsupported config format: {output_path.suffix}. Use .json or .yaml")

"""State I/O for saving and loading ensembles as flat arrays."""

import numpy as np
import json
from typing import Tuple, Dict, Any, Optional
from pathlib import Path
from gravity_sim.physics.ensemble import MassEnsemble
from gravity_sim.physics.force_calculator import GravityParams

_FIELDS = ("masses", "positions_x", "positions_y", "velocities_x", "velocities_y")


def save_state(
    ensemble: MassEnsemble,
    output_path: str,
    metadata: Optional[Dict[str, Any]] = None,
    include_params: bool = True,
):
    """Save an ensemble's flat arrays to file.

    Args:
        ensemble: Ensemble to save
        output_path: Output file path (.npz or .json)
        metadata: Optional metadata dictionary (scalars only for .npz)
        include_params: Also store the gravity parameters
    """
    output_path = Path(output_path)
    arrays = {name: getattr(ensemble, name) for name in _FIELDS}
    params = ensemble.params.to_dict() if include_params else None

    if output_path.suffix == '.npz':
        save_dict = dict(arrays)
        if metadata:
            for key, value in metadata.items():
                if isinstance(value, (int, float, str)):
                    save_dict[f'metadata_{key}'] = value
        if params is not None:
            for key, value in params.items():
                save_dict[f'params_{key}'] = value
        np.savez_compressed(output_path, **save_dict)

    elif output_path.suffix == '.json':
        # repr of a Python float round-trips exactly, so JSON is lossless here
        state_dict = {name: values.tolist() for name, values in arrays.items()}
        state_dict['metadata'] = metadata or {}
        if params is not None:
            state_dict['params'] = params
        with open(output_path, 'w') as f:
            json.dump(state_dict, f, indent=2)

    else:
        raise ValueError(f"Unsupported file format: {output_path.suffix}. Use .npz or .json")


def _params_from_dict(data: Dict[str, Any]) -> Optional[GravityParams]:
    if not data:
        return None
    kwargs = {}
    for key, value in data.items():
        if key == 'method':
            kwargs[key] = str(value)
        elif key == 'max_depth':
            kwargs[key] = int(value)
        else:
            kwargs[key] = float(value)
    return GravityParams(**kwargs)


def load_state(input_path: str) -> Tuple[MassEnsemble, Dict[str, Any]]:
    """Load an ensemble from file.

    Args:
        input_path: Input file path

    Returns:
        Tuple of (ensemble, metadata)
    """
    input_path = Path(input_path)

    if input_path.suffix == '.npz':
        with np.load(input_path) as data:
            arrays = {name: data[name] for name in _FIELDS}
            metadata = {}
            params = {}
            for key in data.keys():
                if key.startswith('metadata_'):
                    metadata[key[9:]] = data[key].item()
                elif key.startswith('params_'):
                    params[key[7:]] = data[key].item()

    elif input_path.suffix == '.json':
        with open(input_path, 'r') as f:
            state_dict = json.load(f)
        arrays = {name: np.array(state_dict[name], dtype=np.float64) for name in _FIELDS}
        metadata = state_dict.get('metadata', {})
        params = state_dict.get('params', {})

    else:
        raise ValueError(f"Unsupported file format: {input_path.suffix}. Use .npz or .json")

    ensemble = MassEnsemble(params=_params_from_dict(params), **arrays)
    return ensemble, metadata

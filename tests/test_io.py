"""Tests for I/O functionality."""

import json
import numpy as np
import pytest
import tempfile
import os
from gravity_sim.io.state_io import save_state, load_state
from gravity_sim.physics.ensemble import MassEnsemble
from gravity_sim.physics.force_calculator import GravityParams


def _ensemble():
    rng = np.random.default_rng(21)
    n = 10
    return MassEnsemble(
        rng.uniform(1, 5, n),
        rng.uniform(-10, 10, n),
        rng.uniform(-10, 10, n),
        rng.normal(0, 0.3, n),
        rng.normal(0, 0.3, n),
        params=GravityParams(gravity_constant=2.5, accuracy_threshold=np.inf, softening=0.05),
    )


def _round_trip(suffix):
    ensemble = _ensemble()
    metadata = {"time": 10.0, "steps": 100, "preset": "cluster"}

    with tempfile.NamedTemporaryFile(suffix=suffix, delete=False) as f:
        temp_path = f.name

    try:
        save_state(ensemble, temp_path, metadata)
        loaded, loaded_meta = load_state(temp_path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)
    return ensemble, loaded, loaded_meta


@pytest.mark.parametrize("suffix", [".npz", ".json"])
def test_save_load_round_trip(suffix):
    """Flat arrays, metadata and gravity parameters survive a round trip."""
    ensemble, loaded, loaded_meta = _round_trip(suffix)

    for name in ("masses", "positions_x", "positions_y", "velocities_x", "velocities_y"):
        assert np.array_equal(getattr(loaded, name), getattr(ensemble, name))
    assert loaded.params == ensemble.params
    assert loaded_meta["time"] == 10.0
    assert loaded_meta["steps"] == 100
    assert loaded_meta["preset"] == "cluster"


@pytest.mark.parametrize("suffix", [".npz", ".json"])
def test_reloaded_state_derives_identically(suffix):
    """A reloaded ensemble produces bit-identical derivatives."""
    ensemble, loaded, _ = _round_trip(suffix)

    original = ensemble.derive()
    reloaded = loaded.derive()

    assert np.array_equal(original.accelerations_x, reloaded.accelerations_x)
    assert np.array_equal(original.accelerations_y, reloaded.accelerations_y)


def test_save_without_params_uses_defaults():
    ensemble = _ensemble()

    with tempfile.NamedTemporaryFile(suffix='.json', delete=False) as f:
        temp_path = f.name

    try:
        save_state(ensemble, temp_path, include_params=False)
        loaded, metadata = load_state(temp_path)
    finally:
        if os.path.exists(temp_path):
            os.remove(temp_path)

    assert loaded.params == GravityParams()
    assert metadata == {}


def test_empty_ensemble_round_trip(tmp_path):
    path = tmp_path / "empty.npz"
    save_state(MassEnsemble(), str(path))
    loaded, _ = load_state(str(path))
    assert len(loaded) == 0


def test_load_rejects_invalid_bodies(tmp_path):
    """A file with a zero mass or NaN velocity is refused on load."""
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({
        "masses": [0.0, 1.0],
        "positions_x": [0.0, 1.0],
        "positions_y": [0.0, 1.0],
        "velocities_x": [0.0, 0.0],
        "velocities_y": [0.0, 0.0],
    }))
    with pytest.raises(ValueError):
        load_state(str(path))

    path = tmp_path / "bad.npz"
    np.savez_compressed(
        path,
        masses=np.ones(2),
        positions_x=np.zeros(2),
        positions_y=np.array([0.0, 1.0]),
        velocities_x=np.array([np.nan, 0.0]),
        velocities_y=np.zeros(2),
    )
    with pytest.raises(ValueError):
        load_state(str(path))


def test_unsupported_format(tmp_path):
    with pytest.raises(ValueError):
        save_state(_ensemble(), str(tmp_path / "state.csv"))
    with pytest.raises(ValueError):
        load_state(str(tmp_path / "state.csv"))

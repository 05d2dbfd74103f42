"""Tests for the simulator controller."""

import numpy as np
import pytest
from gravity_sim.physics.force_calculator import GravityParams
from gravity_sim.physics.integrators import EulerIntegrator, RK4Integrator
from gravity_sim.physics.simulator import Simulator


def _demo_simulator(**kwargs):
    sim = Simulator(**kwargs)
    sim.add_mass(10.0, 300.0, 300.0, 0.1, 0.0)
    sim.add_mass(10.0, 200.0, 400.0, -0.1, 0.0)
    return sim


def test_default_integrator_is_rk4():
    sim = Simulator()
    assert isinstance(sim.integrator, RK4Integrator)
    assert sim.mass_count == 0


def test_add_mass_and_readout():
    sim = _demo_simulator()

    assert sim.mass_count == 2
    assert sim.masses.tolist() == [10.0, 10.0]
    assert sim.positions_x.tolist() == [300.0, 200.0]
    assert sim.positions_y.tolist() == [300.0, 400.0]
    assert sim.velocities_x.tolist() == [0.1, -0.1]
    assert sim.velocities_y.tolist() == [0.0, 0.0]
    # Readout arrays are the live ensemble storage, not copies
    assert sim.positions_x is sim.system.positions_x


def test_tick_advances_time_and_bodies():
    sim = _demo_simulator(dt=0.5)
    x0 = sim.positions_x.copy()

    sim.tick(2.0)
    sim.step()

    assert sim.time == pytest.approx(2.5)
    assert sim.step_count == 2
    assert not np.array_equal(sim.positions_x, x0)
    # The pair attract: body 0 gets pulled toward body 1 (negative x, positive y)
    assert sim.velocities_y[0] > 0
    assert sim.velocities_y[1] < 0


def test_empty_simulation_ticks():
    sim = Simulator()
    sim.tick(1.0)
    assert sim.time == 1.0
    assert sim.mass_count == 0


@pytest.mark.parametrize("duration", [0.0, -1.0, np.nan, np.inf])
def test_tick_rejects_invalid_duration(duration):
    sim = _demo_simulator()
    with pytest.raises(ValueError):
        sim.tick(duration)
    assert sim.step_count == 0


def test_invalid_timestep_rejected():
    with pytest.raises(ValueError):
        Simulator(dt=0.0)
    sim = Simulator()
    with pytest.raises(ValueError):
        sim.set_timestep(-0.1)


def test_pause_and_resume():
    sim = _demo_simulator()
    sim.pause()
    sim.run_steps(5)
    sim.tick(1.0)
    assert sim.step_count == 0
    assert sim.time == 0.0

    sim.resume()
    sim.run_steps(3)
    assert sim.step_count == 3


def test_setters_update_params():
    sim = _demo_simulator()
    sim.set_gravity_constant(6.0)
    sim.set_accuracy_threshold(np.inf)
    sim.set_softening(0.0)

    params = sim.system.params
    assert params.gravity_constant == 6.0
    assert params.accuracy_threshold == np.inf
    assert params.softening == 0.0
    assert sim.system.force_calculator.params is params

    with pytest.raises(ValueError):
        sim.set_softening(-1.0)
    assert sim.system.params.softening == 0.0


def test_gravity_constant_scales_acceleration():
    sim = _demo_simulator(params=GravityParams(softening=0.0))
    a1 = sim.system.derive().accelerations_x.copy()
    sim.set_gravity_constant(3.0)
    a3 = sim.system.derive().accelerations_x

    assert np.allclose(a3, 3.0 * a1)


def test_merge_pass_in_tick():
    sim = Simulator(EulerIntegrator(), dt=0.01, merge_density=1.0)
    sim.add_mass(8.0, 0.0, 0.0)
    sim.add_mass(1.0, 2.5, 0.0)
    sim.add_mass(1.0, 50.0, 0.0)

    sim.step()

    assert sim.mass_count == 2
    assert sim.merged_count == 1
    assert sim.masses.sum() == pytest.approx(10.0)


def test_merge_disabled_by_default():
    sim = Simulator(dt=0.01)
    sim.add_mass(8.0, 0.0, 0.0)
    sim.add_mass(1.0, 2.5, 0.0)
    sim.step()
    assert sim.mass_count == 2

    with pytest.raises(ValueError):
        sim.set_merge_density(0.0)


def test_callbacks_are_called():
    sim = _demo_simulator()
    steps = []
    energies = []
    sim.on_step_callback = lambda s: steps.append(s.step_count)
    sim.on_energy_callback = lambda s, e: energies.append(e)

    sim.run(3)

    assert steps == [1, 2, 3]
    assert len(energies) == 3
    assert all(np.isfinite(energies))


def test_profiling_timing():
    sim = _demo_simulator()
    assert sim.get_timing() == {"integrator_ms": None, "merge_ms": None}

    sim.set_profiling(True)
    sim.step()
    timing = sim.get_timing()

    assert timing["integrator_ms"] >= 0.0
    assert timing["merge_ms"] >= 0.0


def test_debug_table(capsys):
    sim = _demo_simulator()
    sim.debug_table = True
    sim.debug_table_interval = 2

    sim.run(4)

    lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("[Diag]")]
    assert len(lines) == 2
    assert "step=2" in lines[0]
    assert "n=2" in lines[1]


def test_initialize_and_get_state():
    sim = _demo_simulator()
    sim.run(2)

    sim.initialize([1.0, 2.0, 3.0], [0.0, 1.0, 2.0], [0.0, 0.0, 0.0], [0.0] * 3, [0.0] * 3)
    masses, positions, velocities, t, steps = sim.get_state()

    assert masses.tolist() == [1.0, 2.0, 3.0]
    assert positions.shape == (3, 2)
    assert velocities.shape == (3, 2)
    assert t == 0.0
    assert steps == 0

    with pytest.raises(ValueError):
        sim.initialize([1.0, 0.0], [0.0, 1.0], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0])
    with pytest.raises(ValueError):
        sim.initialize([1.0, 1.0], [0.0, 1.0], [0.0, 0.0], [np.nan, 0.0], [0.0, 0.0])
    assert sim.mass_count == 3


def test_energy_readout():
    sim = _demo_simulator(params=GravityParams(softening=0.0))
    K = sim.get_kinetic_energy()
    U = sim.get_potential_energy()

    assert K == pytest.approx(0.5 * 10.0 * 0.01 * 2)
    assert U == pytest.approx(-100.0 / np.hypot(100.0, 100.0))
    assert sim.get_energy() == pytest.approx(K + U)


def test_set_integrator():
    sim = _demo_simulator()
    sim.set_integrator(EulerIntegrator())
    sim.step()
    assert sim.integrator.name == "euler"
    assert sim.step_count == 1

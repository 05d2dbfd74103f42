"""Regression tests for diagnostics and the two-body circular orbit."""

import numpy as np
import pytest
from gravity_sim.physics.diagnostics import Diagnostics
from gravity_sim.physics.ensemble import MassEnsemble
from gravity_sim.physics.force_calculator import GravityParams
from gravity_sim.physics.integrators import EulerIntegrator, RK4Integrator
from gravity_sim.physics.simulator import Simulator
from gravity_sim.presets import BinaryOrbit


def _binary_energy_error(integrator, n_steps):
    """Relative energy error after half an orbit of an exact circular binary."""
    preset = BinaryOrbit()
    params = GravityParams(softening=0.0, accuracy_threshold=np.inf)
    sim = Simulator(integrator, dt=0.5 * preset.period / n_steps, params=params)
    sim.initialize(*preset.generate())
    diagnostics = Diagnostics.for_ensemble(sim.system)

    _, _, E0 = diagnostics.compute_energies(sim.system)
    sim.run(n_steps)
    _, _, E = diagnostics.compute_energies(sim.system)
    return abs(E - E0) / abs(E0)


def test_circular_binary_energy_convergence():
    """Energy error shrinks with dt, ~2x per halving for Euler and ~16x for RK4."""
    euler_coarse = _binary_energy_error(EulerIntegrator(), 64)
    euler_fine = _binary_energy_error(EulerIntegrator(), 128)
    rk4_coarse = _binary_energy_error(RK4Integrator(), 64)
    rk4_fine = _binary_energy_error(RK4Integrator(), 128)

    assert euler_fine < euler_coarse
    assert rk4_fine < rk4_coarse
    assert euler_coarse / euler_fine > 1.5
    assert rk4_coarse / rk4_fine > 8.0
    assert rk4_coarse < euler_fine
    assert rk4_fine < 1e-5


def test_circular_binary_keeps_separation():
    preset = BinaryOrbit(separation=2.0)
    sim = Simulator(RK4Integrator(), dt=preset.period / 200,
                    params=GravityParams(softening=0.0, accuracy_threshold=np.inf))
    sim.initialize(*preset.generate())

    separations = []
    for _ in range(200):
        sim.step()
        separations.append(np.hypot(sim.positions_x[1] - sim.positions_x[0],
                                    sim.positions_y[1] - sim.positions_y[0]))

    assert np.allclose(separations, 2.0, rtol=1e-4)
    # Back where it started after one period
    assert sim.positions_x[1] == pytest.approx(1.0, abs=1e-3)
    assert sim.positions_y[1] == pytest.approx(0.0, abs=1e-3)


def test_potential_energy_newtonian_without_softening():
    ensemble = MassEnsemble([100.0, 1.0], [0.0, 5.0], [0.0, 0.0], [0.0, 0.0], [0.0, 0.0])
    diagnostics = Diagnostics(G=1.0, softening=0.0)

    K, U, E = diagnostics.compute_energies(ensemble)

    assert K == 0.0
    assert U == pytest.approx(-100.0 / 5.0)
    assert E == U


def test_potential_consistent_with_force_law():
    """-dU/dr matches the softened force magnitude G*m1*m2/(r^2 + s^2)."""
    G, s, r, h = 1.3, 0.4, 2.0, 1e-5
    diagnostics = Diagnostics(G=G, softening=s)

    dphi = (diagnostics.pair_potential(r + h) - diagnostics.pair_potential(r - h)) / (2 * h)

    assert G * dphi == pytest.approx(G / (r ** 2 + s ** 2), rel=1e-8)
    # Far field approaches Newtonian
    assert diagnostics.pair_potential(1e6) == pytest.approx(-1e-6, rel=1e-6)


def test_momentum_and_center_of_mass():
    ensemble = MassEnsemble([1.0, 3.0], [0.0, 4.0], [0.0, 0.0], [1.0, -1.0], [2.0, 0.5])
    diagnostics = Diagnostics()

    assert np.allclose(diagnostics.total_momentum(ensemble), [-2.0, 3.5])
    assert np.allclose(diagnostics.center_of_mass(ensemble), [3.0, 0.0])
    assert diagnostics.angular_momentum(ensemble) == pytest.approx(3.0 * 4.0 * 0.5)
    assert np.allclose(diagnostics.center_of_mass(MassEnsemble()), [0.0, 0.0])


def test_rk4_conserves_momentum_with_exact_forces():
    rng = np.random.default_rng(11)
    n = 12
    params = GravityParams(softening=0.5, accuracy_threshold=np.inf)
    sim = Simulator(RK4Integrator(), dt=0.01, params=params)
    sim.initialize(rng.uniform(1, 3, n), rng.uniform(-5, 5, n), rng.uniform(-5, 5, n),
                   rng.normal(0, 0.1, n), rng.normal(0, 0.1, n))
    diagnostics = Diagnostics.for_ensemble(sim.system)
    p0 = diagnostics.total_momentum(sim.system)

    sim.run(50)

    assert np.allclose(diagnostics.total_momentum(sim.system), p0, atol=1e-10)

"""CLI main entry point."""

import argparse
import sys
import warnings
from gravity_sim.io.state_io import save_state
from gravity_sim.physics.diagnostics import Diagnostics
from gravity_sim.physics.integrators import available_integrators, get_integrator
from gravity_sim.physics.simulator import Simulator
from gravity_sim.presets import available_presets, get_preset
from gravity_sim.utils.config import SimulationConfig, load_config

TWO_BODY_PRESETS = ('binary', 'demo')
ORBITAL_PRESETS = ('binary', 'cluster')


def build_simulator(config: SimulationConfig) -> Simulator:
    """Create a simulator populated from the configured preset."""
    integrator = get_integrator(config.integrator)
    sim = Simulator(
        integrator,
        dt=config.dt,
        params=config.gravity_params(),
        merge_density=config.merge_density,
    )
    preset_kwargs = dict(config.preset_params)
    if config.preset.lower() in ORBITAL_PRESETS:
        # Orbital speeds must be tuned for the G the simulation runs with
        preset_kwargs.setdefault('G', config.gravity_constant)
    n_particles = None if config.preset.lower() in TWO_BODY_PRESETS else config.n_particles
    preset = get_preset(config.preset, n_particles, config.seed, **preset_kwargs)
    sim.initialize(*preset.generate())
    return sim


def run_simulation(config: SimulationConfig):
    """Run a simulation and print a diagnostics table."""
    if config.debug_every < 1:
        raise ValueError(f"debug_every must be >= 1, got {config.debug_every}")
    sim = build_simulator(config)
    diagnostics = Diagnostics.for_ensemble(sim.system)

    print(f"Running simulation: {config.preset} with {sim.mass_count} bodies")
    print(f"Integrator: {sim.integrator.name}, method: {config.method}, dt: {config.dt}, "
          f"G: {config.gravity_constant}, theta: {config.accuracy_threshold}, eps: {config.softening}")

    K0, U0, E0 = diagnostics.compute_energies(sim.system)
    print(f"{'Step':<8} {'Time':<10} {'N':<6} {'K':<14} {'U':<14} {'E':<14} {'dE/E0':<10}")
    print("-" * 80)
    print(f"{0:<8} {0.0:<10.3f} {sim.mass_count:<6} {K0:<14.6g} {U0:<14.6g} {E0:<14.6g} {0.0:<10.4f}%")

    for step in range(1, config.steps + 1):
        sim.step()
        if step % config.debug_every == 0 or step == config.steps:
            K, U, E = diagnostics.compute_energies(sim.system)
            dE = (E - E0) / abs(E0) * 100 if abs(E0) > 0 else 0.0
            print(f"{step:<8} {sim.time:<10.3f} {sim.mass_count:<6} {K:<14.6g} {U:<14.6g} {E:<14.6g} {dE:<10.4f}%")

    if sim.merged_count:
        print(f"Merged {sim.merged_count} bodies")

    if config.save_state:
        save_state(sim.system, config.save_state, metadata={
            'time': sim.time,
            'steps': sim.step_count,
            'preset': config.preset,
            'integrator': config.integrator,
        })
        print(f"State saved to {config.save_state}")

    print("Simulation complete!")
    return sim


def main(argv=None):
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Gravity Simulator - 2D Barnes-Hut point-mass simulation")

    parser.add_argument('--config', type=str, default=None,
                        help='Load settings from a .json or .yaml file (flags override it)')

    # Simulation parameters
    parser.add_argument('--preset', type=str, default=None, choices=available_presets(),
                        help='Preset scenario (default: cluster)')
    parser.add_argument('--particles', type=int, default=None,
                        help='Number of bodies (cluster preset only)')
    parser.add_argument('--steps', type=int, default=None,
                        help='Number of simulation steps')
    parser.add_argument('--dt', type=float, default=None,
                        help='Time step')
    parser.add_argument('--integrator', type=str, default=None, choices=available_integrators(),
                        help='Numerical integrator (default: rk4)')
    parser.add_argument('--debug-every', type=int, default=None,
                        help='Print diagnostics every N steps')

    # Gravity
    parser.add_argument('--method', type=str, default=None, choices=['barnes_hut', 'direct'],
                        help='Acceleration method (default: barnes_hut)')
    parser.add_argument('--G', type=float, default=None,
                        help='Gravitational constant (default: 1.0)')
    parser.add_argument('--theta', type=float, default=None,
                        help='Accuracy threshold: distance^2/size^2 ratio above which a node is '
                             'aggregated. Larger is more accurate and slower (default: 4.0)')
    parser.add_argument('--softening', type=float, default=None,
                        help='Softening length (default: 1e-3)')
    parser.add_argument('--merge-density', type=float, default=None,
                        help='Merge overlapping bodies after each step assuming this density')

    # Reproducibility / output
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')
    parser.add_argument('--save-state', type=str, default=None,
                        help='Save final state to file (.npz or .json)')

    # Info
    parser.add_argument('--list-integrators', action='store_true',
                        help='List available integrators and exit')

    args = parser.parse_args(argv)

    if args.list_integrators:
        print("Available integrators:")
        for name in available_integrators():
            print(f"  - {name}")
        return 0

    try:
        config = load_config(args.config) if args.config else SimulationConfig()
        config.update(
            preset=args.preset,
            n_particles=args.particles,
            steps=args.steps,
            dt=args.dt,
            integrator=args.integrator,
            debug_every=args.debug_every,
            method=args.method,
            gravity_constant=args.G,
            accuracy_threshold=args.theta,
            softening=args.softening,
            merge_density=args.merge_density,
            seed=args.seed,
            save_state=args.save_state,
        )
        if args.particles is not None and config.preset.lower() in TWO_BODY_PRESETS:
            warnings.warn(
                f"--particles={args.particles} is ignored by the '{config.preset}' preset, "
                f"which always has 2 bodies.",
                UserWarning
            )
        run_simulation(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())

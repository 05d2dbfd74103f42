"""Basic example of using the gravity simulator."""

from gravity_sim import Simulator, GravityParams
from gravity_sim.physics.integrators import RK4Integrator
from gravity_sim.presets import RotatingCluster

def main():
    """Run a rotating cluster simulation with a merge pass."""
    # Create a rotating cluster preset
    preset = RotatingCluster(
        n_particles=500,
        seed=42,
        cluster_radius=100.0,
        inner_radius=10.0
    )

    # Create simulator with RK4 integrator
    sim = Simulator(
        RK4Integrator(),
        dt=0.05,
        params=GravityParams(accuracy_threshold=4.0, softening=0.1),
        merge_density=5.0
    )

    # Initialize simulation
    sim.initialize(*preset.generate())

    # Run simulation
    print("Running simulation...")
    print(f"Initial energy: {sim.get_energy():.6f}")

    for step in range(200):
        sim.step()
        if step % 50 == 0:
            energy = sim.get_energy()
            print(f"Step {step}: Time={sim.time:.2f}, Bodies={sim.mass_count}, Energy={energy:.6f}")

    # Flat arrays, ready to hand to a renderer
    xs, ys = sim.positions_x, sim.positions_y
    print(f"Extent: x=[{xs.min():.1f}, {xs.max():.1f}] y=[{ys.min():.1f}, {ys.max():.1f}]")
    print(f"Merged bodies: {sim.merged_count}")
    print("Simulation complete!")

if __name__ == "__main__":
    main()

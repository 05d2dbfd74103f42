"""I/O utilities for state management."""

from gravity_sim.io.state_io import save_state, load_state

__all__ = ["save_state", "load_state"]

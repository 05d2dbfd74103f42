"""Structure-of-arrays point-mass ensemble driven by the generic integrators."""

import numpy as np
from typing import Optional, Tuple
from gravity_sim.physics.force_calculator import ForceCalculator, GravityParams
from gravity_sim.physics.integrators.base import ArithmeticState
from gravity_sim.physics.merging import merge_overlapping


class EnsembleDifference:
    """Rate of change of an ensemble: velocities and accelerations per body."""

    __slots__ = ("velocities_x", "velocities_y", "accelerations_x", "accelerations_y")

    def __init__(self, velocities_x, velocities_y, accelerations_x, accelerations_y):
        self.velocities_x = velocities_x
        self.velocities_y = velocities_y
        self.accelerations_x = accelerations_x
        self.accelerations_y = accelerations_y

    def __len__(self) -> int:
        return len(self.velocities_x)

    def __mul__(self, duration: float) -> "MassEnsemble":
        """Scale by a duration into a state delta (zero masses, no params)."""
        return MassEnsemble._unchecked(
            np.zeros(len(self)),
            self.velocities_x * duration,
            self.velocities_y * duration,
            self.accelerations_x * duration,
            self.accelerations_y * duration,
            params=None,
        )

    __rmul__ = __mul__


class MassEnsemble(ArithmeticState):
    """Point masses stored as five parallel float64 arrays.

    Index ``i`` in ``masses``, ``positions_x``, ``positions_y``,
    ``velocities_x`` and ``velocities_y`` describes one body. The arrays are
    exposed directly so a renderer can read them every frame without copying.
    Indices are not stable across a merge pass.
    """

    def __init__(
        self,
        masses=None,
        positions_x=None,
        positions_y=None,
        velocities_x=None,
        velocities_y=None,
        params: Optional[GravityParams] = None,
    ):
        """Initialize ensemble.

        Args:
            masses: Body masses (n,)
            positions_x: x coordinates (n,)
            positions_y: y coordinates (n,)
            velocities_x: x velocities (n,)
            velocities_y: y velocities (n,)
            params: Gravity configuration (defaults to ``GravityParams()``)

        Raises:
            ValueError: If lengths differ, any mass is not positive and finite,
                or any coordinate is not finite
        """
        self.masses = self._as_array(masses)
        n = len(self.masses)
        self.positions_x = self._as_array(positions_x, n)
        self.positions_y = self._as_array(positions_y, n)
        self.velocities_x = self._as_array(velocities_x, n)
        self.velocities_y = self._as_array(velocities_y, n)
        for name in ("positions_x", "positions_y", "velocities_x", "velocities_y"):
            values = getattr(self, name)
            if len(values) != n:
                raise ValueError(f"{name} has length {len(values)}, expected {n}")
            if not np.all(np.isfinite(values)):
                raise ValueError(f"{name} must be finite")
        if not np.all(np.isfinite(self.masses) & (self.masses > 0)):
            raise ValueError("all masses must be positive and finite")
        self.params = params if params is not None else GravityParams()

    @staticmethod
    def _as_array(data, n: int = 0) -> np.ndarray:
        if data is None:
            return np.zeros(n)
        return np.array(data, dtype=np.float64).reshape(-1)

    @classmethod
    def _unchecked(cls, masses, positions_x, positions_y, velocities_x, velocities_y, params):
        """Wrap arrays as-is, for clones and integration deltas."""
        ensemble = cls.__new__(cls)
        ensemble.masses = masses
        ensemble.positions_x = positions_x
        ensemble.positions_y = positions_y
        ensemble.velocities_x = velocities_x
        ensemble.velocities_y = velocities_y
        ensemble._params = params
        ensemble._force_calculator = None
        return ensemble

    @classmethod
    def from_arrays(cls, masses, positions, velocities, params: Optional[GravityParams] = None) -> "MassEnsemble":
        """Build from (n,) masses and (n, 2) positions/velocities."""
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 2)
        velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 2)
        return cls(
            masses,
            positions[:, 0],
            positions[:, 1],
            velocities[:, 0],
            velocities[:, 1],
            params=params,
        )

    def to_arrays(self) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return copies as (masses (n,), positions (n, 2), velocities (n, 2))."""
        return (
            self.masses.copy(),
            np.column_stack((self.positions_x, self.positions_y)),
            np.column_stack((self.velocities_x, self.velocities_y)),
        )

    def __len__(self) -> int:
        return len(self.masses)

    @property
    def params(self) -> GravityParams:
        return self._params

    @params.setter
    def params(self, value: GravityParams):
        self._params = value.validate()
        self._force_calculator: Optional[ForceCalculator] = None

    @property
    def force_calculator(self) -> ForceCalculator:
        if self._force_calculator is None:
            self._force_calculator = ForceCalculator(self._params)
        return self._force_calculator

    def add_mass(self, mass: float, x: float, y: float, vx: float = 0.0, vy: float = 0.0) -> int:
        """Append a body and return its index.

        Raises:
            ValueError: If mass is not a positive finite number or any coordinate is not finite
        """
        if not (np.isfinite(mass) and mass > 0):
            raise ValueError(f"mass must be positive and finite, got {mass}")
        if not all(np.isfinite(v) for v in (x, y, vx, vy)):
            raise ValueError(f"position and velocity must be finite, got {(x, y, vx, vy)}")
        self.masses = np.append(self.masses, float(mass))
        self.positions_x = np.append(self.positions_x, float(x))
        self.positions_y = np.append(self.positions_y, float(y))
        self.velocities_x = np.append(self.velocities_x, float(vx))
        self.velocities_y = np.append(self.velocities_y, float(vy))
        return len(self.masses) - 1

    def positions(self) -> np.ndarray:
        """Positions stacked as (n, 2)."""
        return np.column_stack((self.positions_x, self.positions_y))

    def derive(self) -> EnsembleDifference:
        """Velocities as-is plus accelerations from a freshly built tree."""
        accels = self.force_calculator.compute_accelerations(self.positions(), self.masses)
        return EnsembleDifference(
            self.velocities_x.copy(),
            self.velocities_y.copy(),
            np.ascontiguousarray(accels[:, 0]),
            np.ascontiguousarray(accels[:, 1]),
        )

    def advance(self, duration: float, difference: EnsembleDifference) -> None:
        """x += dt * v and v += dt * a, index-wise and in place."""
        if len(difference) != len(self):
            raise ValueError(
                f"difference has {len(difference)} entries, ensemble has {len(self)}"
            )
        self.positions_x += duration * difference.velocities_x
        self.positions_y += duration * difference.velocities_y
        self.velocities_x += duration * difference.accelerations_x
        self.velocities_y += duration * difference.accelerations_y

    def copy(self) -> "MassEnsemble":
        # Params are immutable, so clones share them along with the calculator
        clone = MassEnsemble._unchecked(
            self.masses.copy(),
            self.positions_x.copy(),
            self.positions_y.copy(),
            self.velocities_x.copy(),
            self.velocities_y.copy(),
            params=self._params,
        )
        clone._force_calculator = self._force_calculator
        return clone

    def __iadd__(self, delta: "MassEnsemble") -> "MassEnsemble":
        """Accumulate positions and velocities of a delta; masses are left alone."""
        if len(delta) != len(self):
            raise ValueError(f"delta has {len(delta)} bodies, ensemble has {len(self)}")
        self.positions_x += delta.positions_x
        self.positions_y += delta.positions_y
        self.velocities_x += delta.velocities_x
        self.velocities_y += delta.velocities_y
        return self

    def merge_overlapping(self, density: float) -> int:
        """Merge bodies whose density-implied spheres overlap.

        Returns:
            Number of bodies absorbed into others
        """
        merged = merge_overlapping(
            self.masses,
            self.positions_x,
            self.positions_y,
            self.velocities_x,
            self.velocities_y,
            density,
        )
        absorbed = len(self) - len(merged[0])
        (
            self.masses,
            self.positions_x,
            self.positions_y,
            self.velocities_x,
            self.velocities_y,
        ) = merged
        return absorbed

"""Mass- and momentum-conserving merge of overlapping bodies.

Each body is treated as a sphere of radius ``cbrt(mass / density)``. The pass
repeatedly takes the first remaining body, folds every remaining body that
overlaps it into one, and moves on. When three or more bodies overlap each
other the outcome depends on this processing order; that is accepted
behavior, not something the pass tries to resolve.
"""

import numpy as np
from typing import Tuple


def body_radii(masses: np.ndarray, density: float) -> np.ndarray:
    """Radius of each body assuming a uniform ``density``."""
    if not (np.isfinite(density) and density > 0):
        raise ValueError(f"density must be positive and finite, got {density}")
    return np.cbrt(np.asarray(masses, dtype=np.float64) / density)


def merge_overlapping(
    masses: np.ndarray,
    positions_x: np.ndarray,
    positions_y: np.ndarray,
    velocities_x: np.ndarray,
    velocities_y: np.ndarray,
    density: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Merge bodies whose centers are closer than the sum of their radii.

    Merged body: mass m1 + m2 + ..., position and velocity averaged with
    mass weights (so total mass and momentum are conserved).

    Args:
        masses, positions_x, positions_y, velocities_x, velocities_y: Parallel (n,) arrays
        density: Assumed body density used for the radii

    Returns:
        Tuple of new (masses, positions_x, positions_y, velocities_x, velocities_y)
    """
    radii = body_radii(masses, density)
    masses = np.asarray(masses, dtype=np.float64)
    px = np.asarray(positions_x, dtype=np.float64)
    py = np.asarray(positions_y, dtype=np.float64)
    vx = np.asarray(velocities_x, dtype=np.float64)
    vy = np.asarray(velocities_y, dtype=np.float64)

    out_m, out_px, out_py, out_vx, out_vy = [], [], [], [], []
    remaining = np.arange(len(masses))
    while len(remaining) > 0:
        i = remaining[0]
        rest = remaining[1:]
        separation = np.hypot(px[rest] - px[i], py[rest] - py[i])
        overlapping = separation < radii[rest] + radii[i]
        group = np.concatenate(([i], rest[overlapping]))
        remaining = rest[~overlapping]

        if len(group) == 1:
            out_m.append(masses[i])
            out_px.append(px[i])
            out_py.append(py[i])
            out_vx.append(vx[i])
            out_vy.append(vy[i])
            continue
        m = masses[group]
        total = np.sum(m)
        out_m.append(total)
        out_px.append(np.sum(px[group] * m) / total)
        out_py.append(np.sum(py[group] * m) / total)
        out_vx.append(np.sum(vx[group] * m) / total)
        out_vy.append(np.sum(vy[group] * m) / total)

    return (
        np.array(out_m, dtype=np.float64),
        np.array(out_px, dtype=np.float64),
        np.array(out_py, dtype=np.float64),
        np.array(out_vx, dtype=np.float64),
        np.array(out_vy, dtype=np.float64),
    )

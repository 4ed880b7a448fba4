"""
Game of Life on the contribution-calendar torus.
"""
import numpy as np

from utils.date_grid import GRID_HEIGHT


def step(grid):
    """Perform one GoL update with toroidal boundary on both axes.

    Only aliveness (count > 0) of the input is read; the result holds 1 for
    live cells and 0 for dead ones and is a new read-only array.
    """
    grid = np.asarray(grid)
    if grid.ndim != 2 or grid.shape[1] != GRID_HEIGHT:
        raise ValueError(f"Expected a (width, {GRID_HEIGHT}) grid, got shape {grid.shape}")
    alive = (grid > 0).astype(np.int64)
    # Count neighbors
    neighbors = sum(np.roll(np.roll(alive, i, 0), j, 1)
                    for i in (-1, 0, 1) for j in (-1, 0, 1)
                    if not (i == 0 and j == 0))
    # Apply rules
    birth = (neighbors == 3) & (alive == 0)
    survive = ((neighbors == 2) | (neighbors == 3)) & (alive == 1)
    out = (birth | survive).astype(np.int64)
    out.flags.writeable = False
    return out


def simulate(grid, steps=50):
    """Simulate for given steps or until repetition.

    Returns the history starting with `grid`. When a state repeats, it is
    appended once more and the run stops, so detect_period() can find it.
    """
    seen = set()
    history = []
    g = (np.asarray(grid) > 0).astype(np.int64)
    for _ in range(steps + 1):
        key = g.tobytes()
        history.append(g)
        if key in seen:
            break
        seen.add(key)
        g = step(g)
    return history

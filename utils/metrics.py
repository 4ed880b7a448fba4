"""
Metrics for a day's generation: population, births and deaths, period.
"""
import numpy as np


def population(grid):
    return int((np.asarray(grid) > 0).sum())


def transition_counts(before, after):
    """Cells born, died and survived going from `before` to `after`."""
    was = np.asarray(before) > 0
    now = np.asarray(after) > 0
    return {
        'born': int((now & ~was).sum()),
        'died': int((was & ~now).sum()),
        'survived': int((was & now).sum()),
    }


def detect_period(history):
    """Given a history list of grids, return period (1 for still life, >1 if oscillator), or None if no repeat."""
    # detect period relative to final state
    if len(history) <= 1:
        return None
    last = history[-1]
    for p in range(1, len(history)):
        if np.array_equal(history[-1-p], last):
            return p
    return None

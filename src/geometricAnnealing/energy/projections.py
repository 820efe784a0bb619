"""Numeric views of a state array used as kernel inputs."""

from __future__ import annotations

import numpy as np

# Sentinel for positions beyond the grid edge inside an evaluation window.
OUTSIDE = -1

# Lookup tables indexed by ``state + 1`` so OUTSIDE maps to slot 0.
_OCCUPANCY = np.array([0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0])
_GROUPED = np.array([0.0, 0.0, 1.0, 0.5, 0.5, 0.5, 0.5])
_SPIN = np.array([0.0, -1.0, 1.0, 0.0, 0.0, 0.0, 0.0])


def occupancy(states: np.ndarray) -> np.ndarray:
    """EMPTY and diagonal states to 0, FULL to 1."""
    return _OCCUPANCY[states.astype(np.intp) + 1]


def grouped(states: np.ndarray) -> np.ndarray:
    """EMPTY to 0, FULL to 1, diagonal states collapsed to 0.5."""
    return _GROUPED[states.astype(np.intp) + 1]


def spins(states: np.ndarray) -> np.ndarray:
    """EMPTY to -1, FULL to +1, diagonal states to 0."""
    return _SPIN[states.astype(np.intp) + 1]


def in_grid(states: np.ndarray) -> np.ndarray:
    return (states != OUTSIDE).astype(float)


def alternation_markers(states: np.ndarray) -> np.ndarray:
    """1 where a cell sits between two equal neighbours of another state.

    Horizontal (left/right) and vertical (top/bottom) pairs are checked. Both
    neighbours must be inside the grid; border positions of ``states`` are
    always 0.
    """
    markers = np.zeros(states.shape, dtype=float)
    if states.shape[0] < 3 or states.shape[1] < 3:
        return markers
    center = states[1:-1, 1:-1]
    left, right = states[1:-1, :-2], states[1:-1, 2:]
    up, down = states[:-2, 1:-1], states[2:, 1:-1]
    horizontal = (left == right) & (left != center) & (left != OUTSIDE)
    vertical = (up == down) & (up != center) & (up != OUTSIDE)
    markers[1:-1, 1:-1] = (center != OUTSIDE) & (horizontal | vertical)
    return markers


PROJECTIONS = {
    "occupancy": occupancy,
    "grouped": grouped,
    "markers": alternation_markers,
    "spins": spins,
}


__all__ = [
    "OUTSIDE",
    "PROJECTIONS",
    "alternation_markers",
    "grouped",
    "in_grid",
    "occupancy",
    "spins",
]

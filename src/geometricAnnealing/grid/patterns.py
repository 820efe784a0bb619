"""Bulk initial patterns and presets for a :class:`GridCore`."""

from __future__ import annotations

from typing import Callable, Dict

import numpy as np

from .core import GridCore
from .states import AREA_CONTRIBUTION, DIAGONAL_STATES, NON_EMPTY_STATES, CellState

RANDOM_OCCUPANCY = 0.3


def _distance_from_center(size: int) -> np.ndarray:
    center = size // 2
    rows, cols = np.indices((size, size))
    return np.sqrt((rows - center) ** 2 + (cols - center) ** 2)


def initial_blob(grid: GridCore, rng: np.random.Generator) -> None:
    """Central blob with a FULL core and diagonal rim, plus scattered cells.

    Scattered cells are added until the area reaches 70% of the target.
    """
    size = grid.size
    radius = max(2, size // 8)
    dist = _distance_from_center(size)
    cells = np.zeros((size, size), dtype=np.int8)

    rim = dist <= radius
    cells[rim] = rng.choice(np.asarray(DIAGONAL_STATES, dtype=np.int8), size=int(rim.sum()))
    cells[dist < radius * 0.6] = CellState.FULL

    goal = grid.target_area * 0.7
    area = float(AREA_CONTRIBUTION[cells].sum())
    empty = np.flatnonzero(cells.ravel() == CellState.EMPTY)
    for flat in rng.permutation(empty):
        if area >= goal:
            break
        if rng.random() < 0.7:
            state = CellState.FULL
        else:
            state = DIAGONAL_STATES[int(rng.integers(len(DIAGONAL_STATES)))]
        cells.flat[flat] = state
        area += AREA_CONTRIBUTION[state]

    grid.load_cells(cells)


def randomize(grid: GridCore, rng: np.random.Generator) -> None:
    """Occupy about 30% of cells with uniformly chosen non-empty states."""
    size = grid.size
    occupied = rng.random((size, size)) < RANDOM_OCCUPANCY
    states = rng.choice(np.asarray(NON_EMPTY_STATES, dtype=np.int8), size=(size, size))
    grid.load_cells(np.where(occupied, states, CellState.EMPTY).astype(np.int8))


def smooth_blob(grid: GridCore, rng: np.random.Generator | None = None) -> None:
    """Filled disc whose radius scales with the grid size."""
    size = grid.size
    scale = max(0.15, min(0.35, size / 100))
    radius = max(3, int(size * (scale + 0.1)))
    cells = np.where(_distance_from_center(size) < radius, CellState.FULL, CellState.EMPTY)
    grid.load_cells(cells.astype(np.int8))


def checkerboard(grid: GridCore, rng: np.random.Generator | None = None) -> None:
    """FULL on even ``row + col`` parity, EMPTY elsewhere."""
    rows, cols = np.indices((grid.size, grid.size))
    cells = np.where((rows + cols) % 2 == 0, CellState.FULL, CellState.EMPTY)
    grid.load_cells(cells.astype(np.int8))


def clear(grid: GridCore, rng: np.random.Generator | None = None) -> None:
    grid.clear()


PATTERNS: Dict[str, Callable[..., None]] = {
    "blob": initial_blob,
    "random": randomize,
    "smooth": smooth_blob,
    "checkerboard": checkerboard,
    "empty": clear,
}


def apply_pattern(grid: GridCore, name: str, rng: np.random.Generator) -> None:
    """Fill ``grid`` with a named pattern."""
    key = name.strip().lower()
    if key not in PATTERNS:
        raise ValueError(f"pattern must be one of: {', '.join(sorted(PATTERNS))}")
    PATTERNS[key](grid, rng)


__all__ = [
    "PATTERNS",
    "apply_pattern",
    "checkerboard",
    "clear",
    "initial_blob",
    "randomize",
    "smooth_blob",
]

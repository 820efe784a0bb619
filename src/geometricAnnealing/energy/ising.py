"""Ising-style pairwise coupling between neighbouring cells.

EMPTY cells carry spin -1, FULL cells +1 and diagonal cells 0, so diagonal
cells drop out of the coupling. 4-connected pairs couple with ``j_near`` and
diagonal pairs with ``j_far``.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from ..grid.box import BoundingBox
from ..grid.states import CellState
from .convolution import ProjectedWindow, extract_window
from .kernels import get_kernel

Cell = Tuple[int, int]


def state_spin(state: int) -> float:
    if state == CellState.EMPTY:
        return -1.0
    if state == CellState.FULL:
        return 1.0
    return 0.0


def _coupling(dr: int, dc: int, j_near: float, j_far: float) -> float:
    return j_near if dr == 0 or dc == 0 else j_far


def ising_window_energy(pw: ProjectedWindow, j_near: float = 1.0, j_far: float = 1.0) -> float:
    """Half the ordered-pair sum for cells of the window region.

    Pairs with both ends in the region are counted once; pairs crossing the
    region edge contribute half.
    """
    spin = pw.window.inner(pw.projection("spins"))
    near = pw.response(get_kernel("ising_near"), "spins", normalize=False)
    far = pw.response(get_kernel("ising_far"), "spins", normalize=False)
    return float(-0.5 * np.sum(spin * (j_near * near + j_far * far)))


def ising_energy(
    cells: np.ndarray,
    j_near: float = 1.0,
    j_far: float = 1.0,
    region: BoundingBox | None = None,
) -> float:
    """Total coupling energy ``-sum J s_i s_j`` over neighbouring pairs."""
    return ising_window_energy(ProjectedWindow(extract_window(cells, region, halo=1)), j_near, j_far)


def _local_field(
    cells: np.ndarray,
    row: int,
    col: int,
    j_near: float,
    j_far: float,
    exclude: Cell | None = None,
) -> float:
    size = cells.shape[0]
    total = 0.0
    for dr in (-1, 0, 1):
        for dc in (-1, 0, 1):
            if dr == 0 and dc == 0:
                continue
            r, c = row + dr, col + dc
            if not (0 <= r < size and 0 <= c < size) or (r, c) == exclude:
                continue
            total += _coupling(dr, dc, j_near, j_far) * state_spin(cells[r, c])
    return total


def ising_site_energy(
    cells: np.ndarray, row: int, col: int, j_near: float = 1.0, j_far: float = 1.0
) -> float:
    """Coupling energy between one cell and its up to 8 neighbours."""
    return -state_spin(cells[row, col]) * _local_field(cells, row, col, j_near, j_far)


def local_ising_change(
    cells: np.ndarray,
    row: int,
    col: int,
    new_state: int,
    j_near: float = 1.0,
    j_far: float = 1.0,
    exclude: Cell | None = None,
) -> float:
    """Energy change from setting one cell to ``new_state``.

    ``exclude`` drops one neighbour from the sum; swaps use it to keep the
    partner cell out of each half.
    """
    d_spin = state_spin(new_state) - state_spin(cells[row, col])
    if d_spin == 0.0:
        return 0.0
    return -d_spin * _local_field(cells, row, col, j_near, j_far, exclude)


def ising_swap_delta(
    cells: np.ndarray, a: Cell, b: Cell, j_near: float = 1.0, j_far: float = 1.0
) -> float:
    """Energy change from exchanging the states of cells ``a`` and ``b``."""
    state_a, state_b = cells[a], cells[b]
    if a == b or state_a == state_b:
        return 0.0
    delta = local_ising_change(cells, a[0], a[1], state_b, j_near, j_far, exclude=b)
    delta += local_ising_change(cells, b[0], b[1], state_a, j_near, j_far, exclude=a)

    dr, dc = b[0] - a[0], b[1] - a[1]
    if max(abs(dr), abs(dc)) == 1:
        # Direct a-b bond: the product of the two spins is unchanged.
        j = _coupling(dr, dc, j_near, j_far)
        before = state_spin(state_a) * state_spin(state_b)
        after = state_spin(state_b) * state_spin(state_a)
        delta += -j * (after - before)
    return delta


__all__ = [
    "ising_energy",
    "ising_site_energy",
    "ising_swap_delta",
    "ising_window_energy",
    "local_ising_change",
    "state_spin",
]

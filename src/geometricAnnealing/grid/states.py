"""Cell state enumeration and per-state lookup tables."""

from __future__ import annotations

from enum import IntEnum

import numpy as np


class CellState(IntEnum):
    """Geometric state held by a single grid cell.

    The four diagonal variants are half-occupied splits of the cell, named by
    the corner the filled triangle starts from.
    """

    EMPTY = 0
    FULL = 1
    DIAG_A = 2  # top-left to bottom-right
    DIAG_B = 3  # top-right to bottom-left
    DIAG_C = 4  # bottom-left to top-right
    DIAG_D = 5  # bottom-right to top-left


N_STATES = len(CellState)
DIAGONAL_STATES = (CellState.DIAG_A, CellState.DIAG_B, CellState.DIAG_C, CellState.DIAG_D)
NON_EMPTY_STATES = (CellState.FULL,) + DIAGONAL_STATES

# Indexed by state value.
AREA_CONTRIBUTION = np.array([0.0, 1.0, 0.5, 0.5, 0.5, 0.5], dtype=float)


def validate_state(state: int) -> CellState:
    """Coerce ``state`` to :class:`CellState` or raise ``ValueError``."""
    try:
        return CellState(int(state))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid cell state: {state!r}") from exc


__all__ = [
    "AREA_CONTRIBUTION",
    "CellState",
    "DIAGONAL_STATES",
    "NON_EMPTY_STATES",
    "N_STATES",
    "validate_state",
]

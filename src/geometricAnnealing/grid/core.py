"""Grid state with incremental inventory and area bookkeeping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from .box import BoundingBox
from .states import AREA_CONTRIBUTION, N_STATES, CellState, validate_state

logger = logging.getLogger(__name__)

TARGET_AREA_FRACTION = 0.3

_NEIGHBOR_OFFSETS = (
    (-1, -1),
    (-1, 0),
    (-1, 1),
    (0, -1),
    (0, 1),
    (1, -1),
    (1, 0),
    (1, 1),
)


@dataclass(frozen=True)
class CellChange:
    """Outcome of a single-cell mutation."""

    row: int
    col: int
    old_state: CellState
    new_state: CellState
    area_delta: float


class GridCore:
    """Owns the ``N x N`` cell array, its per-state inventory and total area.

    The inventory is computed lazily with a full scan and then kept current
    by :meth:`set_cell` in O(1). Bulk writers (``resize``, ``load_cells``,
    ``fill_rect``, ``clear``) bypass the single-cell path, so they invalidate
    the inventory and recompute the area.
    """

    def __init__(self, size: int) -> None:
        self._validate_size(size)
        self.size = int(size)
        self.cells = np.zeros((self.size, self.size), dtype=np.int8)
        self._inventory: Dict[CellState, int] | None = None
        self.total_area = 0.0

    @staticmethod
    def _validate_size(size: int) -> None:
        if int(size) != size or size <= 0:
            raise ValueError("size must be a positive integer")

    @property
    def target_area(self) -> int:
        return int(self.size * self.size * TARGET_AREA_FRACTION)

    def in_bounds(self, row: int, col: int) -> bool:
        return 0 <= row < self.size and 0 <= col < self.size

    def _check_bounds(self, row: int, col: int) -> None:
        if not self.in_bounds(row, col):
            raise IndexError(
                f"cell ({row}, {col}) outside grid of size {self.size}"
            )

    def get_cell(self, row: int, col: int) -> CellState:
        self._check_bounds(row, col)
        return CellState(int(self.cells[row, col]))

    def get_state_safe(self, row: int, col: int) -> CellState:
        """Cell state, or EMPTY for coordinates outside the grid."""
        if not self.in_bounds(row, col):
            return CellState.EMPTY
        return CellState(int(self.cells[row, col]))

    def set_cell(self, row: int, col: int, state: int) -> CellChange | None:
        """Write one cell, keeping inventory and area in step.

        Returns ``None`` when the cell already holds ``state``.
        """
        self._check_bounds(row, col)
        new_state = validate_state(state)
        old_state = CellState(int(self.cells[row, col]))
        if old_state == new_state:
            return None

        self.cells[row, col] = new_state
        area_delta = float(AREA_CONTRIBUTION[new_state] - AREA_CONTRIBUTION[old_state])
        self.total_area += area_delta
        if self._inventory is not None:
            self._inventory[old_state] -= 1
            self._inventory[new_state] += 1
        return CellChange(row, col, old_state, new_state, area_delta)

    def toggle_cell(self, row: int, col: int) -> CellChange:
        """Flip a cell between EMPTY and FULL; diagonal cells become EMPTY."""
        current = self.get_cell(row, col)
        target = CellState.FULL if current == CellState.EMPTY else CellState.EMPTY
        return self.set_cell(row, col, target)  # type: ignore[return-value]

    def compute_state_inventories(self) -> Dict[CellState, int]:
        """Per-state cell counts, scanning the grid only when not cached."""
        if self._inventory is None:
            counts = np.bincount(self.cells.ravel(), minlength=N_STATES)
            self._inventory = {state: int(counts[state]) for state in CellState}
        return dict(self._inventory)

    def invalidate_state_inventories(self) -> None:
        self._inventory = None

    def calculate_total_area(self) -> float:
        return float(AREA_CONTRIBUTION[self.cells].sum())

    def get_neighbors(self, row: int, col: int) -> List[Tuple[int, int]]:
        """In-bounds orthogonal and diagonal neighbours of a cell."""
        return [
            (row + dr, col + dc)
            for dr, dc in _NEIGHBOR_OFFSETS
            if self.in_bounds(row + dr, col + dc)
        ]

    def view(self) -> np.ndarray:
        """Read-only view of the cell array for renderers."""
        v = self.cells.view()
        v.flags.writeable = False
        return v

    # Bulk mutations

    def _after_bulk_write(self) -> None:
        self.invalidate_state_inventories()
        self.total_area = self.calculate_total_area()

    def resize(self, size: int) -> None:
        """Reallocate as an empty ``size x size`` grid."""
        self._validate_size(size)
        logger.debug("resizing grid %d -> %d", self.size, size)
        self.size = int(size)
        self.cells = np.zeros((self.size, self.size), dtype=np.int8)
        self._after_bulk_write()

    def clear(self) -> None:
        self.cells.fill(CellState.EMPTY)
        self._after_bulk_write()

    @staticmethod
    def validate_cells(cells: Any) -> np.ndarray:
        """Check a square array of state values and return an ``int8`` copy."""
        arr = np.asarray(cells)
        if arr.ndim != 2 or arr.shape[0] != arr.shape[1] or arr.shape[0] == 0:
            raise ValueError("cells must be a non-empty square 2D array")
        if arr.min() < 0 or arr.max() >= N_STATES:
            raise ValueError("cells contain values outside the state range")
        return arr.astype(np.int8, copy=True)

    def load_cells(self, cells: Any) -> None:
        """Replace the contents with a square array of state values."""
        arr = self.validate_cells(cells)
        self.size = int(arr.shape[0])
        self.cells = arr
        self._after_bulk_write()

    def fill_rect(self, row: int, col: int, height: int, width: int, state: int) -> BoundingBox:
        """Fill a rectangle clipped to the grid; returns the filled region."""
        if height <= 0 or width <= 0:
            raise ValueError("height and width must be > 0")
        self._check_bounds(row, col)
        value = validate_state(state)
        box = BoundingBox(
            row,
            min(self.size - 1, row + height - 1),
            col,
            min(self.size - 1, col + width - 1),
        )
        self.cells[box.slices()] = value
        self._after_bulk_write()
        return box

    def get_grid_stats(self) -> Dict[str, Any]:
        inventory = self.compute_state_inventories()
        total_cells = self.size * self.size
        target = self.target_area
        return {
            "grid_size": self.size,
            "total_cells": total_cells,
            "occupied_cells": total_cells - inventory[CellState.EMPTY],
            "total_area": self.total_area,
            "target_area": target,
            "area_ratio": self.total_area / target if target > 0 else 0.0,
            "state_distribution": {state.name: count for state, count in inventory.items()},
        }


__all__ = [
    "CellChange",
    "GridCore",
    "TARGET_AREA_FRACTION",
]

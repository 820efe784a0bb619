"""Uniform sampling of a cell holding a given state.

Two strategies share the :class:`CellSampler` interface. Full scans are
exact and cheap on small grids or rare states. Reservoir sampling bounds the
number of stored coordinates on large grids.
"""

from __future__ import annotations

import math
from typing import Protocol, Tuple, runtime_checkable

import numpy as np

Cell = Tuple[int, int]

SMALL_GRID_CELLS = 256
RARE_FRACTION = 0.05
MAX_RESERVOIR = 100


@runtime_checkable
class CellSampler(Protocol):
    """Draw one coordinate whose state equals ``state``."""

    def sample(
        self, cells: np.ndarray, state: int, count: int, rng: np.random.Generator
    ) -> Cell | None:
        ...


class FullScanSampler:
    """Collect every match, then pick one uniformly."""

    name = "full_scan"

    def sample(
        self, cells: np.ndarray, state: int, count: int, rng: np.random.Generator
    ) -> Cell | None:
        matches = np.argwhere(cells == state)
        if len(matches) == 0:
            return None
        r, c = matches[int(rng.integers(len(matches)))]
        return int(r), int(c)


def reservoir_size(count: int) -> int:
    return max(1, min(MAX_RESERVOIR, math.ceil(math.sqrt(count))))


class ReservoirSampler:
    """Algorithm R over a randomly ordered row/column traversal.

    Each match is kept with probability ``k / seen``, so the final reservoir
    is a uniform ``k``-subset and a uniform pick from it is a uniform sample
    of all matches.
    """

    name = "reservoir"

    def sample(
        self, cells: np.ndarray, state: int, count: int, rng: np.random.Generator
    ) -> Cell | None:
        k = reservoir_size(count)
        reservoir: list[Cell] = []
        seen = 0
        col_order = rng.permutation(cells.shape[1])
        for row in rng.permutation(cells.shape[0]):
            hits = col_order[cells[row, col_order] == state]
            for col in hits:
                seen += 1
                if len(reservoir) < k:
                    reservoir.append((int(row), int(col)))
                else:
                    j = int(rng.integers(seen))
                    if j < k:
                        reservoir[j] = (int(row), int(col))
        if not reservoir:
            return None
        return reservoir[int(rng.integers(len(reservoir)))]


FULL_SCAN = FullScanSampler()
RESERVOIR = ReservoirSampler()


def select_sampling_strategy(size: int, count: int) -> CellSampler:
    """Full scan for small grids or rare states, reservoir otherwise."""
    total = size * size
    if total <= SMALL_GRID_CELLS or count < RARE_FRACTION * total:
        return FULL_SCAN
    return RESERVOIR


def sample_cell(
    cells: np.ndarray, state: int, count: int, rng: np.random.Generator
) -> Cell | None:
    if count <= 0:
        return None
    sampler = select_sampling_strategy(cells.shape[0], count)
    return sampler.sample(cells, state, count, rng)


__all__ = [
    "CellSampler",
    "FULL_SCAN",
    "FullScanSampler",
    "MAX_RESERVOIR",
    "RARE_FRACTION",
    "RESERVOIR",
    "ReservoirSampler",
    "SMALL_GRID_CELLS",
    "reservoir_size",
    "sample_cell",
    "select_sampling_strategy",
]

from __future__ import annotations

import numpy as np
import pytest

from geometricAnnealing.annealing import EvolutionEngine, affected_boxes
from geometricAnnealing.energy import EnergySystem, EnergyWeights
from geometricAnnealing.grid import BoundingBox, CellState, GridCore


def _random_grid(size: int, seed: int, p_empty: float = 0.5) -> GridCore:
    rng = np.random.default_rng(seed)
    states = rng.integers(1, len(CellState), size=(size, size))
    grid = GridCore(size)
    grid.load_cells(np.where(rng.random((size, size)) < p_empty, 0, states))
    return grid


def _full_delta(system: EnergySystem, grid: GridCore, a, b) -> float:
    before = system.total_energy(grid.cells)
    swapped = grid.cells.copy()
    swapped[a], swapped[b] = grid.cells[b], grid.cells[a]
    return system.total_energy(swapped) - before


def _random_pairs(size: int, rng: np.random.Generator, n: int):
    for _ in range(n):
        a = tuple(int(x) for x in rng.integers(size, size=2))
        b = tuple(int(x) for x in rng.integers(size, size=2))
        yield a, b


def test_affected_boxes_merge_only_when_overlapping() -> None:
    assert affected_boxes((4, 4), (6, 7), 16) == [BoundingBox(2, 8, 2, 9)]
    # radius-2 boxes rows 0..4 and 5..9 only touch
    assert affected_boxes((2, 2), (7, 2), 16) == [BoundingBox(0, 4, 0, 4), BoundingBox(5, 9, 0, 4)]
    assert len(affected_boxes((0, 0), (15, 15), 16)) == 2


@pytest.mark.parametrize("size,seed", [(8, 0), (12, 1), (16, 2), (16, 3)])
def test_bounding_box_delta_matches_full_recompute(size: int, seed: int) -> None:
    grid = _random_grid(size, seed)
    system = EnergySystem(EnergyWeights(corners=1.0, flow=0.6), j_near=1.0, j_far=0.5)
    engine = EvolutionEngine(system, rng=np.random.default_rng(seed))
    rng = np.random.default_rng(100 + seed)
    for a, b in _random_pairs(size, rng, 40):
        expected = _full_delta(system, grid, a, b)
        assert engine.swap_energy_delta(grid, a, b) == pytest.approx(expected, abs=1e-6)


def test_delta_matches_for_adjacent_and_distant_pairs() -> None:
    grid = _random_grid(14, seed=9, p_empty=0.3)
    system = EnergySystem(EnergyWeights(corners=0.5))
    engine = EvolutionEngine(system, rng=np.random.default_rng(0))
    pairs = [
        ((6, 6), (6, 7)),
        ((6, 6), (7, 7)),
        ((6, 6), (10, 10)),  # overlapping boxes
        ((2, 2), (7, 2)),  # touching boxes
        ((0, 0), (13, 13)),  # disjoint, both at corners
        ((0, 5), (13, 5)),
    ]
    for a, b in pairs:
        expected = _full_delta(system, grid, a, b)
        assert engine.swap_energy_delta(grid, a, b) == pytest.approx(expected, abs=1e-6)


def test_delta_on_small_grid() -> None:
    grid = GridCore(3)
    grid.set_cell(0, 0, CellState.FULL)
    grid.set_cell(1, 1, CellState.DIAG_D)
    system = EnergySystem()
    engine = EvolutionEngine(system)
    for a, b in (((0, 0), (2, 2)), ((1, 1), (0, 2)), ((0, 0), (0, 1))):
        assert engine.swap_energy_delta(grid, a, b) == pytest.approx(
            _full_delta(system, grid, a, b), abs=1e-6
        )


def test_delta_with_extreme_weights() -> None:
    grid = _random_grid(10, seed=4)
    system = EnergySystem(
        EnergyWeights(continuity=1000.0, zebra=0.001, corners=500.0, neighbor=250.0, ising=1000.0)
    )
    engine = EvolutionEngine(system)
    rng = np.random.default_rng(8)
    for a, b in _random_pairs(10, rng, 20):
        expected = _full_delta(system, grid, a, b)
        assert engine.swap_energy_delta(grid, a, b) == pytest.approx(expected, rel=1e-9, abs=1e-6)


def test_noop_swaps_have_exactly_zero_delta() -> None:
    grid = _random_grid(8, seed=6)
    engine = EvolutionEngine(EnergySystem())
    assert engine.swap_energy_delta(grid, (3, 3), (3, 3)) == 0.0
    grid.set_cell(1, 1, CellState.DIAG_B)
    grid.set_cell(6, 5, CellState.DIAG_B)
    assert engine.swap_energy_delta(grid, (1, 1), (6, 5)) == 0.0


def test_delta_does_not_touch_the_grid() -> None:
    grid = _random_grid(10, seed=12)
    before = grid.cells.copy()
    area = grid.total_area
    engine = EvolutionEngine(EnergySystem())
    rng = np.random.default_rng(2)
    for a, b in _random_pairs(10, rng, 10):
        engine.swap_energy_delta(grid, a, b)
    np.testing.assert_array_equal(grid.cells, before)
    assert grid.total_area == area


def test_applying_accepted_swap_matches_delta_and_preserves_area() -> None:
    grid = _random_grid(12, seed=21)
    system = EnergySystem()
    engine = EvolutionEngine(system)
    a = tuple(int(x) for x in np.argwhere(grid.cells == CellState.EMPTY)[0])
    b = tuple(int(x) for x in np.argwhere(grid.cells == CellState.FULL)[-1])
    before = system.total_energy(grid.cells)
    area = grid.total_area
    delta = engine.swap_energy_delta(grid, a, b)
    grid.set_cell(a[0], a[1], CellState.FULL)
    grid.set_cell(b[0], b[1], CellState.EMPTY)
    assert system.total_energy(grid.cells) - before == pytest.approx(delta, abs=1e-6)
    assert grid.total_area == area

from __future__ import annotations

import numpy as np
import pytest

from geometricAnnealing.energy import (
    EnergySystem,
    EnergyWeights,
    ising_energy,
    ising_site_energy,
    ising_swap_delta,
    local_ising_change,
    state_spin,
)
from geometricAnnealing.grid import BoundingBox, CellState


def _random_cells(size: int, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, len(CellState), size=(size, size)).astype(np.int8)


def test_spin_mapping() -> None:
    assert state_spin(CellState.EMPTY) == -1.0
    assert state_spin(CellState.FULL) == 1.0
    for state in (CellState.DIAG_A, CellState.DIAG_B, CellState.DIAG_C, CellState.DIAG_D):
        assert state_spin(state) == 0.0


def test_uniform_grids_are_ferromagnetic_ground_states() -> None:
    # 8x8: 112 near pairs and 98 diagonal pairs
    assert ising_energy(np.zeros((8, 8), dtype=np.int8)) == -210.0
    assert ising_energy(np.ones((8, 8), dtype=np.int8)) == -210.0
    assert ising_energy(np.ones((8, 8), dtype=np.int8), j_near=2.0, j_far=0.0) == -224.0


def test_checkerboard_energy_is_positive() -> None:
    rows, cols = np.indices((8, 8))
    cells = ((rows + cols) % 2).astype(np.int8)
    # near pairs all anti-aligned, diagonal pairs all aligned
    assert ising_energy(cells) == 112.0 - 98.0
    assert ising_energy(cells) > 0.0


def test_single_occupied_cell_site_energy() -> None:
    cells = np.zeros((8, 8), dtype=np.int8)
    cells[3, 4] = CellState.FULL
    assert ising_site_energy(cells, 3, 4) == 8.0
    # every one of its 8 bonds flips from aligned to anti-aligned
    assert ising_energy(cells) - ising_energy(np.zeros((8, 8), dtype=np.int8)) == 16.0

    corner = np.zeros((8, 8), dtype=np.int8)
    corner[0, 0] = CellState.FULL
    assert ising_site_energy(corner, 0, 0) == 3.0


def test_diagonal_cells_do_not_couple() -> None:
    cells = np.full((6, 6), CellState.DIAG_C, dtype=np.int8)
    assert ising_energy(cells) == 0.0
    cells[2, 2] = CellState.FULL
    assert ising_energy(cells) == 0.0


def test_local_change_matches_full_recompute() -> None:
    rng = np.random.default_rng(0)
    for seed in range(5):
        cells = _random_cells(7, seed)
        for _ in range(30):
            r, c = (int(x) for x in rng.integers(7, size=2))
            new = int(rng.integers(len(CellState)))
            j_near, j_far = 1.0, 0.5
            before = ising_energy(cells, j_near, j_far)
            local = local_ising_change(cells, r, c, new, j_near, j_far)
            after_cells = cells.copy()
            after_cells[r, c] = new
            after = ising_energy(after_cells, j_near, j_far)
            assert local == pytest.approx(after - before, abs=1e-9)


def test_swap_delta_matches_full_recompute_including_neighbours() -> None:
    rng = np.random.default_rng(1)
    cells = _random_cells(8, seed=3)
    pairs = [((3, 3), (3, 4)), ((3, 3), (4, 4)), ((0, 0), (1, 1)), ((0, 0), (7, 7))]
    pairs += [
        (tuple(int(x) for x in rng.integers(8, size=2)), tuple(int(x) for x in rng.integers(8, size=2)))
        for _ in range(60)
    ]
    for a, b in pairs:
        for j_near, j_far in ((1.0, 1.0), (1.5, -0.5)):
            before = ising_energy(cells, j_near, j_far)
            swapped = cells.copy()
            swapped[a], swapped[b] = cells[b], cells[a]
            expected = ising_energy(swapped, j_near, j_far) - before
            assert ising_swap_delta(cells, a, b, j_near, j_far) == pytest.approx(expected, abs=1e-9)


def test_swap_delta_noop_cases() -> None:
    cells = _random_cells(5, seed=2)
    assert ising_swap_delta(cells, (1, 1), (1, 1)) == 0.0
    cells[0, 0] = cells[4, 4] = CellState.FULL
    assert ising_swap_delta(cells, (0, 0), (4, 4)) == 0.0


def test_region_energy_counts_edge_bonds_by_half() -> None:
    cells = _random_cells(6, seed=8)
    top = BoundingBox(0, 2, 0, 5)
    bottom = BoundingBox(3, 5, 0, 5)
    total = ising_energy(cells, region=top) + ising_energy(cells, region=bottom)
    assert total == pytest.approx(ising_energy(cells))


def test_system_swap_delta_is_weighted_coupling_change() -> None:
    cells = _random_cells(6, seed=4)
    a, b = (2, 2), (3, 4)
    raw = ising_swap_delta(cells, a, b, 1.5, -0.5)
    system = EnergySystem(EnergyWeights(ising=0.25), j_near=1.5, j_far=-0.5)
    assert system.ising_swap_delta(cells, a, b) == pytest.approx(0.25 * raw)
    system.set_weight("ising", 0.0)
    assert system.ising_swap_delta(cells, a, b) == 0.0

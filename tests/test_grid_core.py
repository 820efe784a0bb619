from __future__ import annotations

import numpy as np
import pytest

from geometricAnnealing.grid import BoundingBox, CellState, GridCore, apply_pattern
from geometricAnnealing.grid.patterns import checkerboard, randomize, smooth_blob


def test_new_grid_is_empty_with_full_inventory() -> None:
    grid = GridCore(10)
    inv = grid.compute_state_inventories()
    assert inv[CellState.EMPTY] == 100
    assert sum(inv.values()) == 100
    assert grid.total_area == 0.0
    assert grid.target_area == 30


@pytest.mark.parametrize("size", [0, -3, 2.5])
def test_invalid_size_raises(size) -> None:
    with pytest.raises(ValueError):
        GridCore(size)


def test_set_cell_reports_change_and_area_delta() -> None:
    grid = GridCore(5)
    change = grid.set_cell(1, 2, CellState.FULL)
    assert change is not None
    assert change.old_state == CellState.EMPTY
    assert change.new_state == CellState.FULL
    assert change.area_delta == 1.0

    change = grid.set_cell(1, 2, CellState.DIAG_C)
    assert change.area_delta == -0.5
    assert grid.total_area == 0.5


def test_set_cell_unchanged_is_noop() -> None:
    grid = GridCore(5)
    grid.set_cell(0, 0, CellState.FULL)
    assert grid.set_cell(0, 0, CellState.FULL) is None
    assert grid.total_area == 1.0


@pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (5, 0), (0, 5)])
def test_set_cell_out_of_bounds_raises(row: int, col: int) -> None:
    grid = GridCore(5)
    with pytest.raises(IndexError):
        grid.set_cell(row, col, CellState.FULL)


def test_set_cell_rejects_unknown_state() -> None:
    grid = GridCore(5)
    with pytest.raises(ValueError):
        grid.set_cell(0, 0, 9)


def test_toggle_cell_only_uses_empty_and_full() -> None:
    grid = GridCore(4)
    assert grid.toggle_cell(2, 2).new_state == CellState.FULL
    assert grid.toggle_cell(2, 2).new_state == CellState.EMPTY
    grid.set_cell(1, 1, CellState.DIAG_B)
    assert grid.toggle_cell(1, 1).new_state == CellState.EMPTY


def test_neighbor_counts_interior_corner_edge() -> None:
    grid = GridCore(10)
    assert len(grid.get_neighbors(4, 4)) == 8
    assert sorted(grid.get_neighbors(0, 0)) == [(0, 1), (1, 0), (1, 1)]
    assert len(grid.get_neighbors(0, 4)) == 5


def test_get_state_safe_defaults_to_empty_outside() -> None:
    grid = GridCore(3)
    grid.set_cell(0, 0, CellState.FULL)
    assert grid.get_state_safe(0, 0) == CellState.FULL
    assert grid.get_state_safe(-1, 0) == CellState.EMPTY
    assert grid.get_state_safe(0, 3) == CellState.EMPTY


def test_incremental_inventory_and_area_match_full_recompute() -> None:
    rng = np.random.default_rng(7)
    grid = GridCore(12)
    grid.compute_state_inventories()
    for _ in range(500):
        r, c = rng.integers(12, size=2)
        grid.set_cell(int(r), int(c), int(rng.integers(len(CellState))))

    incremental = grid.compute_state_inventories()
    assert sum(incremental.values()) == 144
    grid.invalidate_state_inventories()
    assert grid.compute_state_inventories() == incremental
    assert grid.total_area == pytest.approx(grid.calculate_total_area())


def test_bulk_fill_invalidates_inventory() -> None:
    grid = GridCore(8)
    grid.compute_state_inventories()
    box = grid.fill_rect(6, 6, 4, 4, CellState.FULL)
    assert box == BoundingBox(6, 7, 6, 7)
    inv = grid.compute_state_inventories()
    assert inv[CellState.FULL] == 4
    assert inv[CellState.EMPTY] == 60
    assert grid.total_area == 4.0


def test_resize_reinitialises_contents() -> None:
    grid = GridCore(4)
    grid.set_cell(0, 0, CellState.FULL)
    grid.resize(6)
    assert grid.cells.shape == (6, 6)
    assert grid.total_area == 0.0
    assert grid.compute_state_inventories()[CellState.EMPTY] == 36
    with pytest.raises(ValueError):
        grid.resize(0)


def test_load_cells_validates_shape_and_values() -> None:
    grid = GridCore(3)
    with pytest.raises(ValueError):
        grid.load_cells(np.zeros((2, 3)))
    with pytest.raises(ValueError):
        grid.load_cells(np.full((3, 3), 7))
    grid.load_cells([[1, 2], [0, 0]])
    assert grid.size == 2
    assert grid.total_area == 1.5


def test_view_is_read_only() -> None:
    grid = GridCore(3)
    view = grid.view()
    with pytest.raises(ValueError):
        view[0, 0] = CellState.FULL


def test_grid_stats() -> None:
    grid = GridCore(10)
    grid.set_cell(0, 0, CellState.FULL)
    grid.set_cell(0, 1, CellState.DIAG_A)
    stats = grid.get_grid_stats()
    assert stats["grid_size"] == 10
    assert stats["total_cells"] == 100
    assert stats["occupied_cells"] == 2
    assert stats["total_area"] == 1.5
    assert stats["target_area"] == 30
    assert stats["area_ratio"] == pytest.approx(0.05)
    assert stats["state_distribution"]["DIAG_A"] == 1


def test_bounding_box_overlap_excludes_adjacent_boxes() -> None:
    a = BoundingBox(0, 3, 0, 3)
    assert not a.overlaps(BoundingBox(4, 7, 0, 3))
    assert not a.overlaps(BoundingBox(0, 3, 4, 7))
    assert BoundingBox(0, 4, 0, 4).overlaps(BoundingBox(3, 7, 3, 7))
    assert a.union(BoundingBox(5, 6, 1, 9)) == BoundingBox(0, 6, 0, 9)


def test_bounding_box_around_clamps_to_grid() -> None:
    assert BoundingBox.around(0, 1, 2, 8) == BoundingBox(0, 2, 0, 3)
    assert BoundingBox.around(7, 7, 2, 8) == BoundingBox(5, 7, 5, 7)
    assert BoundingBox.around(4, 4, 2, 8).shape == (5, 5)
    assert BoundingBox.around(0, 1, 2, 8).contains(2, 3)
    assert not BoundingBox.around(0, 1, 2, 8).contains(3, 1)


def test_checkerboard_and_smooth_presets() -> None:
    grid = GridCore(6)
    checkerboard(grid)
    assert grid.total_area == 18.0
    assert grid.get_cell(0, 0) == CellState.FULL
    assert grid.get_cell(0, 1) == CellState.EMPTY

    smooth_blob(grid)
    assert grid.get_cell(3, 3) == CellState.FULL
    assert grid.get_cell(0, 0) == CellState.EMPTY


def test_randomize_and_blob_keep_bookkeeping_consistent() -> None:
    rng = np.random.default_rng(3)
    grid = GridCore(20)
    randomize(grid, rng)
    occupied = int((grid.cells != CellState.EMPTY).sum())
    assert 60 < occupied < 180
    assert grid.total_area == pytest.approx(grid.calculate_total_area())

    apply_pattern(grid, "blob", rng)
    assert grid.get_cell(10, 10) == CellState.FULL
    assert grid.total_area >= grid.target_area * 0.7
    assert sum(grid.compute_state_inventories().values()) == 400


def test_apply_pattern_unknown_name_raises() -> None:
    with pytest.raises(ValueError):
        apply_pattern(GridCore(4), "spiral", np.random.default_rng(0))

from __future__ import annotations

import json

import numpy as np
import pytest

from geometricAnnealing import AnnealingSession, SimulationStatus, load_config
from geometricAnnealing.grid import CellState


def _cfg(**overrides):
    base = {
        "grid_size": 10,
        "initial_pattern": "blob",
        "seed": 0,
        "max_steps": 40,
        "initial_temperature": 1.0,
    }
    base.update(overrides)
    return base


def test_load_config_defaults_and_overrides() -> None:
    cfg = load_config(None)
    assert cfg.grid_size == 32
    assert cfg.initial_pattern == "blob"
    assert cfg.weights.corners == 0.0
    assert cfg.annealing.cooling_rate == 0.995

    cfg = load_config(_cfg(weights={"ising": 0.25}, j_far=0.5, cooling_rate=0.9))
    assert cfg.weights.ising == 0.25
    assert cfg.weights.continuity == 2.5
    assert cfg.j_far == 0.5
    assert cfg.annealing.cooling_rate == 0.9
    assert cfg.annealing.max_steps == 40


@pytest.mark.parametrize(
    "overrides",
    [
        {"grid_size": 0},
        {"initial_pattern": "spiral"},
        {"neighbor_scale": 0.0},
        {"cooling_rate": 1.2},
        {"weights": {"zebra": -1.0}},
    ],
)
def test_load_config_rejects_invalid_values(overrides) -> None:
    with pytest.raises(ValueError):
        load_config(_cfg(**overrides))


def test_status_transitions() -> None:
    session = AnnealingSession.from_mapping(_cfg())
    assert session.status == SimulationStatus.IDLE
    assert not session.engine.is_running

    assert session.start() == SimulationStatus.RUNNING
    assert session.engine.is_running
    session.step()
    assert session.engine.step_count == 1

    assert session.pause() == SimulationStatus.PAUSED
    session.step()
    assert session.engine.step_count == 1

    assert session.resume() == SimulationStatus.RUNNING
    assert session.stop() == SimulationStatus.STOPPED
    assert not session.engine.is_running
    assert session.reset() == SimulationStatus.IDLE
    assert session.engine.step_count == 0


def test_commands_in_wrong_status_are_ignored() -> None:
    session = AnnealingSession.from_mapping(_cfg())
    assert session.pause() == SimulationStatus.IDLE
    assert session.resume() == SimulationStatus.IDLE
    assert session.stop() == SimulationStatus.IDLE
    result = session.step()
    assert not result.stepped


def test_run_until_max_steps_stops_session() -> None:
    session = AnnealingSession.from_mapping(_cfg(max_steps=30))
    area = session.grid.total_area
    result = session.run()
    assert session.status == SimulationStatus.STOPPED
    assert result.steps == 30
    assert session.engine.step_count == 30
    assert result.termination_reason in {"max_steps", "converged"}
    assert session.grid.total_area == area
    assert result.final_energy == pytest.approx(
        session.energy.total_energy(session.grid.cells), abs=1e-6
    )
    json.dumps(result.to_dict())


def test_run_with_print_progress(capsys) -> None:
    session = AnnealingSession.from_mapping(_cfg(max_steps=20))
    session.run(progress=True, progress_mode="print", progress_every=10)
    out = capsys.readouterr().out
    assert "[Annealing] step 10" in out
    with pytest.raises(ValueError):
        session.run(progress=True, progress_mode="bogus")


def test_resize_and_invalid_resize() -> None:
    session = AnnealingSession.from_mapping(_cfg())
    session.start()
    assert session.resize(16) == SimulationStatus.IDLE
    assert session.grid.size == 16
    assert session.grid.total_area > 0
    with pytest.raises(ValueError):
        session.resize(-4)
    assert session.grid.size == 16


def test_set_weight_recomputes_energy() -> None:
    session = AnnealingSession.from_mapping(_cfg())
    for term in ("continuity", "zebra", "corners", "neighbor", "ising"):
        energy = session.set_weight(term, 0.0)
    assert energy == 0.0
    assert session.engine.current_energy == 0.0
    with pytest.raises(ValueError):
        session.set_weight("zebra", -2.0)


def test_manual_edits_keep_energy_in_sync() -> None:
    session = AnnealingSession.from_mapping(_cfg(initial_pattern="empty"))
    session.toggle_cell(4, 4)
    session.set_cell(4, 5, CellState.DIAG_A)
    session.fill_rect(0, 0, 2, 3, CellState.FULL)
    assert session.grid.total_area == 7.5
    assert session.engine.current_energy == pytest.approx(
        session.energy.total_energy(session.grid.cells)
    )
    with pytest.raises(IndexError):
        session.toggle_cell(10, 0)


def test_apply_preset() -> None:
    session = AnnealingSession.from_mapping(_cfg())
    session.apply_preset("checkerboard")
    assert session.pattern == "checkerboard"
    assert session.grid.total_area == 50.0
    assert session.status == SimulationStatus.IDLE
    with pytest.raises(ValueError):
        session.apply_preset("spiral")


def test_snapshot_round_trip() -> None:
    session = AnnealingSession.from_mapping(_cfg(seed=3))
    session.set_weight("corners", 1.5)
    session.run(max_iterations=10)
    payload = session.snapshot()
    assert set(payload) >= {
        "grid",
        "size",
        "total_area",
        "target_area",
        "energy",
        "temperature",
        "step",
        "weights",
    }
    json.dumps(payload)

    other = AnnealingSession.from_mapping(_cfg(seed=99, initial_pattern="random"))
    assert other.restore(payload) == SimulationStatus.IDLE
    np.testing.assert_array_equal(other.grid.cells, session.grid.cells)
    assert other.energy.weights.corners == 1.5
    assert other.engine.temperature == payload["temperature"]
    assert other.engine.step_count == payload["step"]
    assert other.engine.current_energy == pytest.approx(payload["energy"], abs=1e-6)
    with pytest.raises(ValueError):
        other.restore({"size": 3})


def test_status_dict() -> None:
    session = AnnealingSession.from_mapping(_cfg())
    info = session.status_dict()
    assert info["status"] == "idle"
    assert info["grid"]["grid_size"] == 10
    assert "temperature" in info and "acceptance_rate" in info


@pytest.mark.parametrize(
    "bad",
    [
        {"neighbor_scale": 0.0},
        {"weights": {"zebra": -1.0}},
        {"temperature": -2.0},
        {"step": -1},
    ],
)
def test_rejected_restore_leaves_session_untouched(bad) -> None:
    session = AnnealingSession.from_mapping(_cfg(seed=5))
    before = session.snapshot()
    payload = {
        "grid": np.zeros((6, 6), dtype=int).tolist(),
        "weights": {"corners": 2.0},
        "neighbor_scale": 3.0,
        "temperature": 0.5,
        "step": 2,
    }
    payload.update(bad)
    with pytest.raises(ValueError):
        session.restore(payload)
    after = session.snapshot()
    assert after == before
    assert session.grid.size == 10
    assert session.energy.neighbor_scale == before["neighbor_scale"]


def test_run_after_restoring_a_finished_run_stops_immediately() -> None:
    session = AnnealingSession.from_mapping(_cfg(max_steps=5))
    payload = session.snapshot()
    payload["step"] = 5
    session.restore(payload)
    result = session.run()
    assert session.status == SimulationStatus.STOPPED
    assert not session.engine.is_running
    assert result.steps == 0
    assert result.termination_reason == "max_steps"


def test_greedy_method_via_session_never_raises_energy() -> None:
    session = AnnealingSession.from_mapping(_cfg(max_steps=30))
    area = session.grid.total_area
    stats = session.set_evolution_method("greedy")
    assert stats["method"] == "greedy"
    result = session.run()
    assert session.grid.total_area == area
    assert all(b <= a + 1e-9 for a, b in zip(result.energy_history, result.energy_history[1:]))
    assert session.status == SimulationStatus.STOPPED
    with pytest.raises(ValueError):
        session.set_evolution_method("tabu")

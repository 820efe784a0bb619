"""Command surface and run/pause state machine around the annealing core."""

from __future__ import annotations

import logging
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, Iterable, Mapping

import numpy as np

from .annealing.engine import EvolutionEngine
from .annealing.results import AnnealingRunResult, StepResult
from .config import SessionConfig, load_config
from .energy.system import EnergySystem
from .energy.weights import TERMS, EnergyWeights
from .grid.box import BoundingBox
from .grid.core import CellChange, GridCore
from .grid.patterns import apply_pattern

logger = logging.getLogger(__name__)


class SimulationStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"


class AnnealingSession:
    """Owns a grid, its energy system and an engine, plus the run status.

    Transitions::

        IDLE/STOPPED --start--> RUNNING <--pause/resume--> PAUSED
        RUNNING/PAUSED --stop or termination--> STOPPED --reset--> IDLE

    The engine only sees a boolean running flag mirrored from the status.
    Commands that do not apply in the current status are ignored with a
    warning; invalid arguments raise.
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        self.config = config if config is not None else SessionConfig()
        self.rng = np.random.default_rng(self.config.seed)
        self.grid = GridCore(self.config.grid_size)
        self.energy = EnergySystem(
            EnergyWeights(**self.config.weights.to_dict()),
            j_near=self.config.j_near,
            j_far=self.config.j_far,
            neighbor_scale=self.config.neighbor_scale,
        )
        self.engine = EvolutionEngine(self.energy, replace(self.config.annealing), rng=self.rng)
        self.pattern = self.config.initial_pattern
        self.status = SimulationStatus.IDLE
        apply_pattern(self.grid, self.pattern, self.rng)
        self.engine.initialize(self.grid)

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any] | None) -> "AnnealingSession":
        return cls(load_config(config))

    def _transition(self, new: SimulationStatus) -> SimulationStatus:
        if new != self.status:
            logger.debug("status %s -> %s", self.status.value, new.value)
        self.status = new
        self.engine.is_running = new == SimulationStatus.RUNNING
        return self.status

    def _ignored(self, command: str) -> SimulationStatus:
        logger.warning("%s ignored while %s", command, self.status.value)
        return self.status

    # Run control

    def start(self) -> SimulationStatus:
        if self.status == SimulationStatus.RUNNING:
            return self._ignored("start")
        if self.status == SimulationStatus.PAUSED:
            return self.resume()
        if self.status == SimulationStatus.STOPPED:
            self.engine.initialize(self.grid)
        return self._transition(SimulationStatus.RUNNING)

    def pause(self) -> SimulationStatus:
        if self.status != SimulationStatus.RUNNING:
            return self._ignored("pause")
        return self._transition(SimulationStatus.PAUSED)

    def resume(self) -> SimulationStatus:
        if self.status != SimulationStatus.PAUSED:
            return self._ignored("resume")
        return self._transition(SimulationStatus.RUNNING)

    def stop(self) -> SimulationStatus:
        if self.status not in (SimulationStatus.RUNNING, SimulationStatus.PAUSED):
            return self._ignored("stop")
        return self._transition(SimulationStatus.STOPPED)

    def step(self) -> StepResult:
        """One engine step; a no-op unless RUNNING."""
        result = self.engine.step(self.grid)
        if self.status == SimulationStatus.RUNNING and not self.engine.is_running:
            self._transition(SimulationStatus.STOPPED)
        return result

    @staticmethod
    def _make_step_iterator(
        steps: int,
        *,
        progress: bool,
        progress_mode: str,
        progress_desc: str,
    ) -> tuple[Iterable[int], object | None, bool]:
        """Build the step iterator with optional progress UI.

        Returns:
            (iterator, progress_bar_object, use_print_progress)
        """
        if not progress:
            return range(steps), None, False

        mode = progress_mode.strip().lower()
        if mode not in {"auto", "tqdm", "print"}:
            raise ValueError("progress_mode must be one of: auto, tqdm, print")
        if mode in {"auto", "tqdm"}:
            from tqdm.auto import tqdm

            bar = tqdm(range(steps), total=steps, desc=progress_desc)
            return bar, bar, False
        return range(steps), None, True

    def run(
        self,
        max_iterations: int | None = None,
        *,
        progress: bool = False,
        progress_mode: str = "auto",
        progress_every: int = 100,
        progress_desc: str = "Annealing",
    ) -> AnnealingRunResult:
        """Drive steps until termination, a stop, or ``max_iterations``."""
        if progress_every < 1:
            raise ValueError("progress_every must be >= 1")
        if self.status != SimulationStatus.RUNNING:
            self.start()
        if self.status == SimulationStatus.RUNNING and self.engine.check_termination() is not None:
            self._transition(SimulationStatus.STOPPED)

        initial_energy = self.engine.current_energy
        remaining = self.engine.config.max_steps - self.engine.step_count
        steps = remaining if max_iterations is None else min(max_iterations, remaining)
        accepted_before = self.engine.accepted_total
        steps_before = self.engine.step_count
        iterator, progress_bar, use_print_progress = self._make_step_iterator(
            max(0, steps),
            progress=progress,
            progress_mode=progress_mode,
            progress_desc=progress_desc,
        )

        for i in iterator:
            self.step()
            if progress_bar is not None:
                progress_bar.set_postfix(
                    energy=f"{self.engine.current_energy:.4f}",
                    T=f"{self.engine.temperature:.4f}",
                )
            elif use_print_progress and ((i + 1) % progress_every == 0 or i + 1 == steps):
                print(
                    f"[{progress_desc}] step {self.engine.step_count} "
                    f"energy={self.engine.current_energy:.4f} "
                    f"T={self.engine.temperature:.4f}"
                )
            if self.status != SimulationStatus.RUNNING:
                break

        if progress_bar is not None:
            progress_bar.close()

        return AnnealingRunResult(
            config=self.config_dict(),
            initial_energy=initial_energy,
            final_energy=self.engine.current_energy,
            steps=self.engine.step_count - steps_before,
            accepted=self.engine.accepted_total - accepted_before,
            energy_history=list(self.engine.energy_history),
            termination_reason=self.engine.stop_reason or self.status.value,
            final_grid=self.grid.cells.tolist(),
            stats=self.status_dict(),
        )

    # Grid-level commands

    def _reinitialize(self) -> SimulationStatus:
        apply_pattern(self.grid, self.pattern, self.rng)
        self.engine.initialize(self.grid)
        return self._transition(SimulationStatus.IDLE)

    def reset(self) -> SimulationStatus:
        """Refill the grid with the current pattern and return to IDLE."""
        return self._reinitialize()

    def resize(self, size: int) -> SimulationStatus:
        self.grid.resize(size)
        return self._reinitialize()

    def apply_preset(self, name: str) -> SimulationStatus:
        apply_pattern(self.grid, name, self.rng)
        self.pattern = name.strip().lower()
        self.engine.initialize(self.grid)
        return self._transition(SimulationStatus.IDLE)

    def set_weight(self, term: str, value: float) -> float:
        """Change one weight and return the recomputed energy."""
        self.energy.set_weight(term, value)
        return self.engine.recompute_energy(self.grid)

    def set_cooling_parameter(self, param: str, value: float) -> Dict[str, Any]:
        self.engine.set_cooling_parameter(param, value)
        return self.engine.stats()

    def set_evolution_method(self, method: str) -> Dict[str, Any]:
        self.engine.set_evolution_method(method)
        return self.engine.stats()

    def set_cell(self, row: int, col: int, state: int) -> CellChange | None:
        change = self.grid.set_cell(row, col, state)
        if change is not None:
            self.engine.recompute_energy(self.grid)
        return change

    def toggle_cell(self, row: int, col: int) -> CellChange:
        change = self.grid.toggle_cell(row, col)
        self.engine.recompute_energy(self.grid)
        return change

    def fill_rect(self, row: int, col: int, height: int, width: int, state: int) -> BoundingBox:
        box = self.grid.fill_rect(row, col, height, width, state)
        self.engine.recompute_energy(self.grid)
        return box

    # Reporting

    def config_dict(self) -> Dict[str, Any]:
        return {
            "grid_size": self.grid.size,
            "initial_pattern": self.pattern,
            "seed": self.config.seed,
            "energy": self.energy.to_dict(),
            "annealing": self.engine.config.to_dict(),
        }

    def status_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status.value,
            **self.engine.stats(),
            "grid": self.grid.get_grid_stats(),
        }

    def snapshot(self) -> Dict[str, Any]:
        """Plain-data payload for persistence layers."""
        return {
            "grid": self.grid.cells.tolist(),
            "size": self.grid.size,
            "total_area": self.grid.total_area,
            "target_area": self.grid.target_area,
            "energy": self.engine.current_energy,
            "temperature": self.engine.temperature,
            "step": self.engine.step_count,
            "weights": self.energy.weights.to_dict(),
            "j_near": self.energy.j_near,
            "j_far": self.energy.j_far,
            "neighbor_scale": self.energy.neighbor_scale,
        }

    def restore(self, payload: Mapping[str, Any]) -> SimulationStatus:
        """Load a payload produced by :meth:`snapshot`; the session becomes IDLE.

        Every field is validated before anything is replaced, so a rejected
        payload leaves the session untouched.
        """
        for key in ("grid", "weights"):
            if key not in payload:
                raise ValueError(f"snapshot missing {key!r}")
        cells = GridCore.validate_cells(payload["grid"])
        candidate = EnergySystem(
            EnergyWeights.from_mapping(payload["weights"]),
            j_near=float(payload.get("j_near", self.energy.j_near)),
            j_far=float(payload.get("j_far", self.energy.j_far)),
            neighbor_scale=float(payload.get("neighbor_scale", self.energy.neighbor_scale)),
        )
        temperature = payload.get("temperature")
        if temperature is not None and not float(temperature) > 0.0:
            raise ValueError("temperature must be > 0")
        step = int(payload.get("step", 0))
        if step < 0:
            raise ValueError("step must be >= 0")

        self.grid.load_cells(cells)
        for term in TERMS:
            self.energy.set_weight(term, candidate.weights.get(term))
        self.energy.j_near = candidate.j_near
        self.energy.j_far = candidate.j_far
        self.energy.neighbor_scale = candidate.neighbor_scale
        self.engine.initialize(self.grid)
        if temperature is not None:
            self.engine.temperature = float(temperature)
        self.engine.step_count = step
        return self._transition(SimulationStatus.IDLE)


__all__ = ["AnnealingSession", "SimulationStatus"]

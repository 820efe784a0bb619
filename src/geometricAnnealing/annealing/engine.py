"""Simulated annealing and greedy descent over swaps between EMPTY and occupied cells."""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import replace
from typing import Any, Deque, Dict, Tuple

import numpy as np

from ..energy.convolution import extract_window
from ..energy.kernels import MAX_RADIUS
from ..energy.system import EnergySystem
from ..grid.box import BoundingBox
from ..grid.core import GridCore
from ..grid.states import NON_EMPTY_STATES, CellState
from .config import AnnealingConfig
from .results import StepResult, SwapProposal
from .sampling import sample_cell

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

# Largest kernel reach; cells further than this from both swapped cells keep
# their energy contribution.
INFLUENCE_RADIUS = MAX_RADIUS

COOLING_PARAMETERS = (
    "temperature",
    "initial_temperature",
    "cooling_rate",
    "min_temperature",
    "max_steps",
)


def metropolis_accept(delta: float, temperature: float, rng: np.random.Generator) -> bool:
    """Always accept improvements, else with probability ``exp(-delta/T)``."""
    if delta < 0.0:
        return True
    if temperature <= 0.0:
        return False
    return bool(rng.random() < math.exp(-delta / temperature))


def affected_boxes(a: Cell, b: Cell, size: int, radius: int = INFLUENCE_RADIUS) -> list[BoundingBox]:
    """Regions whose energy can change when ``a`` and ``b`` swap.

    Overlapping neighbourhoods collapse into their union so no cell is
    counted twice.
    """
    box_a = BoundingBox.around(a[0], a[1], radius, size)
    box_b = BoundingBox.around(b[0], b[1], radius, size)
    if box_a.overlaps(box_b):
        return [box_a.union(box_b)]
    return [box_a, box_b]


class EvolutionEngine:
    """Annealing state plus the propose/evaluate/accept step.

    The engine holds only scalar state (temperature, counters, history). The
    grid is passed in by reference to every call and is mutated only when a
    swap is accepted.
    """

    def __init__(
        self,
        energy: EnergySystem,
        config: AnnealingConfig | None = None,
        *,
        rng: np.random.Generator | None = None,
    ) -> None:
        self.energy = energy
        self.config = config if config is not None else AnnealingConfig()
        self.rng = rng if rng is not None else np.random.default_rng()
        self.reset()

    def reset(self) -> None:
        cfg = self.config
        self.temperature = cfg.initial_temperature
        self.current_energy = 0.0
        self.step_count = 0
        self.accepted_total = 0
        self.energy_history: Deque[float] = deque(maxlen=cfg.history_length)
        self._acceptance: Deque[bool] = deque(maxlen=cfg.acceptance_window)
        self.is_running = False
        self.stop_reason: str | None = None

    def initialize(self, grid: GridCore) -> float:
        """Reset and seed the energy history from the grid's current energy."""
        self.reset()
        self.current_energy = self.energy.total_energy(grid.cells)
        self.energy_history.append(self.current_energy)
        logger.debug(
            "engine initialised: energy=%.6f temperature=%.6f",
            self.current_energy,
            self.temperature,
        )
        return self.current_energy

    def recompute_energy(self, grid: GridCore) -> float:
        """Resynchronise the running energy after weights or cells changed."""
        self.current_energy = self.energy.total_energy(grid.cells)
        return self.current_energy

    @property
    def acceptance_rate(self) -> float:
        """Fraction of accepted steps in the recent acceptance window."""
        if not self._acceptance:
            return 0.0
        return sum(self._acceptance) / len(self._acceptance)

    def propose_swap(self, grid: GridCore) -> SwapProposal | None:
        """Pick an occupied state uniformly, then one cell of it and one EMPTY cell."""
        inventory = grid.compute_state_inventories()
        n_empty = inventory[CellState.EMPTY]
        available = [s for s in NON_EMPTY_STATES if inventory[s] > 0]
        if n_empty == 0 or not available:
            return None

        state = available[int(self.rng.integers(len(available)))]
        empty_cell = sample_cell(grid.cells, CellState.EMPTY, n_empty, self.rng)
        other_cell = sample_cell(grid.cells, state, inventory[state], self.rng)
        if empty_cell is None or other_cell is None:
            return None
        return SwapProposal(empty_cell=empty_cell, other_cell=other_cell, other_state=int(state))

    def swap_energy_delta(self, grid: GridCore, a: Cell, b: Cell) -> float:
        """Energy change of exchanging cells ``a`` and ``b``.

        Kernel terms are evaluated before and after on windowed copies of the
        affected boxes only; the coupling term uses its local swap formula.
        """
        cells = grid.cells
        state_a, state_b = int(cells[a]), int(cells[b])
        if a == b or state_a == state_b:
            return 0.0

        changes = ((a[0], a[1], state_b), (b[0], b[1], state_a))
        delta = 0.0
        for box in affected_boxes(a, b, grid.size):
            before = extract_window(cells, box)
            after = before.with_states(changes)
            delta += self.energy.window_energy(after, include_ising=False)
            delta -= self.energy.window_energy(before, include_ising=False)
        delta += self.energy.ising_swap_delta(cells, a, b)
        return delta

    def _reject(self) -> StepResult:
        self._acceptance.append(False)
        return StepResult(accepted=False)

    def _apply_swap(self, grid: GridCore, proposal: SwapProposal, delta: float) -> StepResult:
        a, b = proposal.empty_cell, proposal.other_cell
        state_a, state_b = int(grid.cells[a]), int(grid.cells[b])
        grid.set_cell(a[0], a[1], state_b)
        grid.set_cell(b[0], b[1], state_a)
        self.current_energy += delta
        self.accepted_total += 1
        self._acceptance.append(True)
        return StepResult(
            accepted=True,
            cell_a=a,
            cell_b=b,
            old_state_a=state_a,
            new_state_a=state_b,
            old_state_b=state_b,
            new_state_b=state_a,
            delta_energy=delta,
        )

    def annealing_step(self, grid: GridCore) -> StepResult:
        """Propose one swap and apply it if the Metropolis test passes."""
        proposal = self.propose_swap(grid)
        if proposal is None:
            return self._reject()

        delta = self.swap_energy_delta(grid, proposal.empty_cell, proposal.other_cell)
        if not metropolis_accept(delta, self.temperature, self.rng):
            return self._reject()
        return self._apply_swap(grid, proposal, delta)

    def greedy_step(self, grid: GridCore) -> StepResult:
        """Apply the most improving of ``greedy_candidates`` sampled swaps.

        Nothing changes unless the best delta improves the energy by more than
        ``greedy_min_improvement``.
        """
        cfg = self.config
        best: Tuple[float, SwapProposal] | None = None
        for _ in range(cfg.greedy_candidates):
            proposal = self.propose_swap(grid)
            if proposal is None:
                break
            delta = self.swap_energy_delta(grid, proposal.empty_cell, proposal.other_cell)
            if best is None or delta < best[0]:
                best = (delta, proposal)

        if best is None or best[0] >= -cfg.greedy_min_improvement:
            return self._reject()
        return self._apply_swap(grid, best[1], best[0])

    def cool_temperature(self) -> None:
        """Geometric cooling with a periodic acceptance-rate correction."""
        cfg = self.config
        self.temperature = max(cfg.min_temperature, self.temperature * cfg.cooling_rate)
        if self.step_count == 0 or self.step_count % cfg.adapt_interval != 0 or not self._acceptance:
            return
        rate = self.acceptance_rate
        if rate < cfg.low_acceptance:
            self.temperature *= cfg.reheat_factor
            logger.debug("acceptance %.3f low, reheating to %.6f", rate, self.temperature)
        elif rate > cfg.high_acceptance:
            self.temperature = max(cfg.min_temperature, self.temperature * cfg.quench_factor)
            logger.debug("acceptance %.3f high, cooling to %.6f", rate, self.temperature)

    def termination_reason(self) -> str | None:
        cfg = self.config
        if cfg.method == "greedy":
            window = min_history = cfg.greedy_convergence_window
            tolerance = cfg.greedy_convergence_tolerance
        else:
            if self.temperature <= cfg.min_temperature:
                return "min_temperature"
            window, min_history = cfg.convergence_window, cfg.convergence_min_history
            tolerance = cfg.convergence_tolerance
        if len(self.energy_history) > min_history:
            recent = list(self.energy_history)[-window:]
            if max(recent) - min(recent) < tolerance:
                return "converged"
        if self.step_count >= cfg.max_steps:
            return "max_steps"
        return None

    def should_terminate(self) -> bool:
        return self.termination_reason() is not None

    def check_termination(self) -> str | None:
        """Stop the engine if any termination condition holds; returns the reason."""
        reason = self.termination_reason()
        if reason is not None and self.is_running:
            self.is_running = False
            self.stop_reason = reason
            logger.info(
                "annealing stopped after %d steps (%s), energy=%.6f",
                self.step_count,
                reason,
                self.current_energy,
            )
        return reason

    def step(self, grid: GridCore) -> StepResult:
        """Run one full iteration; a no-op unless the engine is running."""
        if not self.is_running:
            return StepResult(accepted=False, stepped=False)

        if self.config.method == "greedy":
            result = self.greedy_step(grid)
        else:
            result = self.annealing_step(grid)
            self.cool_temperature()
        self.energy_history.append(self.current_energy)
        self.step_count += 1
        self.check_termination()
        return result

    def set_cooling_parameter(self, param: str, value: float) -> None:
        """Update one schedule parameter; ``temperature`` also resets the initial value."""
        if param not in COOLING_PARAMETERS:
            raise KeyError(f"param must be one of: {', '.join(COOLING_PARAMETERS)}")
        if param == "temperature":
            self.config = replace(self.config, initial_temperature=float(value))
            self.temperature = float(value)
        elif param == "max_steps":
            if int(value) != value:
                raise ValueError("max_steps must be an integer")
            self.config = replace(self.config, max_steps=int(value))
        else:
            self.config = replace(self.config, **{param: float(value)})
        logger.debug("cooling parameter %s set to %s", param, value)

    def set_evolution_method(self, method: str) -> None:
        """Switch between Metropolis annealing and greedy descent."""
        self.config = replace(self.config, method=method.strip().lower())
        logger.debug("evolution method set to %s", self.config.method)

    def stats(self) -> Dict[str, Any]:
        return {
            "method": self.config.method,
            "step": self.step_count,
            "temperature": self.temperature,
            "initial_temperature": self.config.initial_temperature,
            "energy": self.current_energy,
            "accepted": self.accepted_total,
            "acceptance_rate": self.acceptance_rate,
            "history_length": len(self.energy_history),
            "is_running": self.is_running,
            "stop_reason": self.stop_reason,
        }


__all__ = [
    "COOLING_PARAMETERS",
    "EvolutionEngine",
    "INFLUENCE_RADIUS",
    "affected_boxes",
    "metropolis_accept",
]

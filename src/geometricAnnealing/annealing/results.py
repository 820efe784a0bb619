"""Result containers for annealing steps and runs."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple

Cell = Tuple[int, int]


@dataclass(frozen=True)
class SwapProposal:
    """An EMPTY cell and a non-empty cell whose states would be exchanged."""

    empty_cell: Cell
    other_cell: Cell
    other_state: int


@dataclass(frozen=True)
class StepResult:
    """Outcome of one annealing step.

    Only accepted swaps carry coordinates. A rejected swap, a step with no
    legal swap and a step requested while stopped all report
    ``accepted=False``.
    """

    accepted: bool
    cell_a: Cell | None = None
    cell_b: Cell | None = None
    old_state_a: int | None = None
    new_state_a: int | None = None
    old_state_b: int | None = None
    new_state_b: int | None = None
    delta_energy: float = 0.0
    stepped: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class AnnealingRunResult:
    """Summary of a driven annealing run."""

    config: Dict[str, Any]
    initial_energy: float
    final_energy: float
    steps: int
    accepted: int
    energy_history: List[float]
    termination_reason: str
    final_grid: List[List[int]] = field(default_factory=list)
    stats: Dict[str, Any] = field(default_factory=dict)

    @property
    def acceptance_rate(self) -> float:
        return self.accepted / self.steps if self.steps else 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result to a JSON-serialisable dictionary."""
        return {
            "config": self.config,
            "initial_energy": self.initial_energy,
            "final_energy": self.final_energy,
            "steps": self.steps,
            "accepted": self.accepted,
            "acceptance_rate": self.acceptance_rate,
            "energy_history": self.energy_history,
            "termination_reason": self.termination_reason,
            "final_grid": self.final_grid,
            "stats": self.stats,
        }

    def save_json(self, path: str | Path) -> None:
        """Save the result to a JSON file."""
        p = Path(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("w", encoding="utf-8") as f:
            json.dump(self.to_dict(), f, indent=2)


__all__ = [
    "AnnealingRunResult",
    "StepResult",
    "SwapProposal",
]

"""Configuration dataclass for the annealing schedule."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict

METHODS = ("annealing", "greedy")


@dataclass
class AnnealingConfig:
    """Cooling schedule, termination and bookkeeping parameters.

    ``method`` selects the step strategy. ``"greedy"`` ignores the cooling
    fields and applies the best improving swap among ``greedy_candidates``
    sampled proposals, stopping once the last ``greedy_convergence_window``
    energies lie within ``greedy_convergence_tolerance``.
    """

    method: str = "annealing"
    initial_temperature: float = 1.0
    cooling_rate: float = 0.995
    min_temperature: float = 0.001
    max_steps: int = 1000
    history_length: int = 1000
    acceptance_window: int = 100
    adapt_interval: int = 100
    low_acceptance: float = 0.2
    high_acceptance: float = 0.8
    reheat_factor: float = 1.1
    quench_factor: float = 0.95
    convergence_window: int = 20
    convergence_min_history: int = 50
    convergence_tolerance: float = 1e-3
    greedy_candidates: int = 32
    greedy_min_improvement: float = 0.1
    greedy_convergence_window: int = 10
    greedy_convergence_tolerance: float = 0.1

    def __post_init__(self) -> None:
        if self.method not in METHODS:
            raise ValueError(f"method must be one of: {', '.join(METHODS)}")
        if self.initial_temperature <= 0.0:
            raise ValueError("initial_temperature must be > 0")
        if not (0.0 < self.cooling_rate < 1.0):
            raise ValueError("cooling_rate must be in (0, 1)")
        if self.min_temperature < 0.0:
            raise ValueError("min_temperature must be >= 0")
        if self.max_steps < 1:
            raise ValueError("max_steps must be >= 1")
        if self.history_length < max(self.convergence_window, self.greedy_convergence_window):
            raise ValueError("history_length must be >= both convergence windows")
        if self.acceptance_window < 1:
            raise ValueError("acceptance_window must be >= 1")
        if self.adapt_interval < 1:
            raise ValueError("adapt_interval must be >= 1")
        if not (0.0 <= self.low_acceptance <= self.high_acceptance <= 1.0):
            raise ValueError("acceptance bounds must satisfy 0 <= low <= high <= 1")
        if self.reheat_factor < 1.0:
            raise ValueError("reheat_factor must be >= 1")
        if not (0.0 < self.quench_factor <= 1.0):
            raise ValueError("quench_factor must be in (0, 1]")
        if self.convergence_window < 2:
            raise ValueError("convergence_window must be >= 2")
        if self.convergence_tolerance < 0.0:
            raise ValueError("convergence_tolerance must be >= 0")
        if self.greedy_candidates < 1:
            raise ValueError("greedy_candidates must be >= 1")
        if self.greedy_min_improvement < 0.0:
            raise ValueError("greedy_min_improvement must be >= 0")
        if self.greedy_convergence_window < 2:
            raise ValueError("greedy_convergence_window must be >= 2")
        if self.greedy_convergence_tolerance < 0.0:
            raise ValueError("greedy_convergence_tolerance must be >= 0")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["AnnealingConfig", "METHODS"]

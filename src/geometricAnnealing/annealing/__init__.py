"""Annealing engine, cooling schedule and cell sampling strategies."""

from .config import METHODS, AnnealingConfig
from .engine import (
    COOLING_PARAMETERS,
    INFLUENCE_RADIUS,
    EvolutionEngine,
    affected_boxes,
    metropolis_accept,
)
from .results import AnnealingRunResult, StepResult, SwapProposal
from .sampling import (
    CellSampler,
    FullScanSampler,
    ReservoirSampler,
    sample_cell,
    select_sampling_strategy,
)

__all__ = [
    "AnnealingConfig",
    "AnnealingRunResult",
    "COOLING_PARAMETERS",
    "CellSampler",
    "EvolutionEngine",
    "FullScanSampler",
    "INFLUENCE_RADIUS",
    "METHODS",
    "ReservoirSampler",
    "StepResult",
    "SwapProposal",
    "affected_boxes",
    "metropolis_accept",
    "sample_cell",
    "select_sampling_strategy",
]

"""Simulated annealing of geometric cell grids under kernel-based energies."""

from .annealing import AnnealingConfig, EvolutionEngine, StepResult
from .config import SessionConfig, load_config
from .energy import EnergySystem, EnergyWeights
from .grid import BoundingBox, CellState, GridCore
from .session import AnnealingSession, SimulationStatus

__all__ = [
    "AnnealingConfig",
    "AnnealingSession",
    "BoundingBox",
    "CellState",
    "EnergySystem",
    "EnergyWeights",
    "EvolutionEngine",
    "GridCore",
    "SessionConfig",
    "SimulationStatus",
    "StepResult",
    "load_config",
]

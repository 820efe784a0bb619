"""Configuration parsing for an annealing session."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from .annealing.config import AnnealingConfig
from .energy.terms import DEFAULT_NEIGHBOR_SCALE
from .energy.weights import EnergyWeights
from .grid.patterns import PATTERNS


@dataclass(frozen=True)
class SessionConfig:
    """Everything needed to build a grid, an energy system and an engine."""

    grid_size: int = 32
    initial_pattern: str = "blob"
    seed: int | None = None
    j_near: float = 1.0
    j_far: float = 1.0
    neighbor_scale: float = DEFAULT_NEIGHBOR_SCALE
    weights: EnergyWeights = field(default_factory=EnergyWeights)
    annealing: AnnealingConfig = field(default_factory=AnnealingConfig)

    def __post_init__(self) -> None:
        if self.grid_size < 1:
            raise ValueError("grid_size must be >= 1")
        if self.initial_pattern not in PATTERNS:
            raise ValueError(f"initial_pattern must be one of: {', '.join(sorted(PATTERNS))}")
        if self.neighbor_scale <= 0.0:
            raise ValueError("neighbor_scale must be > 0")


def load_config(config: Mapping[str, Any] | None) -> SessionConfig:
    """Parse a plain mapping into a validated :class:`SessionConfig`.

    Unknown weight names are rejected; missing keys fall back to defaults.
    """
    cfg = dict(config or {})

    grid_size = int(cfg.get("grid_size", 32))
    initial_pattern = str(cfg.get("initial_pattern", "blob")).strip().lower()
    raw_seed = cfg.get("seed")
    seed = None if raw_seed is None else int(raw_seed)

    j_near = float(cfg.get("j_near", 1.0))
    j_far = float(cfg.get("j_far", 1.0))
    neighbor_scale = float(cfg.get("neighbor_scale", DEFAULT_NEIGHBOR_SCALE))

    weights = EnergyWeights.from_mapping(cfg.get("weights"))

    defaults = AnnealingConfig()
    annealing = AnnealingConfig(
        method=str(cfg.get("method", defaults.method)).strip().lower(),
        initial_temperature=float(cfg.get("initial_temperature", defaults.initial_temperature)),
        cooling_rate=float(cfg.get("cooling_rate", defaults.cooling_rate)),
        min_temperature=float(cfg.get("min_temperature", defaults.min_temperature)),
        max_steps=int(cfg.get("max_steps", defaults.max_steps)),
        history_length=int(cfg.get("history_length", defaults.history_length)),
        acceptance_window=int(cfg.get("acceptance_window", defaults.acceptance_window)),
        adapt_interval=int(cfg.get("adapt_interval", defaults.adapt_interval)),
        greedy_candidates=int(cfg.get("greedy_candidates", defaults.greedy_candidates)),
    )

    return SessionConfig(
        grid_size=grid_size,
        initial_pattern=initial_pattern,
        seed=seed,
        j_near=j_near,
        j_far=j_far,
        neighbor_scale=neighbor_scale,
        weights=weights,
        annealing=annealing,
    )


__all__ = ["SessionConfig", "load_config"]

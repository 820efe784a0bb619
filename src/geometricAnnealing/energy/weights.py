"""Per-term energy weights."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

TERMS = ("continuity", "zebra", "corners", "flow", "neighbor", "ising")


@dataclass
class EnergyWeights:
    """Non-negative multipliers for each energy term.

    Corners and flow default to 0, which leaves those terms out of the total.
    """

    continuity: float = 2.5
    zebra: float = 2.5
    corners: float = 0.0
    flow: float = 0.0
    neighbor: float = 1.0
    ising: float = 1.0

    def __post_init__(self) -> None:
        for f in fields(self):
            _check_weight(f.name, getattr(self, f.name))

    @classmethod
    def from_mapping(cls, cfg: Mapping[str, Any] | None) -> "EnergyWeights":
        cfg = dict(cfg or {})
        unknown = set(cfg) - set(TERMS)
        if unknown:
            raise KeyError(f"unknown energy terms: {sorted(unknown)}")
        return cls(**{k: float(v) for k, v in cfg.items()})

    def set(self, term: str, value: float) -> None:
        if term not in TERMS:
            raise KeyError(f"term must be one of: {', '.join(TERMS)}")
        _check_weight(term, value)
        setattr(self, term, float(value))

    def get(self, term: str) -> float:
        if term not in TERMS:
            raise KeyError(f"term must be one of: {', '.join(TERMS)}")
        return float(getattr(self, term))

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


def _check_weight(term: str, value: float) -> None:
    if not value >= 0.0:
        raise ValueError(f"{term} weight must be >= 0")


__all__ = ["EnergyWeights", "TERMS"]

"""Kernel-based energy terms: continuity, zebra, corners, flow and neighbours."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Sequence

import numpy as np

from ..grid.box import BoundingBox
from ..grid.states import CellState
from .convolution import KernelResult, ProjectedWindow, aggregate_group, extract_window
from .kernels import (
    CONTINUITY_GROUPS,
    CORNER_GROUPS,
    FLOW_GROUPS,
    ZEBRA_GROUPS,
    KernelGroup,
    get_kernel,
)

DEFAULT_NEIGHBOR_SCALE = 2.0


@dataclass
class TermResult:
    """Per-group results and the combined score of one term."""

    name: str
    groups: Dict[str, KernelResult] = field(default_factory=dict)
    score: float = 0.0

    @property
    def count(self) -> int:
        return sum(g.count for g in self.groups.values())

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "score": self.score,
            "count": self.count,
            "groups": {k: v.to_dict() for k, v in self.groups.items()},
        }


def evaluate_groups(pw: ProjectedWindow, name: str, groups: Sequence[KernelGroup]) -> TermResult:
    result = TermResult(name=name)
    for group in groups:
        res = aggregate_group(pw, group)
        result.groups[group.name] = res
        result.score += res.score * group.penalty
    return result


def continuity_term(pw: ProjectedWindow) -> TermResult:
    return evaluate_groups(pw, "continuity", CONTINUITY_GROUPS)


def zebra_term(pw: ProjectedWindow) -> TermResult:
    return evaluate_groups(pw, "zebra", ZEBRA_GROUPS)


def corner_term(pw: ProjectedWindow) -> TermResult:
    return evaluate_groups(pw, "corners", CORNER_GROUPS)


def flow_term(pw: ProjectedWindow) -> TermResult:
    return evaluate_groups(pw, "flow", FLOW_GROUPS)


def neighbor_penalties(pw: ProjectedWindow, scale: float = DEFAULT_NEIGHBOR_SCALE) -> np.ndarray:
    """``exp(-k/scale)`` for non-empty cells with ``k`` FULL neighbours."""
    if scale <= 0.0:
        raise ValueError("scale must be > 0")
    counts = pw.response(get_kernel("neighbor_sum"), "occupancy", normalize=False)
    occupied = pw.inner_states() != CellState.EMPTY
    return np.where(occupied, np.exp(-counts / scale), 0.0)


def neighbor_term(pw: ProjectedWindow, scale: float = DEFAULT_NEIGHBOR_SCALE) -> float:
    return float(neighbor_penalties(pw, scale).sum())


def detect_continuity_issues(cells: np.ndarray, region: BoundingBox | None = None) -> TermResult:
    """Second-difference discontinuities over ``region`` (default: whole grid)."""
    return continuity_term(ProjectedWindow(extract_window(cells, region)))


def detect_zebra_patterns(cells: np.ndarray, region: BoundingBox | None = None) -> TermResult:
    """Alternating stripe patterns, weighted per group penalty."""
    return zebra_term(ProjectedWindow(extract_window(cells, region)))


def detect_sharp_corners(cells: np.ndarray, region: BoundingBox | None = None) -> TermResult:
    return corner_term(ProjectedWindow(extract_window(cells, region)))


def detect_flow_inconsistencies(cells: np.ndarray, region: BoundingBox | None = None) -> TermResult:
    """Directional and rotational flow responses of the occupancy grid."""
    return flow_term(ProjectedWindow(extract_window(cells, region)))


def neighbor_interaction_energy(
    cells: np.ndarray,
    region: BoundingBox | None = None,
    scale: float = DEFAULT_NEIGHBOR_SCALE,
) -> float:
    """Isolation penalty summed over occupied cells in ``region``."""
    return neighbor_term(ProjectedWindow(extract_window(cells, region)), scale)


__all__ = [
    "DEFAULT_NEIGHBOR_SCALE",
    "TermResult",
    "continuity_term",
    "corner_term",
    "detect_continuity_issues",
    "detect_flow_inconsistencies",
    "detect_sharp_corners",
    "detect_zebra_patterns",
    "evaluate_groups",
    "flow_term",
    "neighbor_interaction_energy",
    "neighbor_penalties",
    "neighbor_term",
    "zebra_term",
]

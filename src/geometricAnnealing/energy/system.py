"""Weighted aggregate of all energy terms."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from ..grid.box import BoundingBox
from .convolution import ProjectedWindow, Window, extract_window
from .ising import ising_swap_delta, ising_window_energy
from .terms import (
    DEFAULT_NEIGHBOR_SCALE,
    TermResult,
    continuity_term,
    corner_term,
    flow_term,
    neighbor_term,
    zebra_term,
)
from .weights import EnergyWeights

logger = logging.getLogger(__name__)


@dataclass
class EnergyBreakdown:
    """Raw term values and the weighted total for one evaluation."""

    continuity: TermResult
    zebra: TermResult
    corners: TermResult
    flow: TermResult
    neighbor: float
    ising: float
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "continuity": self.continuity.score,
            "zebra": self.zebra.score,
            "corners": self.corners.score,
            "flow": self.flow.score,
            "neighbor": self.neighbor,
            "ising": self.ising,
            "total": self.total,
            "continuity_count": self.continuity.count,
            "zebra_count": self.zebra.count,
            "corners_count": self.corners.count,
            "flow_count": self.flow.count,
            "terms": {
                t.name: t.to_dict() for t in (self.continuity, self.zebra, self.corners, self.flow)
            },
        }


class EnergySystem:
    """Evaluate ``sum(w_t * E_t)`` over a grid or a bounded region.

    The system keeps no cached energies; after changing a weight the caller
    recomputes whatever totals it holds.
    """

    def __init__(
        self,
        weights: EnergyWeights | None = None,
        *,
        j_near: float = 1.0,
        j_far: float = 1.0,
        neighbor_scale: float = DEFAULT_NEIGHBOR_SCALE,
    ) -> None:
        if neighbor_scale <= 0.0:
            raise ValueError("neighbor_scale must be > 0")
        self.weights = weights if weights is not None else EnergyWeights()
        self.j_near = float(j_near)
        self.j_far = float(j_far)
        self.neighbor_scale = float(neighbor_scale)

    def set_weight(self, term: str, value: float) -> None:
        self.weights.set(term, value)
        logger.debug("weight %s set to %s", term, value)

    def breakdown(self, cells: np.ndarray, region: BoundingBox | None = None) -> EnergyBreakdown:
        """Every term over ``region``, including zero-weighted ones."""
        pw = ProjectedWindow(extract_window(cells, region))
        w = self.weights
        continuity = continuity_term(pw)
        zebra = zebra_term(pw)
        corners = corner_term(pw)
        flow = flow_term(pw)
        neighbor = neighbor_term(pw, self.neighbor_scale)
        ising = ising_window_energy(pw, self.j_near, self.j_far)
        total = (
            continuity.score * w.continuity
            + zebra.score * w.zebra
            + corners.score * w.corners
            + flow.score * w.flow
            + neighbor * w.neighbor
            + ising * w.ising
        )
        return EnergyBreakdown(continuity, zebra, corners, flow, neighbor, ising, float(total))

    def window_energy(self, window: Window, *, include_ising: bool = True) -> float:
        """Weighted energy of the window region, skipping zero-weight terms."""
        pw = ProjectedWindow(window)
        w = self.weights
        total = 0.0
        if w.continuity:
            total += continuity_term(pw).score * w.continuity
        if w.zebra:
            total += zebra_term(pw).score * w.zebra
        if w.corners:
            total += corner_term(pw).score * w.corners
        if w.flow:
            total += flow_term(pw).score * w.flow
        if w.neighbor:
            total += neighbor_term(pw, self.neighbor_scale) * w.neighbor
        if include_ising and w.ising:
            total += ising_window_energy(pw, self.j_near, self.j_far) * w.ising
        return float(total)

    def region_energy(
        self, cells: np.ndarray, region: BoundingBox, *, include_ising: bool = True
    ) -> float:
        return self.window_energy(extract_window(cells, region), include_ising=include_ising)

    def total_energy(self, cells: np.ndarray) -> float:
        return self.window_energy(extract_window(cells))

    def ising_swap_delta(
        self, cells: np.ndarray, a: Tuple[int, int], b: Tuple[int, int]
    ) -> float:
        """Weighted coupling change for swapping cells ``a`` and ``b``."""
        if not self.weights.ising:
            return 0.0
        return self.weights.ising * ising_swap_delta(cells, a, b, self.j_near, self.j_far)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "weights": self.weights.to_dict(),
            "j_near": self.j_near,
            "j_far": self.j_far,
            "neighbor_scale": self.neighbor_scale,
        }


__all__ = ["EnergyBreakdown", "EnergySystem"]

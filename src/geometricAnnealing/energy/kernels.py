"""Fixed kernel registry and the kernel groups each energy term aggregates."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Sequence

import numpy as np

MAX_RADIUS = 2


@dataclass(frozen=True)
class Kernel:
    """Immutable small correlation kernel.

    Attributes:
        name: Registry key.
        matrix: Read-only float array with odd dimensions, at most 5x5.
        radius: Half-extent of the footprint, ``max(shape) // 2``.
        description: Human-readable summary of the detected pattern.
    """

    name: str
    matrix: np.ndarray
    radius: int
    description: str


def make_kernel(name: str, rows: Sequence[Sequence[float]], description: str) -> Kernel:
    matrix = np.array(rows, dtype=float)
    if matrix.ndim != 2:
        raise ValueError("kernel matrix must be 2D")
    if matrix.shape[0] % 2 == 0 or matrix.shape[1] % 2 == 0:
        raise ValueError("kernel dimensions must be odd")
    radius = max(matrix.shape) // 2
    if radius > MAX_RADIUS:
        raise ValueError(f"kernel radius must be <= {MAX_RADIUS}")
    matrix.flags.writeable = False
    return Kernel(name=name, matrix=matrix, radius=radius, description=description)


@dataclass(frozen=True)
class KernelGroup:
    """Kernels aggregated together under one threshold.

    ``projection`` names the numeric view of the grid the kernels read:
    ``"occupancy"``, ``"grouped"`` or ``"markers"``.
    """

    name: str
    kernels: tuple[str, ...]
    threshold: float
    projection: str = "occupancy"
    penalty: float = 1.0
    normalize: bool = True


_DEFINITIONS = (
    # Corners
    ("top_left_corner", [[2, -1, 0], [-1, 1, 0], [0, 0, 0]], "Top-left L-shaped corner"),
    ("top_right_corner", [[0, -1, 2], [0, 1, -1], [0, 0, 0]], "Top-right L-shaped corner"),
    ("bottom_left_corner", [[0, 0, 0], [-1, 1, 0], [2, -1, 0]], "Bottom-left L-shaped corner"),
    ("bottom_right_corner", [[0, 0, 0], [0, 1, -1], [0, -1, 2]], "Bottom-right L-shaped corner"),
    ("diagonal_conflict_tl", [[0, 1, 0], [1, -2, -1], [0, -1, 1]], "Diagonal conflict along TL-BR"),
    ("diagonal_conflict_tr", [[0, 1, 0], [-1, -2, 1], [1, -1, 0]], "Diagonal conflict along TR-BL"),
    ("corner_detector", [[-1, -1, -1], [-1, 8, -1], [-1, -1, -1]], "General corner and edge detector"),
    # Continuity
    ("horizontal_continuity", [[0, 0, 0], [1, -2, 1], [0, 0, 0]], "Horizontal discontinuity"),
    ("horizontal_continuity_strong", [[0, 0, 0], [1, -4, 1], [0, 0, 0]], "Strong horizontal discontinuity"),
    ("vertical_continuity", [[0, 1, 0], [0, -2, 0], [0, 1, 0]], "Vertical discontinuity"),
    ("vertical_continuity_strong", [[0, 1, 0], [0, -4, 0], [0, 1, 0]], "Strong vertical discontinuity"),
    ("diagonal_continuity_tl_br", [[1, 0, 0], [0, -2, 0], [0, 0, 1]], "Discontinuity along TL-BR"),
    ("diagonal_continuity_tr_bl", [[0, 0, 1], [0, -2, 0], [1, 0, 0]], "Discontinuity along TR-BL"),
    ("eight_way_continuity", [[0, 1, 0], [1, -8, 1], [0, 1, 0]], "Laplacian-style discontinuity"),
    # Zebra
    ("horizontal_zebra", [[1], [-1], [1]], "A-B-A alternation down a column (horizontal stripes)"),
    ("horizontal_zebra_long", [[1], [-1], [1], [-1], [1]], "A-B-A-B-A alternation down a column"),
    ("vertical_zebra", [[1, -1, 1]], "A-B-A alternation along a row (vertical stripes)"),
    ("vertical_zebra_long", [[1, -1, 1, -1, 1]], "A-B-A-B-A alternation along a row"),
    ("diagonal_zebra_tl_br", [[1, 0, 0], [0, -1, 0], [0, 0, 1]], "Alternation along TL-BR"),
    ("diagonal_zebra_tr_bl", [[0, 0, 1], [0, -1, 0], [1, 0, 0]], "Alternation along TR-BL"),
    ("state_alternation", [[0.5, -1, 0.5], [-1, 2, -1], [0.5, -1, 0.5]], "Checker-like state alternation"),
    ("diagonal_alternation", [[1, 0, -1], [0, 0, 0], [-1, 0, 1]], "Alternation between diagonal pairs"),
    # Flow
    ("flow_tl_br", [[0, -1, 1], [-1, 0, 2], [1, 2, 0]], "Directional flow along TL-BR"),
    ("flow_tl_br_anti", [[1, 2, 0], [-1, 0, 2], [0, -1, 1]], "Flow opposing TL-BR"),
    ("flow_tr_bl", [[1, -1, 0], [2, 0, -1], [0, 2, 1]], "Directional flow along TR-BL"),
    ("flow_tr_bl_anti", [[0, 2, 1], [2, 0, -1], [1, -1, 0]], "Flow opposing TR-BL"),
    ("circular_flow", [[0, 1, 0], [-1, 0, 1], [0, -1, 0]], "Rotational flow around a cell"),
    ("flow_consistency", [[1, 0, -1], [0, 0, 0], [-1, 0, 1]], "3x3 flow consistency"),
    (
        "flow_consistency_wide",
        [[0, 0, 1, 0, 0], [0, 1, 0, -1, 0], [1, 0, -4, 0, 1], [0, -1, 0, 1, 0], [0, 0, 1, 0, 0]],
        "5x5 flow consistency",
    ),
    # Neighbour and coupling
    ("neighbor_sum", [[1, 1, 1], [1, 0, 1], [1, 1, 1]], "Occupied 8-neighbour count"),
    ("ising_near", [[0, 1, 0], [1, 0, 1], [0, 1, 0]], "4-connected coupling neighbours"),
    ("ising_far", [[1, 0, 1], [0, 0, 0], [1, 0, 1]], "Diagonal coupling neighbours"),
)

KERNELS: Mapping[str, Kernel] = MappingProxyType(
    {name: make_kernel(name, rows, desc) for name, rows, desc in _DEFINITIONS}
)


CONTINUITY_GROUPS = (
    KernelGroup("horizontal", ("horizontal_continuity", "horizontal_continuity_strong"), 0.6),
    KernelGroup("vertical", ("vertical_continuity", "vertical_continuity_strong"), 0.6),
    KernelGroup("diagonal", ("diagonal_continuity_tl_br", "diagonal_continuity_tr_bl"), 0.4),
    KernelGroup("overall", ("eight_way_continuity",), 0.8),
)

CORNER_GROUPS = (
    KernelGroup(
        "l_corners",
        ("top_left_corner", "top_right_corner", "bottom_left_corner", "bottom_right_corner"),
        0.8,
    ),
    KernelGroup("diagonal_conflicts", ("diagonal_conflict_tl", "diagonal_conflict_tr"), 0.5),
    KernelGroup("general", ("corner_detector",), 1.0),
)

FLOW_GROUPS = (
    KernelGroup("tl_br", ("flow_tl_br", "flow_tl_br_anti"), 0.5),
    KernelGroup("tr_bl", ("flow_tr_bl", "flow_tr_bl_anti"), 0.5),
    KernelGroup("circular", ("circular_flow",), 0.4),
    KernelGroup("consistency", ("flow_consistency", "flow_consistency_wide"), 0.6),
)

ZEBRA_GROUPS = (
    KernelGroup("horizontal", ("horizontal_zebra",), 0.5, projection="markers", penalty=1.0),
    KernelGroup("vertical", ("vertical_zebra",), 0.5, projection="markers", penalty=1.2),
    KernelGroup(
        "diagonal",
        ("diagonal_zebra_tl_br", "diagonal_zebra_tr_bl"),
        0.3,
        projection="markers",
        penalty=0.8,
    ),
    KernelGroup(
        "state_specific",
        ("state_alternation", "diagonal_alternation"),
        0.8,
        projection="grouped",
        penalty=1.5,
    ),
    KernelGroup(
        "long_range",
        ("horizontal_zebra_long", "vertical_zebra_long"),
        1.0,
        projection="grouped",
        penalty=1.0,
    ),
)


def get_kernel(name: str) -> Kernel:
    try:
        return KERNELS[name]
    except KeyError:
        raise KeyError(f"unknown kernel: {name!r}") from None


__all__ = [
    "CONTINUITY_GROUPS",
    "CORNER_GROUPS",
    "FLOW_GROUPS",
    "KERNELS",
    "Kernel",
    "KernelGroup",
    "MAX_RADIUS",
    "ZEBRA_GROUPS",
    "get_kernel",
    "make_kernel",
]

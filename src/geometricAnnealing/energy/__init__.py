"""Energy model: kernel registry, kernel terms, Ising coupling and totals."""

from .convolution import KernelResult, Window, aggregate_group, apply_kernel, extract_window
from .ising import (
    ising_energy,
    ising_site_energy,
    ising_swap_delta,
    local_ising_change,
    state_spin,
)
from .kernels import (
    CONTINUITY_GROUPS,
    CORNER_GROUPS,
    FLOW_GROUPS,
    KERNELS,
    MAX_RADIUS,
    ZEBRA_GROUPS,
    Kernel,
    KernelGroup,
    get_kernel,
)
from .system import EnergyBreakdown, EnergySystem
from .terms import (
    TermResult,
    detect_continuity_issues,
    detect_flow_inconsistencies,
    detect_sharp_corners,
    detect_zebra_patterns,
    neighbor_interaction_energy,
)
from .weights import TERMS, EnergyWeights

__all__ = [
    "CONTINUITY_GROUPS",
    "CORNER_GROUPS",
    "FLOW_GROUPS",
    "EnergyBreakdown",
    "EnergySystem",
    "EnergyWeights",
    "KERNELS",
    "Kernel",
    "KernelGroup",
    "KernelResult",
    "MAX_RADIUS",
    "TERMS",
    "TermResult",
    "Window",
    "ZEBRA_GROUPS",
    "aggregate_group",
    "apply_kernel",
    "detect_continuity_issues",
    "detect_flow_inconsistencies",
    "detect_sharp_corners",
    "detect_zebra_patterns",
    "extract_window",
    "get_kernel",
    "ising_energy",
    "ising_site_energy",
    "ising_swap_delta",
    "local_ising_change",
    "neighbor_interaction_energy",
    "state_spin",
]

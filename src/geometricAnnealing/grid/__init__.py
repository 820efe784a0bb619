"""Grid state model: cell states, bookkeeping and bulk patterns."""

from .box import BoundingBox
from .core import CellChange, GridCore, TARGET_AREA_FRACTION
from .patterns import PATTERNS, apply_pattern
from .states import (
    AREA_CONTRIBUTION,
    DIAGONAL_STATES,
    NON_EMPTY_STATES,
    CellState,
)

__all__ = [
    "AREA_CONTRIBUTION",
    "BoundingBox",
    "CellChange",
    "CellState",
    "DIAGONAL_STATES",
    "GridCore",
    "NON_EMPTY_STATES",
    "PATTERNS",
    "TARGET_AREA_FRACTION",
    "apply_pattern",
]

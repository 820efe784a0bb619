"""Windowed 2D correlation and threshold aggregation over kernel groups.

All evaluation runs on a :class:`Window`: the requested region plus a halo
of ``MAX_RADIUS`` cells copied out of the grid, with off-grid positions
marked ``OUTSIDE``. Because every kernel reads at most ``MAX_RADIUS`` cells
away, the responses computed for region cells equal the full-grid responses
at the same positions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Tuple

import numpy as np

from ..grid.box import BoundingBox
from .kernels import MAX_RADIUS, Kernel, KernelGroup, get_kernel
from .projections import OUTSIDE, PROJECTIONS, in_grid

PostProcessor = Callable[[np.ndarray, np.ndarray], np.ndarray]


@dataclass
class Window:
    """Region of a grid plus a halo, with ``OUTSIDE`` beyond the grid edge."""

    states: np.ndarray
    region: BoundingBox
    halo: int

    @property
    def origin(self) -> Tuple[int, int]:
        return self.region.min_row - self.halo, self.region.min_col - self.halo

    def inner(self, arr: np.ndarray) -> np.ndarray:
        h = self.halo
        return arr[h : h + self.region.height, h : h + self.region.width]

    def local_index(self, row: int, col: int) -> Tuple[int, int] | None:
        r0, c0 = self.origin
        r, c = row - r0, col - c0
        if 0 <= r < self.states.shape[0] and 0 <= c < self.states.shape[1]:
            return r, c
        return None

    def with_states(self, changes: Iterable[Tuple[int, int, int]]) -> "Window":
        """Copy with ``(row, col, state)`` grid coordinates rewritten."""
        states = self.states.copy()
        for row, col, state in changes:
            idx = self.local_index(row, col)
            if idx is not None and states[idx] != OUTSIDE:
                states[idx] = state
        return Window(states=states, region=self.region, halo=self.halo)


def extract_window(
    cells: np.ndarray,
    region: BoundingBox | None = None,
    halo: int = MAX_RADIUS,
) -> Window:
    """Copy ``region`` and its halo out of ``cells``."""
    size = cells.shape[0]
    if region is None:
        region = BoundingBox.full(size)
    elif region.min_row < 0 or region.min_col < 0 or region.max_row >= size or region.max_col >= size:
        raise ValueError(f"region {region} outside grid of size {size}")

    states = np.full(
        (region.height + 2 * halo, region.width + 2 * halo), OUTSIDE, dtype=np.int8
    )
    src = region.expand(halo, size)
    r0 = src.min_row - (region.min_row - halo)
    c0 = src.min_col - (region.min_col - halo)
    states[r0 : r0 + src.height, c0 : c0 + src.width] = cells[src.slices()]
    return Window(states=states, region=region, halo=halo)


def correlate(values: np.ndarray, matrix: np.ndarray, halo: int, shape: Tuple[int, int]) -> np.ndarray:
    """Correlate ``matrix`` over the inner ``shape`` of a halo-padded array."""
    height, width = shape
    kh, kw = matrix.shape
    r_off = halo - kh // 2
    c_off = halo - kw // 2
    out = np.zeros(shape, dtype=float)
    for (i, j), weight in np.ndenumerate(matrix):
        if weight != 0.0:
            out += weight * values[r_off + i : r_off + i + height, c_off + j : c_off + j + width]
    return out


@dataclass
class ProjectedWindow:
    """Window with lazily computed projections and footprint counts."""

    window: Window
    _projections: Dict[str, np.ndarray] = field(default_factory=dict, repr=False)
    _valid: Dict[Tuple[int, int], np.ndarray] = field(default_factory=dict, repr=False)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.window.region.shape

    def projection(self, name: str) -> np.ndarray:
        if name not in self._projections:
            if name not in PROJECTIONS:
                raise ValueError(f"projection must be one of: {', '.join(sorted(PROJECTIONS))}")
            self._projections[name] = PROJECTIONS[name](self.window.states)
        return self._projections[name]

    def valid_counts(self, kernel_shape: Tuple[int, int]) -> np.ndarray:
        """Number of in-grid cells under a kernel footprint, per region cell."""
        if kernel_shape not in self._valid:
            footprint = np.ones(kernel_shape, dtype=float)
            mask = in_grid(self.window.states)
            self._valid[kernel_shape] = correlate(mask, footprint, self.window.halo, self.shape)
        return self._valid[kernel_shape]

    def response(self, kernel: Kernel, projection: str, *, normalize: bool) -> np.ndarray:
        out = correlate(self.projection(projection), kernel.matrix, self.window.halo, self.shape)
        if normalize:
            out = out / np.sqrt(self.valid_counts(kernel.matrix.shape))
        return out

    def inner_states(self) -> np.ndarray:
        return self.window.inner(self.window.states)


@dataclass
class KernelResult:
    """Thresholded response of one kernel group over a region."""

    name: str
    score: float
    count: int
    response: np.ndarray

    def to_dict(self) -> Dict[str, object]:
        return {"name": self.name, "score": self.score, "count": self.count}


def aggregate_group(pw: ProjectedWindow, group: KernelGroup) -> KernelResult:
    """Max absolute response across the group, summed above threshold."""
    peak = np.zeros(pw.shape, dtype=float)
    for name in group.kernels:
        resp = pw.response(get_kernel(name), group.projection, normalize=group.normalize)
        np.maximum(peak, np.abs(resp), out=peak)
    hits = peak > group.threshold
    return KernelResult(
        name=group.name,
        score=float(peak[hits].sum()),
        count=int(hits.sum()),
        response=peak,
    )


def apply_kernel(
    cells: np.ndarray,
    kernel: Kernel | str,
    region: BoundingBox | None = None,
    *,
    projection: str = "occupancy",
    normalize: bool = False,
    post_processor: PostProcessor | None = None,
) -> np.ndarray:
    """Correlate one kernel over ``region`` (default: whole grid).

    Args:
        cells: Square state array.
        kernel: Kernel or registry name.
        region: Optional box restricting the output.
        projection: Numeric view of the states the kernel reads.
        normalize: Divide by ``sqrt`` of the in-grid footprint size.
        post_processor: ``f(response, states)`` applied per region cell.

    Returns:
        Array shaped like ``region``.
    """
    if isinstance(kernel, str):
        kernel = get_kernel(kernel)
    pw = ProjectedWindow(extract_window(cells, region))
    out = pw.response(kernel, projection, normalize=normalize)
    if post_processor is not None:
        out = post_processor(out, pw.inner_states())
    return out


__all__ = [
    "KernelResult",
    "PostProcessor",
    "ProjectedWindow",
    "Window",
    "aggregate_group",
    "apply_kernel",
    "correlate",
    "extract_window",
]

from __future__ import annotations

from pathlib import Path
from typing import Iterable, Mapping, Optional, Sequence

import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
import numpy as np
from matplotlib.colors import BoundaryNorm, ListedColormap

from .energy.kernels import Kernel
from .grid.states import CellState

DEFAULT_BG_COLOR = "#f7e9f0"  # very light pink
DEFAULT_FULL_COLOR = "#21b0ff"  # neon blue
DEFAULT_DIAG_COLORS = ("#7fd3ff", "#9fe0c8", "#ffc66b", "#ff9aa2")
DEFAULT_BORDER_COLOR = "#ffffff"


def _state_cmap(
    background_color: str, full_color: str, diag_colors: Sequence[str]
) -> tuple[ListedColormap, BoundaryNorm]:
    colors = ListedColormap([background_color, full_color, *diag_colors])
    norm = BoundaryNorm(np.arange(len(CellState) + 1) - 0.5, colors.N)
    return colors, norm


def plot_grid(
    cells: np.ndarray,
    title: str = "",
    *,
    background_color: str = DEFAULT_BG_COLOR,
    full_color: str = DEFAULT_FULL_COLOR,
    diag_colors: Sequence[str] = DEFAULT_DIAG_COLORS,
    border_color: str = DEFAULT_BORDER_COLOR,
    border_width: float = 0.2,
    legend: bool = True,
    ax: Optional[plt.Axes] = None,
    show: bool = True,
) -> plt.Axes:
    """Plot a state grid, one colour per cell state."""
    if ax is None:
        _, ax = plt.subplots(figsize=(6, 6))
    cmap, norm = _state_cmap(background_color, full_color, diag_colors)
    size = cells.shape[0]
    edges = np.arange(0, size + 1)
    ax.pcolormesh(
        edges,
        edges,
        cells,
        cmap=cmap,
        norm=norm,
        edgecolors=border_color,
        linewidth=border_width,
        shading="flat",
        antialiased=True,
    )
    ax.set_xlim(0, size)
    ax.set_ylim(size, 0)
    ax.set_aspect("equal")
    ax.set_xticks([])
    ax.set_yticks([])
    ax.set_title(title)
    if legend:
        handles = [
            mpatches.Patch(color=cmap(int(state)), label=state.name) for state in CellState
        ]
        ax.legend(handles=handles, loc="upper left", bbox_to_anchor=(1.02, 1.0), frameon=False)
    if show:
        plt.show()
    return ax


def plot_energy_history(
    history: Iterable[float],
    title: str = "Energy",
    *,
    ax: Optional[plt.Axes] = None,
    show: bool = True,
) -> plt.Axes:
    """Line plot of recorded energies against step index."""
    values = np.asarray(list(history), dtype=float)
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 3))
    ax.plot(np.arange(values.size), values, color=DEFAULT_FULL_COLOR, linewidth=1.2)
    ax.set_xlabel("step")
    ax.set_ylabel("energy")
    ax.set_title(title)
    if show:
        plt.show()
    return ax


def plot_kernels(
    kernels: Mapping[str, Kernel],
    *,
    ncols: int = 5,
    cmap: str = "coolwarm",
    show: bool = True,
) -> plt.Figure:
    """Grid of kernel matrices with their weights annotated."""
    names = sorted(kernels)
    nrows = max(1, int(np.ceil(len(names) / ncols)))
    fig, axes = plt.subplots(nrows, ncols, figsize=(2.2 * ncols, 2.4 * nrows))
    axes = np.atleast_1d(axes).ravel()
    for ax, name in zip(axes, names):
        matrix = kernels[name].matrix
        bound = max(1.0, float(np.abs(matrix).max()))
        ax.imshow(matrix, cmap=cmap, vmin=-bound, vmax=bound, interpolation="nearest")
        for (i, j), value in np.ndenumerate(matrix):
            ax.text(j, i, f"{value:g}", ha="center", va="center", fontsize=7)
        ax.set_title(name, fontsize=7)
        ax.set_xticks([])
        ax.set_yticks([])
    for ax in axes[len(names) :]:
        ax.axis("off")
    fig.tight_layout()
    if show:
        plt.show()
    return fig


def save_run_figure(
    cells: np.ndarray,
    history: Iterable[float],
    path: str | Path,
    *,
    title: str = "",
) -> Path:
    """Save the final grid next to its energy trace."""
    fig, (ax_grid, ax_energy) = plt.subplots(
        nrows=1, ncols=2, figsize=(12, 5), gridspec_kw={"width_ratios": [1, 1.4]}
    )
    plot_grid(cells, title=title, ax=ax_grid, show=False, legend=False)
    plot_energy_history(history, ax=ax_energy, show=False)
    fig.tight_layout()
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out, dpi=150)
    plt.close(fig)
    return out


__all__ = [
    "plot_energy_history",
    "plot_grid",
    "plot_kernels",
    "save_run_figure",
]

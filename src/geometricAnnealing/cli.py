from __future__ import annotations

import argparse
import logging
from pathlib import Path

from .annealing.config import METHODS
from .config import load_config
from .energy.kernels import CONTINUITY_GROUPS, CORNER_GROUPS, FLOW_GROUPS, KERNELS, ZEBRA_GROUPS
from .energy.weights import TERMS
from .grid.patterns import PATTERNS
from .session import AnnealingSession


def _build_anneal_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Anneal a geometric grid towards smooth shapes.")
    p.add_argument("--grid-size", type=int, default=32)
    p.add_argument("--pattern", choices=sorted(PATTERNS), default="blob")
    p.add_argument("--seed", type=int, default=0)
    p.add_argument("--method", choices=METHODS, default="annealing")
    p.add_argument("--steps", type=int, default=1000, help="Maximum annealing steps.")
    p.add_argument("--temperature", type=float, default=1.0)
    p.add_argument("--cooling-rate", type=float, default=0.995)
    p.add_argument("--min-temperature", type=float, default=0.001)
    for term in TERMS:
        p.add_argument(f"--w-{term}", type=float, default=None, help=f"{term} weight")
    p.add_argument("--json-out", type=Path, default=None)
    p.add_argument("--figure-out", type=Path, default=None)
    p.add_argument("--progress", action="store_true")
    p.add_argument("-v", "--verbose", action="store_true")
    return p


def main_anneal(argv: list[str] | None = None) -> None:
    args = _build_anneal_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    weights = {
        term: getattr(args, f"w_{term}")
        for term in TERMS
        if getattr(args, f"w_{term}") is not None
    }
    session = AnnealingSession(
        load_config(
            {
                "grid_size": args.grid_size,
                "initial_pattern": args.pattern,
                "seed": args.seed,
                "method": args.method,
                "max_steps": args.steps,
                "initial_temperature": args.temperature,
                "cooling_rate": args.cooling_rate,
                "min_temperature": args.min_temperature,
                "weights": weights,
            }
        )
    )
    result = session.run(progress=args.progress)

    stats = session.grid.get_grid_stats()
    print(f"steps:        {result.steps} ({result.termination_reason})")
    print(f"accepted:     {result.accepted} ({result.acceptance_rate:.1%})")
    print(f"energy:       {result.initial_energy:.4f} -> {result.final_energy:.4f}")
    print(f"temperature:  {session.engine.temperature:.6f}")
    print(f"area:         {stats['total_area']:.1f} / target {stats['target_area']}")

    if args.json_out is not None:
        result.save_json(args.json_out)
        print(f"Saved run to {args.json_out}")
    if args.figure_out is not None:
        from .plot_utils import save_run_figure

        save_run_figure(
            session.grid.cells,
            result.energy_history,
            args.figure_out,
            title=f"{args.grid_size}x{args.grid_size} after {result.steps} steps",
        )
        print(f"Saved figure to {args.figure_out}")


def main_kernel_report(argv: list[str] | None = None) -> None:
    p = argparse.ArgumentParser(description="List the energy kernels and their groups.")
    p.add_argument("--figure-out", type=Path, default=None)
    args = p.parse_args(argv)

    for label, groups in (
        ("continuity", CONTINUITY_GROUPS),
        ("zebra", ZEBRA_GROUPS),
        ("corners", CORNER_GROUPS),
        ("flow", FLOW_GROUPS),
    ):
        print(f"== {label} ==")
        for group in groups:
            print(
                f"  {group.name}: threshold={group.threshold} "
                f"penalty={group.penalty} projection={group.projection}"
            )
            for name in group.kernels:
                kernel = KERNELS[name]
                print(f"    {name} (radius {kernel.radius}): {kernel.description}")
                for row in kernel.matrix:
                    print("      " + " ".join(f"{v:5g}" for v in row))

    if args.figure_out is not None:
        import matplotlib.pyplot as plt

        from .plot_utils import plot_kernels

        fig = plot_kernels(KERNELS, show=False)
        args.figure_out.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(args.figure_out, dpi=120)
        plt.close(fig)
        print(f"Saved kernel figure to {args.figure_out}")


__all__ = ["main_anneal", "main_kernel_report"]

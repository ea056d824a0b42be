"""Monte Carlo analysis: run personas x seeds, aggregate statistics."""

from __future__ import annotations

import csv
import os
import statistics
import time
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from balance_sim.agents.persona import PERSONAS


@dataclass
class RunSummary:
    """Summary of a single simulation run."""
    persona: str
    seed: int
    outcome: str
    days: int
    final_hero_level: int
    final_plots: int
    final_gold: float
    final_energy: float
    max_depth: float
    helpers: int
    checkins: int
    actions_taken: int
    actions_blocked: int
    processes_completed: int
    dominant_activity: str
    elapsed_seconds: float


def run_single(persona: str, seed: int, mode: str = "first_victory", max_days: int = 35) -> RunSummary:
    """Run one simulation and return summary. Each call builds its own catalog and state."""
    from balance_sim.data.default_catalog import load_default_catalog
    from balance_sim.simulation.engine import SimulationEngine
    from balance_sim.simulation.run_config import RunConfig

    engine = SimulationEngine(
        load_default_catalog(),
        persona,
        RunConfig(mode=mode, max_days=max_days, seed=seed),
    )

    t0 = time.time()
    result = engine.run()
    elapsed = time.time() - t0

    final = result.final_state
    prog = final["progression"]

    activity: dict[str, int] = {}
    for s in engine.metrics.snapshots:
        for kind, count in s.activity_counts.items():
            activity[kind] = activity.get(kind, 0) + count
    dominant = max(activity, key=activity.get) if activity else "idle"

    return RunSummary(
        persona=result.persona,
        seed=seed,
        outcome=result.outcome,
        days=result.days,
        final_hero_level=prog["hero_level"],
        final_plots=prog["plots"],
        final_gold=final["resources"]["gold"]["current"],
        final_energy=final["resources"]["energy"]["current"],
        max_depth=prog["max_depth"],
        helpers=len(final["helpers"]),
        checkins=result.checkins,
        actions_taken=result.actions_taken,
        actions_blocked=result.actions_blocked,
        processes_completed=sum(final["processes_completed"].values()),
        dominant_activity=dominant,
        elapsed_seconds=elapsed,
    )


def stat_line(label: str, values: list[float], fmt: str = ".1f") -> str:
    if not values:
        return f"  {label}: no data"
    mn = min(values)
    mx = max(values)
    avg = statistics.mean(values)
    med = statistics.median(values)
    std = statistics.stdev(values) if len(values) > 1 else 0
    return f"  {label:<24s}  mean={avg:{fmt}}  median={med:{fmt}}  std={std:{fmt}}  min={mn:{fmt}}  max={mx:{fmt}}"


def monte_carlo(
    n_runs: int = 10,
    personas: Optional[list[str]] = None,
    mode: str = "first_victory",
    max_days: int = 35,
    workers: int = 1,
    output_dir: str = "results/monte_carlo",
) -> list[RunSummary]:
    """Run every persona over the same N seeds and report aggregate stats."""

    personas = personas or list(PERSONAS)
    os.makedirs(output_dir, exist_ok=True)
    rng = np.random.default_rng(0)
    seeds = [int(s) for s in rng.integers(0, 100_000, size=n_runs)]
    jobs = [(p, s) for p in personas for s in seeds]

    print(f"=== Monte Carlo Balance Simulation ===")
    print(f"Personas: {', '.join(personas)} | Runs/persona: {n_runs} | Mode: {mode} | Max days: {max_days}")
    print(f"Seeds: {seeds[:5]}{'...' if n_runs > 5 else ''}")
    print()

    total_t0 = time.time()
    results: list[RunSummary] = []

    if workers > 1:
        with ProcessPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(run_single, p, s, mode, max_days) for p, s in jobs]
            for i, future in enumerate(futures):
                result = future.result()
                results.append(result)
                _print_run(i, len(jobs), result)
    else:
        for i, (persona, seed) in enumerate(jobs):
            result = run_single(persona, seed, mode, max_days)
            results.append(result)
            _print_run(i, len(jobs), result)

    total_elapsed = time.time() - total_t0
    print(f"\nAll {len(jobs)} runs completed in {total_elapsed:.1f}s "
          f"({total_elapsed / max(1, len(jobs)):.1f}s avg)")

    # ── Aggregate Statistics ──────────────────────────────────────────
    print("\n" + "=" * 70)
    print("AGGREGATE RESULTS")
    print("=" * 70)

    for persona in personas:
        runs = [r for r in results if r.persona == persona]
        if not runs:
            continue
        print(f"\n{persona.upper()}")
        outcomes: dict[str, int] = {}
        for r in runs:
            outcomes[r.outcome] = outcomes.get(r.outcome, 0) + 1
        print("  Outcomes: " + ", ".join(
            f"{name} {count}/{len(runs)}" for name, count in sorted(outcomes.items(), key=lambda x: -x[1])
        ))
        wins = [r.days for r in runs if r.outcome == "victory"]
        print(stat_line("Days to victory", wins))
        print(stat_line("Final hero level", [r.final_hero_level for r in runs]))
        print(stat_line("Final plots", [r.final_plots for r in runs]))
        print(stat_line("Final gold", [r.final_gold for r in runs], ".0f"))
        print(stat_line("Max depth", [r.max_depth for r in runs], ".0f"))
        print(stat_line("Check-ins", [r.checkins for r in runs], ".0f"))
        print(stat_line("Actions taken", [r.actions_taken for r in runs], ".0f"))
        print(stat_line("Actions blocked", [r.actions_blocked for r in runs], ".0f"))

    # ── Export CSV ────────────────────────────────────────────────────
    csv_path = os.path.join(output_dir, "monte_carlo_results.csv")
    export_csv(results, csv_path)
    print(f"\nResults exported to {csv_path}")

    return results


def export_csv(results: list[RunSummary], csv_path: str) -> None:
    os.makedirs(os.path.dirname(csv_path) if os.path.dirname(csv_path) else ".", exist_ok=True)
    with open(csv_path, "w", newline="") as f:
        writer = csv.writer(f)
        writer.writerow([
            "persona", "seed", "outcome", "days", "hero_level", "plots",
            "gold", "energy", "max_depth", "helpers", "checkins",
            "actions", "blocked", "processes_completed",
            "dominant_activity", "elapsed_s",
        ])
        for r in results:
            writer.writerow([
                r.persona, r.seed, r.outcome, r.days, r.final_hero_level,
                r.final_plots, f"{r.final_gold:.0f}", f"{r.final_energy:.1f}",
                f"{r.max_depth:.0f}", r.helpers, r.checkins, r.actions_taken,
                r.actions_blocked, r.processes_completed,
                r.dominant_activity, f"{r.elapsed_seconds:.1f}",
            ])


def _print_run(index: int, total: int, result: RunSummary) -> None:
    print(
        f"  Run {index + 1:>3}/{total} | {result.persona:<15} | seed={result.seed:>5} | "
        f"{result.outcome:<8} day {result.days:>3} | "
        f"hero L{result.final_hero_level:>2} | plots={result.final_plots:>3} | "
        f"actions={result.actions_taken:>5} | {result.elapsed_seconds:.1f}s"
    )


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Monte Carlo balance simulation")
    parser.add_argument("--runs", type=int, default=10, help="Runs per persona")
    parser.add_argument("--personas", nargs="+", default=None, choices=sorted(PERSONAS), help="Personas to run")
    parser.add_argument("--mode", type=str, default="first_victory", choices=["first_victory", "fixed_days"])
    parser.add_argument("--max-days", type=int, default=35, help="Day limit per run")
    parser.add_argument("--workers", type=int, default=1, help="Worker processes")
    parser.add_argument("--output-dir", type=str, default="results/monte_carlo")
    args = parser.parse_args()

    monte_carlo(
        n_runs=args.runs,
        personas=args.personas,
        mode=args.mode,
        max_days=args.max_days,
        workers=args.workers,
        output_dir=args.output_dir,
    )

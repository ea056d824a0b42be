"""
Balance Simulation Runner
=========================
Play one persona through the default catalog, then show graphs and a summary.

Usage:
    python run_simulation.py                                  # balanced persona, seed 42
    python run_simulation.py --persona rusher --seed 7        # custom run
    python run_simulation.py --mode fixed_days --max-days 20  # fixed-length run
    python run_simulation.py --help                           # full options
"""

from __future__ import annotations

import argparse
import os
import sys
import time

# Ensure balance_sim package is importable
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))


def run() -> None:
    parser = argparse.ArgumentParser(
        description="Idle Farm Balance Simulation: Run & Visualize",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--persona", type=str, default="balanced", help="Persona preset name")
    parser.add_argument("--mode", type=str, default="first_victory", choices=["first_victory", "fixed_days"])
    parser.add_argument("--max-days", type=int, default=35, help="Day limit")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3])
    parser.add_argument("--no-show", action="store_true", help="Save the summary figure without opening a window")
    args = parser.parse_args()

    from balance_sim.core.config import MINUTES_PER_DAY
    from balance_sim.data.default_catalog import load_default_catalog
    from balance_sim.simulation.engine import SimulationEngine
    from balance_sim.simulation.run_config import RunConfig
    from balance_sim.viz.logger import SimLogger

    # ── Banner ──────────────────────────────────────────────────────────
    print("=" * 60)
    print("  Idle Farm Balance Simulation")
    print("=" * 60)
    print(f"  Persona    : {args.persona}")
    print(f"  Mode       : {args.mode}")
    print(f"  Max days   : {args.max_days}")
    print(f"  Seed       : {args.seed}")
    print(f"  Output     : {args.output_dir}/")
    print("=" * 60)
    print()

    # ── Initialize ──────────────────────────────────────────────────────
    print("Loading catalog and starting state...")
    t0 = time.time()
    catalog = load_default_catalog()
    engine = SimulationEngine(
        catalog,
        args.persona,
        RunConfig(mode=args.mode, max_days=args.max_days, seed=args.seed),
        logger=SimLogger(
            verbosity=args.verbosity,
            log_file=os.path.join(args.output_dir, "simulation.log"),
            stdout=(args.verbosity > 0),
        ),
    )
    print(f"  Done in {time.time() - t0:.2f}s")
    print(f"  Catalog   : {len(catalog)} records")
    print(f"  Systems   : {', '.join(s.name for s in engine.systems)}")
    print(f"  Victory   : {', '.join(str(c) for c in engine.run_config.conditions)}")
    print()

    # ── Run simulation with progress ────────────────────────────────────
    print(f"Simulating up to {args.max_days} days ...")
    t0 = time.time()
    total = args.max_days
    milestone = max(1, total // 10)
    last_day = 0

    try:
        while not engine.finished:
            engine.tick()
            day = engine.days_completed
            if day != last_day:
                last_day = day
                if day % milestone == 0 or engine.finished:
                    elapsed = time.time() - t0
                    rate = day / max(0.01, elapsed)
                    prog = engine.state.progression
                    print(f"  Day {day:>4}/{total}  |  Hero L{prog.hero_level}  |  "
                          f"Plots: {prog.plots}  |  Gold: {engine.state.amount('gold'):.0f}  |  "
                          f"{rate:.1f} days/s")
    except KeyboardInterrupt:
        print("\n  Interrupted by user.")

    result = engine.result()
    elapsed = time.time() - t0
    minutes = engine.state.minutes % MINUTES_PER_DAY
    print(f"\nSimulation finished in {elapsed:.1f}s: {result.outcome} "
          f"on day {engine.state.day} at {int(minutes) // 60:02d}:{int(minutes) % 60:02d}")
    print()

    # ── Export data ─────────────────────────────────────────────────────
    os.makedirs(args.output_dir, exist_ok=True)
    engine.metrics.export_csv(os.path.join(args.output_dir, "metrics.csv"))
    engine.logger.export_json(os.path.join(args.output_dir, "events.json"))
    engine.logger.close()

    # ── Print summary report ────────────────────────────────────────────
    print(engine.metrics.summary_report())

    # ── Save individual PNGs (archival) ─────────────────────────────────
    from balance_sim.viz.dashboard import Dashboard
    Dashboard.comprehensive_report(engine.metrics, args.output_dir)

    # ── Build interactive summary dashboard ─────────────────────────────
    print("Opening results dashboard ...")
    _show_summary_dashboard(engine.metrics, args.output_dir, show=not args.no_show)


# =====================================================================
# Summary dashboard: all key plots in one figure
# =====================================================================

def _show_summary_dashboard(metrics, output_dir: str, show: bool = True) -> None:
    """Create a combined 2x3 dashboard figure, save it and optionally display it."""
    import matplotlib.pyplot as plt
    import numpy as np

    snapshots = metrics.snapshots
    if not snapshots:
        print("  No data to display.")
        return

    days = [s.day for s in snapshots]

    fig, axes = plt.subplots(2, 3, figsize=(18, 10))
    fig.suptitle("Balance Simulation Results", fontsize=16, fontweight="bold")

    # ── 1. Energy & Water ───────────────────────────────────────────
    ax = axes[0, 0]
    ax.plot(days, [s.energy for s in snapshots], "g-", linewidth=2, label="Energy")
    ax.plot(days, [s.water for s in snapshots], "b-", linewidth=2, label="Water")
    ax.set_title("Energy & Water (end of day)")
    ax.legend(fontsize=7)
    ax.grid(True, alpha=0.3)

    # ── 2. Gold ─────────────────────────────────────────────────────
    ax = axes[0, 1]
    ax.plot(days, [s.gold for s in snapshots], "y-", linewidth=2)
    ax.set_title("Gold")
    ax.grid(True, alpha=0.3)

    # ── 3. Stockpiles ───────────────────────────────────────────────
    ax = axes[0, 2]
    ax.plot(days, [s.total_seeds for s in snapshots], "g-", linewidth=1.5, label="Seeds")
    ax.plot(days, [s.total_materials for s in snapshots], color="brown", linewidth=1.5, label="Materials")
    ax.set_title("Stockpiles")
    ax.legend(fontsize=7)
    ax.grid(True, alpha=0.3)

    # ── 4. Progression ──────────────────────────────────────────────
    ax = axes[1, 0]
    ax.plot(days, [s.hero_level for s in snapshots], "r-", linewidth=2, label="Hero level")
    ax.plot(days, [s.plots for s in snapshots], "g-", linewidth=1.5, label="Plots")
    ax.plot(days, [s.helpers for s in snapshots], "m-", linewidth=1.5, label="Helpers")
    ax.set_title("Progression")
    ax.legend(fontsize=7)
    ax.grid(True, alpha=0.3)

    # ── 5. Activity Distribution (pie, whole run) ───────────────────
    ax = axes[1, 1]
    totals: dict[str, int] = {}
    for s in snapshots:
        for kind, count in s.activity_counts.items():
            totals[kind] = totals.get(kind, 0) + count
    if totals:
        sorted_acts = sorted(totals.items(), key=lambda x: -x[1])
        top = sorted_acts[:8]
        if len(sorted_acts) > 8:
            top.append(("other", sum(c for _, c in sorted_acts[8:])))
        labels = [a.replace("_", " ").title() for a, _ in top]
        sizes = [c for _, c in top]
        wedge_colors = plt.cm.Set3.colors[:len(top)]
        ax.pie(sizes, labels=labels, autopct="%1.0f%%", textprops={"fontsize": 8},
               colors=wedge_colors)
    ax.set_title("Actions (Whole Run)")

    # ── 6. Check-ins & Blocked Actions ──────────────────────────────
    ax = axes[1, 2]
    ax.bar(days, [s.checkins for s in snapshots], color="c", alpha=0.6, label="Check-ins")
    ax.plot(days, np.cumsum([s.actions_blocked for s in snapshots]), "r-", linewidth=1.5, label="Blocked (cum.)")
    ax.set_title("Check-ins per Day")
    ax.legend(fontsize=7)
    ax.grid(True, alpha=0.3)

    # ── Layout & save ───────────────────────────────────────────────
    for ax in axes.flat:
        ax.set_xlabel("Day")

    plt.tight_layout(rect=[0, 0, 1, 0.95])

    dashboard_path = os.path.join(output_dir, "summary_dashboard.png")
    fig.savefig(dashboard_path, dpi=150, bbox_inches="tight")
    print(f"  Dashboard saved to {dashboard_path}")

    if show:
        # Blocks until user closes the window
        print("  Close the graph window to exit.")
        plt.show()
    else:
        plt.close(fig)


if __name__ == "__main__":
    run()

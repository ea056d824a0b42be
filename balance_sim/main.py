"""Command-line entry point for a single persona balance run."""

from __future__ import annotations

import argparse
import json
import os
import time
from collections import Counter
from typing import Optional


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Play one persona through the default catalog and report how far it got",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--persona", type=str, default="balanced", help="Persona preset name")
    parser.add_argument("--list-personas", action="store_true", help="Print the persona presets and exit")
    parser.add_argument("--mode", type=str, default="first_victory", choices=["first_victory", "fixed_days"])
    parser.add_argument("--max-days", type=int, default=35, help="Day limit")
    parser.add_argument("--victory", nargs="+", default=None, help="Victory conditions, e.g. hero_level>=10")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducibility")
    parser.add_argument("--tick-minutes", type=float, default=1.0, help="Simulated minutes per tick")
    parser.add_argument("--verbosity", type=int, default=0, choices=[0, 1, 2, 3], help="Log verbosity level")
    parser.add_argument("--output-dir", type=str, default="results", help="Output directory for results")
    parser.add_argument("--no-dashboard", action="store_true", help="Disable real-time dashboard")
    parser.add_argument("--log-file", type=str, default=None, help="Path to log file")
    return parser


def describe_persona(persona: "Persona") -> str:  # noqa: F821
    liked = sorted(persona.preferences.items(), key=lambda kv: -kv[1])[:2]
    return (
        f"{persona.name:<16} efficiency={persona.efficiency:.2f} risk={persona.risk_tolerance:.2f} "
        f"sessions={persona.weekday_sessions}/{persona.weekend_sessions} every {persona.checkin_interval}m "
        f"prefers {', '.join(domain for domain, _ in liked)}"
    )


def blocked_reasons(events: list[dict], top: int = 5) -> list[tuple[str, int]]:
    """Most frequent first reasons among blocked actions."""
    reasons: Counter = Counter()
    for event in events:
        if event["type"] == "action_blocked" and event["data"].get("reasons"):
            reasons[event["data"]["reasons"][0]] += 1
    return reasons.most_common(top)


def main(argv: Optional[list[str]] = None) -> None:
    args = build_parser().parse_args(argv)

    # Import here to allow --help without loading numpy and matplotlib
    from balance_sim.agents.persona import PERSONAS, get_persona
    from balance_sim.data.default_catalog import load_default_catalog
    from balance_sim.simulation.engine import SimulationEngine
    from balance_sim.simulation.run_config import RunConfig
    from balance_sim.viz.logger import SimLogger

    if args.list_personas:
        for persona in PERSONAS.values():
            print(describe_persona(persona))
        return

    persona = get_persona(args.persona)
    run_config = RunConfig(
        mode=args.mode,
        max_days=args.max_days,
        victory=args.victory or [],
        seed=args.seed,
        tick_minutes=args.tick_minutes,
    )
    logger = SimLogger(
        verbosity=args.verbosity,
        log_file=args.log_file or os.path.join(args.output_dir, "simulation.log"),
        stdout=(args.verbosity > 0),
    )
    catalog = load_default_catalog()
    engine = SimulationEngine(catalog, persona, run_config, logger=logger)

    print(f"=== Idle Farm Balance Simulation (seed {args.seed}) ===")
    print(describe_persona(persona))
    print(f"{args.mode}, at most {args.max_days} days, victory on {' and '.join(run_config.victory)}")
    print(f"Catalog: {len(catalog)} records")
    print()

    dashboard = None
    if not args.no_dashboard:
        from balance_sim.viz.dashboard import Dashboard
        dashboard = Dashboard(f"Balance Simulation ({persona.name})")
        engine.set_dashboard_callback(dashboard.update)

    t0 = time.time()
    result = engine.run()
    elapsed = time.time() - t0
    print(f"Outcome: {result.outcome} on day {result.days} ({elapsed:.2f}s wall clock)")
    print(f"Check-ins: {result.checkins} | actions: {result.actions_taken} | blocked: {result.actions_blocked}")
    for reason, count in blocked_reasons(result.events):
        print(f"  blocked {count:>4}x: {reason}")

    os.makedirs(args.output_dir, exist_ok=True)
    engine.metrics.export_csv(os.path.join(args.output_dir, "metrics.csv"))
    with open(os.path.join(args.output_dir, "run_result.json"), "w", encoding="utf-8") as f:
        json.dump(
            {
                "persona": result.persona,
                "seed": result.seed,
                "outcome": result.outcome,
                "days": result.days,
                "final_state": result.final_state,
            },
            f,
            indent=2,
            default=str,
        )

    from balance_sim.viz.dashboard import Dashboard as DashClass
    DashClass.comprehensive_report(engine.metrics, args.output_dir)

    print()
    print(engine.metrics.summary_report())

    if dashboard:
        dashboard.save(os.path.join(args.output_dir, "dashboard_final.png"))
        dashboard.close()

    engine.logger.export_json(os.path.join(args.output_dir, "events.json"))
    engine.logger.close()
    print(f"\nAll results saved to {args.output_dir}/")


if __name__ == "__main__":
    main()

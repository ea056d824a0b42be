"""Daily data collection, run statistics and export."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class DailySnapshot:
    """A snapshot of run state at the end of one day."""

    day: int = 0
    energy: float = 0.0
    water: float = 0.0
    gold: float = 0.0
    total_seeds: int = 0
    total_materials: int = 0
    plots: int = 0
    hero_level: int = 1
    max_depth: float = 0.0
    helpers: int = 0
    processes_completed: int = 0
    actions_taken: int = 0
    actions_blocked: int = 0
    checkins: int = 0
    activity_counts: dict[str, int] = field(default_factory=dict)


class MetricsCollector:
    """Collects time-series data every day."""

    def __init__(self) -> None:
        self.snapshots: list[DailySnapshot] = []
        self._daily_actions: int = 0
        self._daily_blocked: int = 0
        self._daily_checkins: int = 0
        self._daily_activities: dict[str, int] = {}

    def record_action(self, kind: str) -> None:
        self._daily_actions += 1
        self._daily_activities[kind] = self._daily_activities.get(kind, 0) + 1

    def record_blocked(self) -> None:
        self._daily_blocked += 1

    def record_checkin(self) -> None:
        self._daily_checkins += 1

    def collect_daily(self, day: int, state: "GameState") -> DailySnapshot:  # noqa: F821
        """Collect all metrics for this day and reset the daily counters."""
        prog = state.progression
        snapshot = DailySnapshot(
            day=day,
            energy=state.amount("energy"),
            water=state.amount("water"),
            gold=state.amount("gold"),
            total_seeds=state.total_seeds(),
            total_materials=sum(state.materials.values()),
            plots=prog.plots,
            hero_level=prog.hero_level,
            max_depth=prog.max_depth,
            helpers=len(state.helpers),
            processes_completed=sum(state.processes_completed.values()),
            actions_taken=self._daily_actions,
            actions_blocked=self._daily_blocked,
            checkins=self._daily_checkins,
            activity_counts=dict(self._daily_activities),
        )
        self.snapshots.append(snapshot)

        # Reset daily counters
        self._daily_actions = 0
        self._daily_blocked = 0
        self._daily_checkins = 0
        self._daily_activities = {}

        return snapshot

    def export_csv(self, filepath: str) -> None:
        """Export all snapshots to CSV."""
        os.makedirs(os.path.dirname(filepath) if os.path.dirname(filepath) else ".", exist_ok=True)
        with open(filepath, "w", newline="") as f:
            writer = csv.writer(f)
            writer.writerow([
                "day", "energy", "water", "gold", "seeds", "materials",
                "plots", "hero_level", "max_depth", "helpers",
                "processes_completed", "actions", "blocked", "checkins",
            ])
            for s in self.snapshots:
                writer.writerow([
                    s.day, f"{s.energy:.1f}", f"{s.water:.1f}", f"{s.gold:.0f}",
                    s.total_seeds, s.total_materials, s.plots, s.hero_level,
                    f"{s.max_depth:.0f}", s.helpers, s.processes_completed,
                    s.actions_taken, s.actions_blocked, s.checkins,
                ])

    def summary_report(self, start_day: int = 0, end_day: Optional[int] = None) -> str:
        """Generate a human-readable summary of the run period."""
        relevant = [
            s for s in self.snapshots
            if s.day >= start_day and (end_day is None or s.day <= end_day)
        ]
        if not relevant:
            return "No data available for the specified period."

        first = relevant[0]
        last = relevant[-1]
        total_actions = sum(s.actions_taken for s in relevant)
        total_blocked = sum(s.actions_blocked for s in relevant)
        total_checkins = sum(s.checkins for s in relevant)

        lines = [
            f"=== Run Summary: Day {first.day} to Day {last.day} ===",
            f"Duration: {last.day - first.day + 1} days",
            "",
            f"Activity:",
            f"  Check-ins: {total_checkins}",
            f"  Actions taken: {total_actions}",
            f"  Actions blocked: {total_blocked}",
            f"  Avg actions/day: {total_actions / max(1, len(relevant)):.1f}",
            f"  Processes completed: {last.processes_completed}",
            "",
            f"Final State:",
            f"  Energy: {last.energy:.1f}",
            f"  Water: {last.water:.1f}",
            f"  Gold: {last.gold:.0f}",
            f"  Seeds: {last.total_seeds}",
            f"  Materials: {last.total_materials}",
            f"  Plots: {first.plots} -> {last.plots}",
            f"  Hero level: {first.hero_level} -> {last.hero_level}",
            f"  Max depth: {last.max_depth:.0f}m",
            f"  Helpers: {last.helpers}",
        ]

        totals: dict[str, int] = {}
        for s in relevant:
            for kind, count in s.activity_counts.items():
                totals[kind] = totals.get(kind, 0) + count
        if totals:
            lines.append("")
            lines.append("Action Distribution:")
            for kind, count in sorted(totals.items(), key=lambda x: -x[1]):
                pct = count / max(1, total_actions) * 100
                lines.append(f"  {kind}: {count} ({pct:.0f}%)")

        return "\n".join(lines)

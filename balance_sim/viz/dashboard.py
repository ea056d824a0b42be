"""Live matplotlib dashboard and post-run plots for a balance run."""

from __future__ import annotations

import os

import matplotlib.pyplot as plt
import numpy as np

from balance_sim.core.config import DASHBOARD_UPDATE_INTERVAL

# panel key -> (title, [(snapshot attribute, style, legend label)])
_LINE_PANELS: dict[str, tuple[str, list[tuple[str, str, str]]]] = {
    "energy": ("Energy (end of day)", [("energy", "g-", "")]),
    "water": ("Water (end of day)", [("water", "b-", "")]),
    "gold": ("Gold (end of day)", [("gold", "y-", "")]),
    "progress": (
        "Progression",
        [("plots", "g-", "Plots"), ("hero_level", "r-", "Hero level"), ("helpers", "m-", "Helpers")],
    ),
}

_PIE_SLICES = 8


def _plot_series(ax, days: list[int], snapshots: list, series: list[tuple[str, str, str]]) -> None:
    for attr, style, label in series:
        ax.plot(days, [getattr(s, attr) for s in snapshots], style, label=label or None, linewidth=1.5)
    if any(label for _, _, label in series):
        ax.legend(fontsize=8)


def _top_counts(counts: dict[str, int], limit: int) -> list[tuple[str, int]]:
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    top = ranked[:limit]
    if len(ranked) > limit:
        top.append(("other", sum(c for _, c in ranked[limit:])))
    return top


def run_totals(snapshots: list) -> dict[str, int]:
    """Action counts summed over every recorded day."""
    totals: dict[str, int] = {}
    for s in snapshots:
        for kind, count in s.activity_counts.items():
            totals[kind] = totals.get(kind, 0) + count
    return totals


class Dashboard:
    """Six live panels, redrawn every ``DASHBOARD_UPDATE_INTERVAL`` days."""

    def __init__(self, title: str = "Balance Simulation") -> None:
        self.title = title
        self._fig = None
        self._axes: dict = {}
        self._update_counter = 0

    def initialize(self) -> None:
        plt.ion()
        self._fig, axes = plt.subplots(2, 3, figsize=(17, 9))
        self._fig.suptitle(self.title, fontsize=14)
        keys = list(_LINE_PANELS) + ["mix", "actions"]
        self._axes = dict(zip(keys, axes.flat))
        for ax in axes.flat:
            ax.grid(True, alpha=0.3)
        plt.tight_layout()
        plt.pause(0.01)

    def update(self, day: int, metrics: "MetricsCollector") -> None:  # noqa: F821
        """Redraw from the collector's daily snapshots."""
        self._update_counter += 1
        if self._update_counter % DASHBOARD_UPDATE_INTERVAL != 0:
            return
        if self._fig is None:
            self.initialize()

        snapshots = metrics.snapshots
        if not snapshots:
            return
        days = [s.day for s in snapshots]

        for key, (title, series) in _LINE_PANELS.items():
            ax = self._axes[key]
            ax.clear()
            ax.set_title(title)
            _plot_series(ax, days, snapshots, series)
            ax.grid(True, alpha=0.3)

        ax = self._axes["mix"]
        ax.clear()
        ax.set_title("Actions Today")
        top = _top_counts(snapshots[-1].activity_counts, _PIE_SLICES)
        if top:
            ax.pie([c for _, c in top], labels=[k for k, _ in top], autopct="%1.0f%%", textprops={"fontsize": 7})

        ax = self._axes["actions"]
        ax.clear()
        ax.set_title("Cumulative Actions")
        ax.plot(days, np.cumsum([s.actions_taken for s in snapshots]), "c-", label="Taken", linewidth=1.5)
        ax.plot(days, np.cumsum([s.actions_blocked for s in snapshots]), "r--", label="Blocked", linewidth=1)
        ax.legend(fontsize=8)
        ax.grid(True, alpha=0.3)

        self._fig.suptitle(f"{self.title}: Day {day}", fontsize=14)
        plt.tight_layout()
        plt.pause(0.01)

    def save(self, filepath: str) -> None:
        if self._fig:
            self._fig.savefig(filepath, dpi=150, bbox_inches="tight")

    def close(self) -> None:
        if self._fig:
            plt.close(self._fig)
            self._fig = None

    # ------------------------------------------------------------------
    # Post-run static plots
    # ------------------------------------------------------------------

    @staticmethod
    def comprehensive_report(metrics: "MetricsCollector", output_dir: str) -> list[str]:  # noqa: F821
        """Write one PNG per chart into ``output_dir`` and return their paths."""
        snapshots = metrics.snapshots
        if not snapshots:
            return []
        os.makedirs(output_dir, exist_ok=True)

        days = [s.day for s in snapshots]
        written: list[str] = []

        charts = [
            ("resources.png", "Energy and Water Over Time", "Units",
             [("energy", "g-", "Energy"), ("water", "b-", "Water")]),
            ("gold.png", "Gold Over Time", "Gold", [("gold", "y-", "")]),
            ("progression.png", "Progression Over Time", "",
             [("plots", "g-", "Plots"), ("hero_level", "r-", "Hero level"), ("helpers", "m-", "Helpers")]),
            ("mining_depth.png", "Deepest Mining Depth", "Depth (m)", [("max_depth", "k-", "")]),
        ]
        for name, title, ylabel, series in charts:
            fig, ax = plt.subplots(figsize=(10, 5))
            _plot_series(ax, days, snapshots, series)
            ax.set_title(title)
            ax.set_xlabel("Day")
            if ylabel:
                ax.set_ylabel(ylabel)
            ax.grid(True, alpha=0.3)
            path = os.path.join(output_dir, name)
            fig.savefig(path, dpi=150)
            plt.close(fig)
            written.append(path)

        totals = run_totals(snapshots)
        if totals:
            kinds = sorted(totals, key=lambda k: (-totals[k], k))
            x = np.arange(len(kinds))
            fig, ax = plt.subplots(figsize=(10, 5))
            ax.bar(x, [totals[k] for k in kinds], color="c")
            ax.set_xticks(x)
            ax.set_xticklabels(kinds, rotation=45, ha="right", fontsize=8)
            ax.set_title("Actions by Type")
            ax.set_ylabel("Count")
            ax.grid(True, alpha=0.3, axis="y")
            fig.tight_layout()
            path = os.path.join(output_dir, "activity_mix.png")
            fig.savefig(path, dpi=150)
            plt.close(fig)
            written.append(path)

        print(f"Reports saved to {output_dir}/")
        return written

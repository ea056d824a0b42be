import csv
import json
import os

import matplotlib

matplotlib.use("Agg")

from balance_sim.monte_carlo import export_csv, run_single, stat_line
from balance_sim.simulation.metrics import MetricsCollector
from balance_sim.viz.dashboard import Dashboard
from balance_sim.viz.logger import SimLogger
from tests.helpers.builders import build_state


def test_flush_day_filters_by_verbosity(tmp_path) -> None:
    log_file = tmp_path / "logs" / "run.log"
    logger = SimLogger(verbosity=1, log_file=str(log_file), stdout=False)

    logger.log(SimLogger.OUTCOME, "run finished", day=1, minute=61)
    logger.log(SimLogger.ACTION, "planted carrot", day=1, minute=62)
    logger.log(SimLogger.DECISION, "check-in #3", day=1, minute=63)
    logger.flush_day(1)
    logger.close()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert lines == [
        "[Day   1 01:01] [OUTCOME ] run finished",
        "[Day   1 01:02] [ACTION  ] planted carrot",
    ]
    # filtered lines are still kept as entries
    assert len(logger.entries) == 3


def test_narrative_and_json_export(tmp_path) -> None:
    logger = SimLogger(verbosity=0, stdout=False)
    logger.log(SimLogger.ACTION, "bought hoe", day=2, minute=1500, action="buy")

    assert logger.get_narrative(1) == "Day 1: Nothing notable happened."
    assert "[ACTION] bought hoe" in logger.get_narrative(2)

    path = tmp_path / "events.json"
    logger.export_json(str(path))
    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == [{"day": 2, "minute": 1500, "category": "ACTION", "message": "bought hoe", "data": {"action": "buy"}}]


def test_collect_daily_resets_counters() -> None:
    metrics = MetricsCollector()
    state = build_state(starting_gold=120, starting_seeds={"carrot": 4})

    metrics.record_checkin()
    metrics.record_action("plant")
    metrics.record_action("plant")
    metrics.record_blocked()
    first = metrics.collect_daily(1, state)
    second = metrics.collect_daily(2, state)

    assert first.actions_taken == 2
    assert first.actions_blocked == 1
    assert first.checkins == 1
    assert first.activity_counts == {"plant": 2}
    assert first.gold == 120
    assert first.total_seeds == 4
    assert second.actions_taken == 0
    assert second.activity_counts == {}
    assert [s.day for s in metrics.snapshots] == [1, 2]


def test_metrics_export_and_summary(tmp_path) -> None:
    metrics = MetricsCollector()
    state = build_state()
    metrics.record_action("harvest")
    metrics.collect_daily(1, state)

    path = tmp_path / "metrics.csv"
    metrics.export_csv(str(path))
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[0][:4] == ["day", "energy", "water", "gold"]
    assert len(rows) == 2

    report = metrics.summary_report()
    assert "Day 1 to Day 1" in report
    assert "Action Distribution:" in report
    assert "harvest: 1 (100%)" in report
    assert metrics.summary_report(start_day=5) == "No data available for the specified period."


def test_comprehensive_report_writes_plots(tmp_path) -> None:
    metrics = MetricsCollector()
    state = build_state()
    for day in (1, 2):
        metrics.record_action("water")
        metrics.collect_daily(day, state)

    written = Dashboard.comprehensive_report(metrics, str(tmp_path))

    assert written
    assert all(os.path.exists(p) for p in written)
    assert Dashboard.comprehensive_report(MetricsCollector(), str(tmp_path)) == []


def test_stat_line_handles_empty_and_single_values() -> None:
    assert stat_line("Days", []) == "  Days: no data"
    assert "std=0.0" in stat_line("Days", [4.0])


def test_monte_carlo_single_run_summary(tmp_path) -> None:
    summary = run_single("casual", seed=9, mode="fixed_days", max_days=1)

    assert summary.persona == "casual"
    assert summary.outcome == "max_days"
    assert summary.days == 1
    assert summary.checkins > 0

    path = tmp_path / "mc" / "results.csv"
    export_csv([summary], str(path))
    with open(path, newline="") as f:
        rows = list(csv.reader(f))
    assert rows[1][:4] == ["casual", "9", "max_days", "1"]


def test_game_events_are_mirrored_with_their_category() -> None:
    logger = SimLogger(verbosity=0, stdout=False)
    state = build_state()
    state.events.subscribe(logger.log_event)

    state.emit("overflow", "water capped at 50")
    state.emit("hero_rested", "hero back to full health")

    assert [e.category for e in logger.entries] == [SimLogger.RESOURCE, SimLogger.SYSTEM]
    assert logger.entries[0].day == 1
    assert logger.entries[0].data["event_type"] == "overflow"
    assert logger.category_counts(1) == {SimLogger.RESOURCE: 1, SimLogger.SYSTEM: 1}
